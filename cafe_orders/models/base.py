# cafe_orders/models/base.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Base model exchanged with API clients as camelCase JSON"""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )

class TimeStampedModel(CamelModel):
    """Base model with timestamp fields"""
    created_at: datetime
    updated_at: Optional[datetime] = None
