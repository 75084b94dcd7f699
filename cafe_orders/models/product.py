# cafe_orders/models/product.py
from decimal import Decimal
from typing import Optional
from pydantic import Field
from .base import CamelModel, TimeStampedModel

class Product(TimeStampedModel):
    """Menu item sold by the cafe"""
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    category: str
    stock_quantity: Optional[int] = None
    in_stock: bool = True

class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    in_stock: bool = True

class ProductUpdate(CamelModel):
    """Partial product update; only fields sent by the client are applied"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    in_stock: Optional[bool] = None
