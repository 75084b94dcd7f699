# cafe_orders/models/analytics.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List
from .base import CamelModel
from .order import OrderStatus

class Granularity(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

class SalesBucket(CamelModel):
    label: str
    start: datetime
    order_count: int = 0
    revenue: Decimal = Decimal(0)

class StatusCount(CamelModel):
    status: OrderStatus
    count: int

class AnalyticsReport(CamelModel):
    """Sales rollup over one reporting window"""
    granularity: Granularity
    window_start: datetime
    window_end: datetime
    total_revenue: Decimal
    total_orders: int
    paid_orders: int
    average_order_value: Decimal
    series: List[SalesBucket]
    # every status, zero counts included
    status_counts: Dict[OrderStatus, int]
    status_breakdown: List[StatusCount]
