# cafe_orders/models/order.py
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import Field
from .base import CamelModel, TimeStampedModel

class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"

class PaymentMethod(str, Enum):
    CASH = "cash"
    ONLINE = "online"
    BOTH = "both"

class OrderType(str, Enum):
    ONLINE = "online"
    MANUAL = "manual"

class OrderItem(CamelModel):
    """Line item with the product price captured at order time"""
    id: Optional[int] = None
    order_id: Optional[int] = None
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    quantity: int
    price_at_time: Decimal

    @property
    def total_price(self) -> Decimal:
        return self.price_at_time * self.quantity

class Order(TimeStampedModel):
    """Order with its line items"""
    id: int
    user_id: str
    total_amount: Decimal
    payment_method: PaymentMethod
    cash_amount: Optional[Decimal] = None
    online_amount: Optional[Decimal] = None
    status: OrderStatus
    payment_status: PaymentStatus
    order_type: OrderType = OrderType.ONLINE
    items: List[OrderItem] = []

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def is_terminal(self) -> bool:
        return self.status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

# per line item
MAX_ITEM_QUANTITY = 1000
# largest amount a NUMERIC(10, 2) column holds
MAX_ORDER_TOTAL = Decimal("99999999.99")

class OrderItemRequest(CamelModel):
    product_id: int
    quantity: int = Field(gt=0, le=MAX_ITEM_QUANTITY)

class CreateOrderCommand(CamelModel):
    """Validated body of an order creation request"""
    items: List[OrderItemRequest]
    payment_method: PaymentMethod = PaymentMethod.CASH
    cash_amount: Optional[Decimal] = Field(default=None, ge=0)
    online_amount: Optional[Decimal] = Field(default=None, ge=0)
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    order_type: OrderType = OrderType.ONLINE

class UpdateOrderStatusCommand(CamelModel):
    status: OrderStatus
    payment_status: Optional[PaymentStatus] = None
