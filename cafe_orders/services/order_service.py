# cafe_orders/services/order_service.py
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Set
from ..database import BaseDatabase
from ..exceptions import (
    EmptyOrderError,
    InvalidTransitionError,
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError
)
from ..models.order import (
    CreateOrderCommand,
    MAX_ORDER_TOTAL,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    UpdateOrderStatusCommand
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

INITIAL_STATUSES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}


def validate_transition(current: OrderStatus, requested: OrderStatus,
                        payment_status: Optional[PaymentStatus] = None):
    """Raise InvalidTransitionError unless ``current -> requested`` is allowed.

    Staying in the same non-terminal status is accepted only together with a
    payment status change, e.g. marking a confirmed order as paid.
    """
    if requested in ALLOWED_TRANSITIONS[current]:
        return
    if requested == current and payment_status is not None and ALLOWED_TRANSITIONS[current]:
        return
    logger.warning(f"Rejected status change {current.value} -> {requested.value}")
    raise InvalidTransitionError(current.value, requested.value)


class OrderService:
    """Order creation and status lifecycle"""

    def __init__(self, db: BaseDatabase):
        self.db = db

    async def create_order(self, user_id: str, command: CreateOrderCommand) -> Order:
        """Create an order and its items in one transaction.

        Prices are read from the catalog inside the transaction and copied onto
        each item; the order total is their sum. Any failure leaves no rows.
        """
        if not command.items:
            raise EmptyOrderError()

        if command.status not in INITIAL_STATUSES:
            raise ValidationError(
                f"Orders cannot be created as '{command.status.value}'",
                field="status"
            )

        async with self.db.transaction() as conn:
            products = await conn.get_products(item.product_id for item in command.items)

            total_amount = Decimal(0)
            order_items = []

            for item in command.items:
                product = products.get(item.product_id)
                if not product:
                    raise ProductNotFoundError(item.product_id)

                price = Decimal(product['price'])
                total_amount += price * item.quantity

                order_items.append({
                    'product_id': item.product_id,
                    'product_name': product['name'],
                    'quantity': item.quantity,
                    'price_at_time': price
                })

            if total_amount > MAX_ORDER_TOTAL:
                raise ValidationError(
                    f"Order total exceeds {MAX_ORDER_TOTAL}",
                    field="items"
                )

            self._check_payment_split(command, total_amount)

            order = await conn.insert_order({
                'user_id': user_id,
                'total_amount': total_amount,
                'payment_method': command.payment_method.value,
                'cash_amount': command.cash_amount,
                'online_amount': command.online_amount,
                'status': command.status.value,
                'payment_status': command.payment_status.value,
                'order_type': command.order_type.value
            })

            for item in order_items:
                await conn.insert_order_item(order['id'], item)

            created = await conn.get_order(order['id'])

        logger.info(
            f"Order {order['id']} created for {user_id}: "
            f"{len(order_items)} items, total {total_amount}"
        )
        return Order.model_validate(created)

    @staticmethod
    def _check_payment_split(command: CreateOrderCommand, total_amount: Decimal):
        has_split = command.cash_amount is not None or command.online_amount is not None
        if not has_split:
            return

        if command.payment_method != PaymentMethod.BOTH:
            raise ValidationError(
                "Cash/online amounts are only accepted for split payments",
                field="paymentMethod"
            )

        if command.cash_amount is None or command.online_amount is None:
            raise ValidationError(
                "Split payments need both cash and online amounts",
                field="cashAmount"
            )

        if command.cash_amount + command.online_amount != total_amount:
            raise ValidationError(
                f"Split amounts must add up to the order total {total_amount}",
                field="cashAmount"
            )

    async def get_order(self, order_id: int) -> Order:
        async with self.db.acquire() as conn:
            order = await conn.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return Order.model_validate(order)

    async def list_orders(self, user_id: Optional[str] = None,
                          status: Optional[OrderStatus] = None) -> List[Order]:
        """Orders with items, newest first"""
        async with self.db.acquire() as conn:
            orders = await conn.list_orders(
                user_id=user_id,
                status=status.value if status else None
            )
        return [Order.model_validate(o) for o in orders]

    async def update_order_status(self, order_id: int,
                                  command: UpdateOrderStatusCommand) -> Order:
        """Move an order along its lifecycle, optionally setting payment status"""
        async with self.db.transaction() as conn:
            if not await conn.lock_order(order_id):
                raise OrderNotFoundError(order_id)
            order = await conn.get_order(order_id)

            current = OrderStatus(order['status'])
            validate_transition(current, command.status, command.payment_status)

            updated = await conn.update_order_status(
                order_id,
                command.status.value,
                command.payment_status.value if command.payment_status else None
            )

        logger.info(
            f"Order {order_id} status {current.value} -> {command.status.value}"
            + (f", payment {command.payment_status.value}" if command.payment_status else "")
        )
        return Order.model_validate(updated)
