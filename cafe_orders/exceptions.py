# cafe_orders/exceptions.py
from typing import Optional


class CafeError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {"message": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationError(CafeError):
    """Malformed or inconsistent input"""
    status_code = 400
    default_message = "Invalid request"


class EmptyOrderError(ValidationError):
    """Order submitted without line items"""
    default_message = "Order must contain at least one item"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, field="items")


class NotFoundError(CafeError):
    status_code = 404
    default_message = "Not found"


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class InvalidTransitionError(CafeError):
    """Order status change not allowed by the lifecycle"""
    status_code = 409

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change order status from '{current}' to '{requested}'",
            field="status"
        )


class AuthenticationError(CafeError):
    status_code = 401
    default_message = "Unauthorized"


class PermissionDeniedError(CafeError):
    status_code = 403
    default_message = "Forbidden"


class PersistenceError(CafeError):
    """Underlying store failure; details stay in the logs"""
    status_code = 500
