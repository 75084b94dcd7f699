"""HTTP handlers"""
from .analytics_handlers import router as analytics_router
from .auth_handlers import router as auth_router
from .base_handler import register_error_handlers
from .health_handlers import router as health_router
from .order_handlers import router as order_router
from .product_handlers import router as product_router

ROUTERS = [
    auth_router,
    product_router,
    order_router,
    analytics_router,
    health_router
]

__all__ = [
    'ROUTERS',
    'register_error_handlers'
]
