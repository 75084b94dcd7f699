"""Business services"""
from .auth_service import AuthService
from .order_service import OrderService
from .product_service import ProductService
from .report_service import ReportService
from .seed_service import seed_database

__all__ = [
    'AuthService',
    'OrderService',
    'ProductService',
    'ReportService',
    'seed_database'
]
