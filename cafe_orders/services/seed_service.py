# cafe_orders/services/seed_service.py
import logging
from decimal import Decimal
from ..config import Config
from ..database import BaseDatabase
from ..utils.security import hash_password

logger = logging.getLogger(__name__)

DEMO_MENU = [
    {"name": "Veg Sandwich", "description": "Fresh vegetables with cheese", "price": Decimal("45.00"), "category": "Snacks"},
    {"name": "Chicken Burger", "description": "Crispy chicken patty with lettuce", "price": Decimal("80.00"), "category": "Main"},
    {"name": "Cold Coffee", "description": "Chilled coffee with ice cream", "price": Decimal("60.00"), "category": "Beverages"},
    {"name": "Samosa", "description": "Spicy potato filling", "price": Decimal("15.00"), "category": "Snacks"},
    {"name": "Fried Rice", "description": "Veg fried rice with sauces", "price": Decimal("70.00"), "category": "Main"},
    {"name": "Masala Dosa", "description": "Crispy dosa with potato filling", "price": Decimal("55.00"), "category": "Main"},
    {"name": "Tea", "description": "Hot masala chai", "price": Decimal("15.00"), "category": "Beverages"},
    {"name": "Pani Puri", "description": "6 pieces of crispy puri with spicy water", "price": Decimal("25.00"), "category": "Snacks"},
]


async def seed_database(db: BaseDatabase):
    """Insert the demo menu and the default admin into an empty store.

    Runs once at startup; nothing else depends on this data.
    """
    async with db.transaction() as conn:
        if not await conn.list_products():
            logger.info("Seeding database with products...")
            for product in DEMO_MENU:
                await conn.insert_product({**product, "in_stock": True})

        if not await conn.get_admin_by_mobile(Config.DEFAULT_ADMIN_MOBILE):
            logger.info("Seeding default admin...")
            await conn.insert_admin(
                Config.DEFAULT_ADMIN_MOBILE,
                hash_password(Config.DEFAULT_ADMIN_PASSWORD),
                Config.DEFAULT_ADMIN_NAME
            )
