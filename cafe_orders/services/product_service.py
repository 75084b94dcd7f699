# cafe_orders/services/product_service.py
import logging
from typing import List
from ..database import BaseDatabase
from ..exceptions import NotFoundError, ProductNotFoundError
from ..models.product import Product, ProductCreate, ProductUpdate

# columns that cannot be cleared by sending null
REQUIRED_FIELDS = ("name", "price", "category", "in_stock")

class ProductService:
    def __init__(self, db: BaseDatabase):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def list_products(self) -> List[Product]:
        """Menu ordered by category"""
        async with self.db.acquire() as conn:
            products = await conn.list_products()
        return [Product.model_validate(p) for p in products]

    async def get_product(self, product_id: int) -> Product:
        async with self.db.acquire() as conn:
            product = await conn.get_product(product_id)
        if not product:
            raise ProductNotFoundError(product_id)
        return Product.model_validate(product)

    async def create_product(self, data: ProductCreate) -> Product:
        """Add a product to the menu"""
        async with self.db.acquire() as conn:
            product = await conn.insert_product(data.model_dump())
        self.logger.info(f"Product {product['id']} created: {product['name']}")
        return Product.model_validate(product)

    async def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        """Apply the fields present in the update"""
        updates = data.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in updates and updates[key] is None:
                del updates[key]

        async with self.db.acquire() as conn:
            product = await conn.update_product(product_id, updates)
        if not product:
            raise ProductNotFoundError(product_id)
        return Product.model_validate(product)

    async def delete_product(self, product_id: int):
        """Remove a product; past orders keep their item snapshots"""
        async with self.db.acquire() as conn:
            deleted = await conn.delete_product(product_id)
        if not deleted:
            raise NotFoundError(f"Product {product_id} not found")
        self.logger.info(f"Product {product_id} deleted")
