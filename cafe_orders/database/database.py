# cafe_orders/database/database.py
import asyncpg
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from ..config import Config
from ..exceptions import PersistenceError
from .base import BaseDatabase, StoreConnection

PRODUCT_COLUMNS = ("name", "description", "price", "category", "stock_quantity", "in_stock")

ORDER_SELECT = """
    SELECT o.*,
        COALESCE((
            SELECT json_agg(json_build_object(
                'id', oi.id,
                'order_id', oi.order_id,
                'product_id', oi.product_id,
                'product_name', oi.product_name,
                'quantity', oi.quantity,
                'price_at_time', oi.price_at_time::text
            ) ORDER BY oi.id)
            FROM order_items oi
            WHERE oi.order_id = o.id
        ), '[]'::json) AS items
    FROM orders o
"""


async def _init_connection(conn):
    await conn.set_type_codec(
        "json",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog"
    )


class Database(BaseDatabase):
    """PostgreSQL connection pool"""

    def __init__(self, dsn: Optional[str] = None):
        self.dsn = dsn or Config.DATABASE_URL
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = logging.getLogger(__name__)

    async def connect(self):
        """Open the pool and apply pending migrations"""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=2,
                max_size=10,
                init=_init_connection
            )

            await self._run_migrations()

            self.logger.info("Connected to PostgreSQL")
        except Exception as e:
            self.logger.error(f"Database connection failed: {e}")
            raise

    async def close(self):
        if self.pool:
            await self.pool.close()
            self.logger.info("Database connection closed")

    @asynccontextmanager
    async def acquire(self):
        try:
            async with self.pool.acquire() as conn:
                yield PostgresConnection(conn)
        except (asyncpg.PostgresError, OSError) as e:
            self.logger.error(f"Database error: {e}", exc_info=True)
            raise PersistenceError() from e

    @asynccontextmanager
    async def transaction(self):
        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    yield PostgresConnection(conn)
        except (asyncpg.PostgresError, OSError) as e:
            self.logger.error(f"Transaction rolled back: {e}", exc_info=True)
            raise PersistenceError() from e

    async def _run_migrations(self):
        """Apply SQL files from the migrations directory once each"""
        try:
            migrations_path = Path(__file__).parent / "migrations"

            async with self.pool.acquire() as conn:
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS migrations (
                        id SERIAL PRIMARY KEY,
                        name VARCHAR(255) NOT NULL,
                        applied_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                for migration_file in sorted(migrations_path.glob("*.sql")):
                    migration_name = migration_file.name

                    is_applied = await conn.fetchval(
                        "SELECT COUNT(*) FROM migrations WHERE name = $1",
                        migration_name
                    )

                    if not is_applied:
                        async with conn.transaction():
                            await conn.execute(migration_file.read_text())
                            await conn.execute(
                                "INSERT INTO migrations (name) VALUES ($1)",
                                migration_name
                            )

                        self.logger.info(f"Applied migration {migration_name}")

        except Exception as e:
            self.logger.error(f"Migration failed: {e}")
            raise


class PostgresConnection(StoreConnection):
    """Store operations over one asyncpg connection"""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def list_products(self) -> List[Dict[str, Any]]:
        rows = await self.conn.fetch("""
            SELECT * FROM products
            ORDER BY category, id
        """)
        return [dict(row) for row in rows]

    async def get_product(self, product_id: int) -> Optional[Dict[str, Any]]:
        row = await self.conn.fetchrow("SELECT * FROM products WHERE id = $1", product_id)
        return dict(row) if row else None

    async def get_products(self, product_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
        rows = await self.conn.fetch(
            "SELECT * FROM products WHERE id = ANY($1::int[])",
            list(set(product_ids))
        )
        return {row['id']: dict(row) for row in rows}

    async def insert_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        row = await self.conn.fetchrow("""
            INSERT INTO products (
                name, description, price, category, stock_quantity, in_stock
            ) VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING *
        """,
            data['name'],
            data.get('description'),
            data['price'],
            data['category'],
            data.get('stock_quantity'),
            data.get('in_stock', True)
        )
        return dict(row)

    async def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        query_parts = []
        params = []
        param_count = 1

        for key, value in data.items():
            if key not in PRODUCT_COLUMNS:
                continue
            query_parts.append(f"{key} = ${param_count}")
            params.append(value)
            param_count += 1

        if not query_parts:
            return await self.get_product(product_id)

        params.append(product_id)
        row = await self.conn.fetchrow(f"""
            UPDATE products
            SET {', '.join(query_parts)}, updated_at = CURRENT_TIMESTAMP
            WHERE id = ${param_count}
            RETURNING *
        """, *params)
        return dict(row) if row else None

    async def delete_product(self, product_id: int) -> bool:
        result = await self.conn.execute("DELETE FROM products WHERE id = $1", product_id)
        return result == "DELETE 1"

    async def list_orders(self, user_id: Optional[str] = None, status: Optional[str] = None,
                          date_from: Optional[datetime] = None,
                          date_to: Optional[datetime] = None) -> List[Dict[str, Any]]:
        query = ORDER_SELECT + " WHERE 1=1"
        params = []
        param_index = 1

        if user_id is not None:
            query += f" AND o.user_id = ${param_index}"
            params.append(user_id)
            param_index += 1

        if status is not None:
            query += f" AND o.status = ${param_index}"
            params.append(status)
            param_index += 1

        if date_from is not None:
            query += f" AND o.created_at >= ${param_index}"
            params.append(date_from)
            param_index += 1

        if date_to is not None:
            query += f" AND o.created_at <= ${param_index}"
            params.append(date_to)
            param_index += 1

        query += " ORDER BY o.created_at DESC, o.id DESC"

        rows = await self.conn.fetch(query, *params)
        return [dict(row) for row in rows]

    async def get_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        row = await self.conn.fetchrow(ORDER_SELECT + " WHERE o.id = $1", order_id)
        return dict(row) if row else None

    async def lock_order(self, order_id: int) -> bool:
        locked = await self.conn.fetchval(
            "SELECT id FROM orders WHERE id = $1 FOR UPDATE", order_id
        )
        return locked is not None

    async def insert_order(self, data: Dict[str, Any]) -> Dict[str, Any]:
        row = await self.conn.fetchrow("""
            INSERT INTO orders (
                user_id, total_amount, payment_method, cash_amount, online_amount,
                status, payment_status, order_type
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING *
        """,
            data['user_id'],
            data['total_amount'],
            data['payment_method'],
            data.get('cash_amount'),
            data.get('online_amount'),
            data['status'],
            data['payment_status'],
            data['order_type']
        )
        return dict(row)

    async def insert_order_item(self, order_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        row = await self.conn.fetchrow("""
            INSERT INTO order_items (
                order_id, product_id, product_name, quantity, price_at_time
            ) VALUES ($1, $2, $3, $4, $5)
            RETURNING *
        """, order_id, data['product_id'], data.get('product_name'),
             data['quantity'], data['price_at_time'])
        return dict(row)

    async def update_order_status(self, order_id: int, status: str,
                                  payment_status: Optional[str] = None) -> Optional[Dict[str, Any]]:
        result = await self.conn.execute("""
            UPDATE orders
            SET status = $1,
                payment_status = COALESCE($2, payment_status),
                updated_at = CURRENT_TIMESTAMP
            WHERE id = $3
        """, status, payment_status, order_id)

        if result != "UPDATE 1":
            return None
        return await self.get_order(order_id)

    async def get_student_by_mobile(self, mobile: str) -> Optional[Dict[str, Any]]:
        row = await self.conn.fetchrow("SELECT * FROM students WHERE mobile = $1", mobile)
        return dict(row) if row else None

    async def insert_student(self, mobile: str) -> Dict[str, Any]:
        row = await self.conn.fetchrow("""
            INSERT INTO students (mobile) VALUES ($1)
            ON CONFLICT (mobile) DO UPDATE SET mobile = EXCLUDED.mobile
            RETURNING *
        """, mobile)
        return dict(row)

    async def set_student_otp(self, student_id: int, otp: Optional[str],
                              expiry: Optional[datetime]) -> None:
        await self.conn.execute("""
            UPDATE students SET otp = $1, otp_expiry = $2 WHERE id = $3
        """, otp, expiry, student_id)

    async def update_student_profile(self, student_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = await self.conn.fetchrow("""
            UPDATE students
            SET email = COALESCE($1, email),
                name = COALESCE($2, name),
                updated_at = CURRENT_TIMESTAMP
            WHERE id = $3
            RETURNING *
        """, data.get('email'), data.get('name'), student_id)
        return dict(row) if row else None

    async def get_admin_by_mobile(self, mobile: str) -> Optional[Dict[str, Any]]:
        row = await self.conn.fetchrow("SELECT * FROM admins WHERE mobile = $1", mobile)
        return dict(row) if row else None

    async def insert_admin(self, mobile: str, password_hash: str, name: Optional[str]) -> Dict[str, Any]:
        row = await self.conn.fetchrow("""
            INSERT INTO admins (mobile, password, name)
            VALUES ($1, $2, $3)
            RETURNING *
        """, mobile, password_hash, name)
        return dict(row)

    async def set_admin_otp(self, admin_id: int, otp: Optional[str],
                            expiry: Optional[datetime]) -> None:
        await self.conn.execute("""
            UPDATE admins SET otp = $1, otp_expiry = $2 WHERE id = $3
        """, otp, expiry, admin_id)

    async def update_admin_password(self, admin_id: int, password_hash: str) -> None:
        await self.conn.execute("""
            UPDATE admins SET password = $1, updated_at = CURRENT_TIMESTAMP WHERE id = $2
        """, password_hash, admin_id)
