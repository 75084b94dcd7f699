# cafe_orders/database/memory.py
import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional
from ..utils.formatters import utc_now
from .base import BaseDatabase, StoreConnection
from .database import PRODUCT_COLUMNS


class MemoryState:
    """Tables and id sequences held in process memory"""

    def __init__(self):
        self.products: Dict[int, Dict[str, Any]] = {}
        self.orders: Dict[int, Dict[str, Any]] = {}
        self.order_items: Dict[int, Dict[str, Any]] = {}
        self.students: Dict[int, Dict[str, Any]] = {}
        self.admins: Dict[int, Dict[str, Any]] = {}
        self.sequences: Dict[str, int] = {}

    def next_id(self, table: str) -> int:
        self.sequences[table] = self.sequences.get(table, 0) + 1
        return self.sequences[table]


class MemoryDatabase(BaseDatabase):
    """Process-local store used when no DATABASE_URL is configured.

    Connections are handed out one at a time. Each works on a copy of the
    state that replaces the shared state only when the block exits cleanly,
    so ``acquire`` and ``transaction`` are both all-or-nothing here.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.state = MemoryState()
        self.clock = clock
        self._lock = asyncio.Lock()
        self.logger = logging.getLogger(__name__)

    async def connect(self):
        self.logger.info("Using in-memory store")

    async def close(self):
        pass

    @asynccontextmanager
    async def transaction(self):
        async with self._lock:
            working = copy.deepcopy(self.state)
            yield MemoryConnection(working, self.clock)
            self.state = working

    acquire = transaction


class MemoryConnection(StoreConnection):

    def __init__(self, state: MemoryState, clock: Callable[[], datetime]):
        self.state = state
        self.clock = clock

    def _order_with_items(self, order: Dict[str, Any]) -> Dict[str, Any]:
        items = [
            dict(item) for item in sorted(self.state.order_items.values(), key=lambda i: i['id'])
            if item['order_id'] == order['id']
        ]
        return {**order, 'items': items}

    async def list_products(self) -> List[Dict[str, Any]]:
        products = sorted(self.state.products.values(), key=lambda p: (p['category'], p['id']))
        return [dict(p) for p in products]

    async def get_product(self, product_id: int) -> Optional[Dict[str, Any]]:
        product = self.state.products.get(product_id)
        return dict(product) if product else None

    async def get_products(self, product_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
        return {
            product_id: dict(self.state.products[product_id])
            for product_id in set(product_ids)
            if product_id in self.state.products
        }

    async def insert_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        product_id = self.state.next_id('products')
        product = {
            'id': product_id,
            'name': data['name'],
            'description': data.get('description'),
            'price': data['price'],
            'category': data['category'],
            'stock_quantity': data.get('stock_quantity'),
            'in_stock': data.get('in_stock', True),
            'created_at': self.clock(),
            'updated_at': None
        }
        self.state.products[product_id] = product
        return dict(product)

    async def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        product = self.state.products.get(product_id)
        if not product:
            return None
        updates = {k: v for k, v in data.items() if k in PRODUCT_COLUMNS}
        if updates:
            product.update(updates, updated_at=self.clock())
        return dict(product)

    async def delete_product(self, product_id: int) -> bool:
        if self.state.products.pop(product_id, None) is None:
            return False
        for item in self.state.order_items.values():
            if item['product_id'] == product_id:
                item['product_id'] = None
        return True

    async def list_orders(self, user_id: Optional[str] = None, status: Optional[str] = None,
                          date_from: Optional[datetime] = None,
                          date_to: Optional[datetime] = None) -> List[Dict[str, Any]]:
        orders = []
        for order in self.state.orders.values():
            if user_id is not None and order['user_id'] != user_id:
                continue
            if status is not None and order['status'] != status:
                continue
            if date_from is not None and order['created_at'] < date_from:
                continue
            if date_to is not None and order['created_at'] > date_to:
                continue
            orders.append(self._order_with_items(order))

        orders.sort(key=lambda o: (o['created_at'], o['id']), reverse=True)
        return orders

    async def get_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        order = self.state.orders.get(order_id)
        return self._order_with_items(order) if order else None

    async def lock_order(self, order_id: int) -> bool:
        # connections are already serialized by the store lock
        return order_id in self.state.orders

    async def insert_order(self, data: Dict[str, Any]) -> Dict[str, Any]:
        order_id = self.state.next_id('orders')
        order = {
            'id': order_id,
            'user_id': data['user_id'],
            'total_amount': data['total_amount'],
            'payment_method': data['payment_method'],
            'cash_amount': data.get('cash_amount'),
            'online_amount': data.get('online_amount'),
            'status': data['status'],
            'payment_status': data['payment_status'],
            'order_type': data['order_type'],
            'created_at': self.clock(),
            'updated_at': None
        }
        self.state.orders[order_id] = order
        return dict(order)

    async def insert_order_item(self, order_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        item_id = self.state.next_id('order_items')
        item = {
            'id': item_id,
            'order_id': order_id,
            'product_id': data['product_id'],
            'product_name': data.get('product_name'),
            'quantity': data['quantity'],
            'price_at_time': data['price_at_time']
        }
        self.state.order_items[item_id] = item
        return dict(item)

    async def update_order_status(self, order_id: int, status: str,
                                  payment_status: Optional[str] = None) -> Optional[Dict[str, Any]]:
        order = self.state.orders.get(order_id)
        if not order:
            return None
        order['status'] = status
        if payment_status is not None:
            order['payment_status'] = payment_status
        order['updated_at'] = self.clock()
        return self._order_with_items(order)

    async def get_student_by_mobile(self, mobile: str) -> Optional[Dict[str, Any]]:
        for student in self.state.students.values():
            if student['mobile'] == mobile:
                return dict(student)
        return None

    async def insert_student(self, mobile: str) -> Dict[str, Any]:
        existing = await self.get_student_by_mobile(mobile)
        if existing:
            return existing
        student_id = self.state.next_id('students')
        student = {
            'id': student_id,
            'mobile': mobile,
            'name': None,
            'email': None,
            'otp': None,
            'otp_expiry': None,
            'created_at': self.clock(),
            'updated_at': None
        }
        self.state.students[student_id] = student
        return dict(student)

    async def set_student_otp(self, student_id: int, otp: Optional[str],
                              expiry: Optional[datetime]) -> None:
        student = self.state.students.get(student_id)
        if student:
            student.update(otp=otp, otp_expiry=expiry)

    async def update_student_profile(self, student_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        student = self.state.students.get(student_id)
        if not student:
            return None
        for key in ('email', 'name'):
            if data.get(key) is not None:
                student[key] = data[key]
        student['updated_at'] = self.clock()
        return dict(student)

    async def get_admin_by_mobile(self, mobile: str) -> Optional[Dict[str, Any]]:
        for admin in self.state.admins.values():
            if admin['mobile'] == mobile:
                return dict(admin)
        return None

    async def insert_admin(self, mobile: str, password_hash: str, name: Optional[str]) -> Dict[str, Any]:
        admin_id = self.state.next_id('admins')
        admin = {
            'id': admin_id,
            'mobile': mobile,
            'password': password_hash,
            'name': name,
            'otp': None,
            'otp_expiry': None,
            'created_at': self.clock(),
            'updated_at': None
        }
        self.state.admins[admin_id] = admin
        return dict(admin)

    async def set_admin_otp(self, admin_id: int, otp: Optional[str],
                            expiry: Optional[datetime]) -> None:
        admin = self.state.admins.get(admin_id)
        if admin:
            admin.update(otp=otp, otp_expiry=expiry)

    async def update_admin_password(self, admin_id: int, password_hash: str) -> None:
        admin = self.state.admins.get(admin_id)
        if admin:
            admin.update(password=password_hash, updated_at=self.clock())
