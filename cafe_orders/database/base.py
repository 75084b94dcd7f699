# cafe_orders/database/base.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, AsyncContextManager, Dict, Iterable, List, Optional


class StoreConnection(ABC):
    """Operations a store exposes to the services.

    Records are plain dicts keyed by column name. Orders always carry their
    ``items`` list, loaded in the same fetch as the order rows.
    """

    # Products
    @abstractmethod
    async def list_products(self) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def get_product(self, product_id: int) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def get_products(self, product_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]: ...

    @abstractmethod
    async def insert_product(self, data: Dict[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    async def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def delete_product(self, product_id: int) -> bool: ...

    # Orders
    @abstractmethod
    async def list_orders(self, user_id: Optional[str] = None, status: Optional[str] = None,
                          date_from: Optional[datetime] = None,
                          date_to: Optional[datetime] = None) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def get_order(self, order_id: int) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def lock_order(self, order_id: int) -> bool:
        """Lock the order row until the transaction ends; False when missing"""

    @abstractmethod
    async def insert_order(self, data: Dict[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    async def insert_order_item(self, order_id: int, data: Dict[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    async def update_order_status(self, order_id: int, status: str,
                                  payment_status: Optional[str] = None) -> Optional[Dict[str, Any]]: ...

    # Students
    @abstractmethod
    async def get_student_by_mobile(self, mobile: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def insert_student(self, mobile: str) -> Dict[str, Any]: ...

    @abstractmethod
    async def set_student_otp(self, student_id: int, otp: Optional[str],
                              expiry: Optional[datetime]) -> None: ...

    @abstractmethod
    async def update_student_profile(self, student_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    # Admins
    @abstractmethod
    async def get_admin_by_mobile(self, mobile: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def insert_admin(self, mobile: str, password_hash: str, name: Optional[str]) -> Dict[str, Any]: ...

    @abstractmethod
    async def set_admin_otp(self, admin_id: int, otp: Optional[str],
                            expiry: Optional[datetime]) -> None: ...

    @abstractmethod
    async def update_admin_password(self, admin_id: int, password_hash: str) -> None: ...


class BaseDatabase(ABC):
    """Connection source shared by all services"""

    @abstractmethod
    async def connect(self): ...

    @abstractmethod
    async def close(self): ...

    @abstractmethod
    def acquire(self) -> AsyncContextManager[StoreConnection]:
        """Connection whose statements commit one by one"""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[StoreConnection]:
        """Connection whose statements commit together or not at all"""
