# cafe_orders/handlers/order_handlers.py
from enum import Enum
from typing import List, Optional
from fastapi import APIRouter, Depends
from ..exceptions import OrderNotFoundError, ProductNotFoundError, ValidationError
from ..models.order import CreateOrderCommand, Order, OrderStatus, UpdateOrderStatusCommand
from ..models.user import SessionUser
from ..services import OrderService
from .base_handler import get_current_user, get_order_service, require_admin

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderScope(str, Enum):
    SELF = "self"
    ALL = "all"


@router.get("", response_model=List[Order])
async def list_orders(scope: Optional[OrderScope] = None,
                      status: Optional[OrderStatus] = None,
                      user: SessionUser = Depends(get_current_user),
                      service: OrderService = Depends(get_order_service)):
    """Admins see every order by default; students see their own unless scope=all"""
    if scope is None:
        scope = OrderScope.ALL if user.is_admin else OrderScope.SELF

    user_id = None if scope == OrderScope.ALL else user.owner_tag
    return await service.list_orders(user_id=user_id, status=status)


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: int,
                    user: SessionUser = Depends(get_current_user),
                    service: OrderService = Depends(get_order_service)):
    order = await service.get_order(order_id)
    if not user.is_admin and order.user_id != user.owner_tag:
        raise OrderNotFoundError(order_id)
    return order


@router.post("", response_model=Order, status_code=201)
async def create_order(body: CreateOrderCommand,
                       user: SessionUser = Depends(get_current_user),
                       service: OrderService = Depends(get_order_service)):
    try:
        return await service.create_order(user.owner_tag, body)
    except ProductNotFoundError as e:
        # unknown product ids are a bad request body here
        raise ValidationError(e.message, field="items") from e


@router.patch("/{order_id}", response_model=Order, dependencies=[Depends(require_admin)])
@router.patch("/{order_id}/status", response_model=Order, dependencies=[Depends(require_admin)],
              include_in_schema=False)
async def update_order_status(order_id: int, body: UpdateOrderStatusCommand,
                              service: OrderService = Depends(get_order_service)):
    return await service.update_order_status(order_id, body)
