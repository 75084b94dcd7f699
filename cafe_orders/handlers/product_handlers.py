# cafe_orders/handlers/product_handlers.py
from typing import List
from fastapi import APIRouter, Depends, Response
from ..models.product import Product, ProductCreate, ProductUpdate
from ..services import ProductService
from .base_handler import get_product_service, require_admin

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=List[Product])
async def list_products(service: ProductService = Depends(get_product_service)):
    return await service.list_products()


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return await service.get_product(product_id)


@router.post("", response_model=Product, status_code=201, dependencies=[Depends(require_admin)])
async def create_product(body: ProductCreate, service: ProductService = Depends(get_product_service)):
    return await service.create_product(body)


@router.put("/{product_id}", response_model=Product, dependencies=[Depends(require_admin)])
async def update_product(product_id: int, body: ProductUpdate,
                         service: ProductService = Depends(get_product_service)):
    return await service.update_product(product_id, body)


@router.delete("/{product_id}", status_code=204, dependencies=[Depends(require_admin)])
async def delete_product(product_id: int, service: ProductService = Depends(get_product_service)):
    await service.delete_product(product_id)
    return Response(status_code=204)
