# cafe_orders/handlers/health_handlers.py
from fastapi import APIRouter, Request
from ..database import MemoryDatabase

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(request: Request):
    store = "memory" if isinstance(request.app.state.db, MemoryDatabase) else "postgres"
    return {"status": "ok", "store": store}
