# cafe_orders/handlers/base_handler.py
import logging
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..database import BaseDatabase
from ..exceptions import AuthenticationError, CafeError, PermissionDeniedError
from ..models.user import SessionUser
from ..services import AuthService, OrderService, ProductService, ReportService

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"


def get_db(request: Request) -> BaseDatabase:
    return request.app.state.db


def get_product_service(db: BaseDatabase = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_order_service(db: BaseDatabase = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_clock(request: Request):
    return request.app.state.clock


def get_report_service(db: BaseDatabase = Depends(get_db), clock=Depends(get_clock)) -> ReportService:
    return ReportService(db, clock)


def get_auth_service(db: BaseDatabase = Depends(get_db), clock=Depends(get_clock)) -> AuthService:
    return AuthService(db, clock)


def login_user(request: Request, user: SessionUser):
    request.session[SESSION_USER_KEY] = user.model_dump(mode="json")


def get_current_user(request: Request) -> SessionUser:
    """Session user, or 401"""
    data = request.session.get(SESSION_USER_KEY)
    if not data:
        raise AuthenticationError()
    return SessionUser.model_validate(data)


def require_admin(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    if not user.is_admin:
        raise PermissionDeniedError("Admin access required")
    return user


def register_error_handlers(app: FastAPI):
    """Map service errors and body validation failures to JSON responses"""

    @app.exception_handler(CafeError)
    async def handle_cafe_error(request: Request, exc: CafeError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        error = errors[0] if errors else {"msg": "Invalid request", "loc": ()}
        field = ".".join(
            str(part) for part in error.get("loc", ())
            if part not in ("body", "query", "path")
        )
        content = {"message": error["msg"]}
        if field:
            content["field"] = field
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})
