# cafe_orders/app.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
from .config import Config, setup_logging
from .database import BaseDatabase, create_database
from .handlers import ROUTERS, register_error_handlers
from .services import seed_database
from .utils.formatters import utc_now

logger = logging.getLogger(__name__)


def create_app(db: Optional[BaseDatabase] = None,
               clock: Optional[Callable[[], datetime]] = None) -> FastAPI:
    """Build the API around a store (PostgreSQL or in-memory by default)"""
    database = db or create_database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.connect()
        if Config.SEED_DEMO_DATA:
            await seed_database(database)
        logger.info("Cafe backend ready")
        try:
            yield
        finally:
            await database.close()

    app = FastAPI(title="Cafe Orders API", lifespan=lifespan)
    app.state.db = database
    app.state.clock = clock or utc_now

    app.add_middleware(
        SessionMiddleware,
        secret_key=Config.SESSION_SECRET,
        session_cookie="cafe_session",
        max_age=Config.SESSION_MAX_AGE,
        https_only=Config.is_production()
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    return app


def run():
    """Console entry point"""
    setup_logging()

    try:
        app = create_app()
        logger.info("Starting server...")
        uvicorn.run(app, host=Config.HOST, port=Config.PORT, log_config=None)
    except Exception as e:
        logger.error(f"Error starting server: {e}", exc_info=True)
        raise
