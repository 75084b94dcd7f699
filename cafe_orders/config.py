# cafe_orders/config.py
import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import List

# Load environment variables
load_dotenv()

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration settings for the cafe backend"""

    APP_ENV: str = os.getenv("APP_ENV", "development")

    # Database settings (in-memory store when empty)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Session settings
    SESSION_SECRET: str = os.getenv("SESSION_SECRET", "")
    if not SESSION_SECRET:
        if APP_ENV == "production":
            raise ValueError("No SESSION_SECRET set in environment")
        SESSION_SECRET = "dev-session-secret"
    SESSION_MAX_AGE: int = 7 * 24 * 60 * 60

    # Auth settings
    OTP_TTL_MINUTES: int = int(os.getenv("OTP_TTL_MINUTES", "5"))

    # Seed data
    SEED_DEMO_DATA: bool = _env_flag("SEED_DEMO_DATA", "true")
    DEFAULT_ADMIN_MOBILE: str = os.getenv("DEFAULT_ADMIN_MOBILE", "9999999999")
    DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")
    DEFAULT_ADMIN_NAME: str = os.getenv("DEFAULT_ADMIN_NAME", "Admin")

    # Analytics settings
    TIMEZONE: str = os.getenv("TZ", "Asia/Kolkata")
    WEEK_START: int = int(os.getenv("WEEK_START", "6"))  # 0=Monday ... 6=Sunday

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Dashboard and mobile app origins
    CORS_ORIGINS: List[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    # Paths
    LOG_DIR = BASE_DIR / "logs"

    # Ensure directories exist
    LOG_DIR.mkdir(exist_ok=True)

    @classmethod
    def is_production(cls) -> bool:
        return cls.APP_ENV == "production"


def setup_logging():
    """Configure logging settings"""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    log_file = Config.LOG_DIR / "cafe.log"

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL),
        format=log_format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
