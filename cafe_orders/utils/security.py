# cafe_orders/utils/security.py
import secrets
from datetime import datetime, timedelta
from typing import Optional
import bcrypt
import pytz
from ..config import Config

BCRYPT_ROUNDS = 10
# bcrypt only accepts this many bytes of input
MAX_PASSWORD_BYTES = 72

def hash_password(password: str) -> str:
    """Hash a password with bcrypt"""
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode('utf-8')

def password_too_long(password: str) -> bool:
    return len(password.encode('utf-8')) > MAX_PASSWORD_BYTES

def check_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        # malformed stored hash
        return False

def generate_otp() -> str:
    """Random 6-digit one-time password"""
    return f"{secrets.randbelow(900000) + 100000}"

def otp_expiry(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(pytz.utc)
    return now + timedelta(minutes=Config.OTP_TTL_MINUTES)

def otp_matches(expected: Optional[str], given: str) -> bool:
    if not expected:
        return False
    return secrets.compare_digest(expected.encode('utf-8'), given.encode('utf-8'))
