# cafe_orders/utils/formatters.py
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
import pytz
from ..config import Config

CENTS = Decimal("0.01")

def round_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)

def to_local(dt: datetime, tz=None) -> datetime:
    """Convert to the cafe timezone; naive values are taken as UTC"""
    tz = tz or pytz.timezone(Config.TIMEZONE)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(tz)

def format_datetime(dt: datetime) -> str:
    return to_local(dt).strftime("%Y-%m-%d %H:%M:%S")

def utc_now() -> datetime:
    return datetime.now(pytz.utc)
