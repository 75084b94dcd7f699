# cafe_orders/utils/timeframes.py
"""Reporting windows and their buckets.

All boundaries are naive wall-clock datetimes in the cafe timezone; order
timestamps are converted the same way before comparison. A bucket covers
``[start, next_start)`` so a timestamp on a boundary opens the new bucket.
"""
import calendar
from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional, Union
import pytz
from ..config import Config
from ..models.analytics import Granularity
from .formatters import to_local

ONE_MICROSECOND = timedelta(microseconds=1)


@dataclass(frozen=True)
class Bucket:
    start: datetime
    label: str


@dataclass(frozen=True)
class ReportWindow:
    granularity: Granularity
    start: datetime
    end: datetime  # inclusive
    buckets: List[Bucket]
    tz: tzinfo = field(compare=False)

    def local(self, dt: datetime) -> datetime:
        """Timestamp as naive wall-clock time in the window's timezone"""
        return to_local(dt, self.tz).replace(tzinfo=None)

    def contains(self, dt: datetime) -> bool:
        return self.start <= self.local(dt) <= self.end

    def bucket_index(self, dt: datetime) -> Optional[int]:
        local_dt = self.local(dt)
        if not self.start <= local_dt <= self.end:
            return None
        starts = [bucket.start for bucket in self.buckets]
        return bisect_right(starts, local_dt) - 1

    def aware(self, naive: datetime) -> datetime:
        return self.tz.localize(naive)


def _start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _add_months(dt: datetime, months: int) -> datetime:
    years, month_index = divmod(dt.month - 1 + months, 12)
    return dt.replace(year=dt.year + years, month=month_index + 1, day=1)


def build_window(granularity: Union[Granularity, str],
                 now: Optional[datetime] = None,
                 tz: Optional[tzinfo] = None,
                 week_start: Optional[int] = None) -> ReportWindow:
    """Window containing ``now`` for the given granularity.

    hour  -> today in 24 hourly buckets
    day   -> this week in 7 daily buckets
    week  -> this month in weekly buckets (first one starts on the 1st)
    month -> this month in daily buckets
    year  -> this year in 12 monthly buckets
    """
    granularity = Granularity(granularity)
    tz = tz or pytz.timezone(Config.TIMEZONE)
    week_start = Config.WEEK_START if week_start is None else week_start
    now = now or datetime.now(pytz.utc)

    today = _start_of_day(to_local(now, tz).replace(tzinfo=None))

    if granularity == Granularity.HOUR:
        start = today
        end = start + timedelta(days=1)
        buckets = [
            Bucket(start + timedelta(hours=hour), f"{hour:02d}:00")
            for hour in range(24)
        ]

    elif granularity == Granularity.DAY:
        start = today - timedelta(days=(today.weekday() - week_start) % 7)
        end = start + timedelta(days=7)
        buckets = []
        for offset in range(7):
            day = start + timedelta(days=offset)
            buckets.append(Bucket(day, day.strftime("%a")))

    elif granularity == Granularity.WEEK:
        start = today.replace(day=1)
        end = _add_months(start, 1)
        buckets = [Bucket(start, start.strftime("%m-%d"))]
        boundary = start + timedelta(days=(week_start - start.weekday()) % 7 or 7)
        while boundary < end:
            buckets.append(Bucket(boundary, boundary.strftime("%m-%d")))
            boundary += timedelta(days=7)

    elif granularity == Granularity.MONTH:
        start = today.replace(day=1)
        days_in_month = calendar.monthrange(start.year, start.month)[1]
        end = start + timedelta(days=days_in_month)
        buckets = []
        for offset in range(days_in_month):
            day = start + timedelta(days=offset)
            buckets.append(Bucket(day, day.strftime("%d")))

    else:
        start = today.replace(month=1, day=1)
        end = start.replace(year=start.year + 1)
        buckets = []
        for offset in range(12):
            month = _add_months(start, offset)
            buckets.append(Bucket(month, month.strftime("%b")))

    return ReportWindow(
        granularity=granularity,
        start=start,
        end=end - ONE_MICROSECOND,
        buckets=buckets,
        tz=tz
    )
