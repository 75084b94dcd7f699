# cafe_orders/services/report_service.py
import io
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, Optional, Union
import pandas as pd
from ..database import BaseDatabase
from ..models.analytics import AnalyticsReport, Granularity, SalesBucket, StatusCount
from ..models.order import Order, OrderStatus
from ..utils.formatters import format_datetime, round_money, utc_now
from ..utils.timeframes import ReportWindow, build_window

# presentation order of the status breakdown
BREAKDOWN_ORDER = (
    OrderStatus.COMPLETED,
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.CANCELLED,
)


def aggregate_orders(orders: Iterable[Order], window: ReportWindow) -> AnalyticsReport:
    """Roll orders up into the window's buckets.

    Every order inside the window is counted; only paid orders add revenue.
    Empty buckets stay in the series with zero values.
    """
    series = [
        SalesBucket(label=bucket.label, start=window.aware(bucket.start))
        for bucket in window.buckets
    ]
    status_counts: Dict[OrderStatus, int] = {status: 0 for status in BREAKDOWN_ORDER}

    total_revenue = Decimal(0)
    total_orders = 0
    paid_orders = 0

    for order in orders:
        index = window.bucket_index(order.created_at)
        if index is None:
            continue

        bucket = series[index]
        bucket.order_count += 1
        total_orders += 1
        status_counts[order.status] += 1

        if order.is_paid:
            bucket.revenue += order.total_amount
            total_revenue += order.total_amount
            paid_orders += 1

    average_order_value = round_money(total_revenue / paid_orders) if paid_orders else Decimal(0)

    return AnalyticsReport(
        granularity=window.granularity,
        window_start=window.aware(window.start),
        window_end=window.aware(window.end),
        total_revenue=total_revenue,
        total_orders=total_orders,
        paid_orders=paid_orders,
        average_order_value=average_order_value,
        series=series,
        status_counts=status_counts,
        status_breakdown=[
            StatusCount(status=status, count=status_counts[status])
            for status in BREAKDOWN_ORDER
            if status_counts[status] > 0
        ]
    )


class ReportService:
    """Sales analytics over the order history"""

    def __init__(self, db: BaseDatabase, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or utc_now

    async def get_report(self, granularity: Union[Granularity, str],
                         now: Optional[datetime] = None) -> AnalyticsReport:
        """Report for the window around ``now`` (defaults to the clock)"""
        window = build_window(granularity, now or self.clock())

        async with self.db.acquire() as conn:
            records = await conn.list_orders(
                date_from=window.aware(window.start),
                date_to=window.aware(window.end)
            )

        orders = [Order.model_validate(r) for r in records]
        return aggregate_orders(orders, window)

    async def generate_excel_report(self, granularity: Union[Granularity, str],
                                    now: Optional[datetime] = None) -> bytes:
        """Report as an Excel workbook"""
        report = await self.get_report(granularity, now)

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
            summary_data = {
                'Metric': [
                    'Period start', 'Period end', 'Total revenue',
                    'Total orders', 'Paid orders', 'Average order value'
                ],
                'Value': [
                    format_datetime(report.window_start),
                    format_datetime(report.window_end),
                    float(report.total_revenue),
                    report.total_orders,
                    report.paid_orders,
                    float(report.average_order_value)
                ]
            }
            pd.DataFrame(summary_data).to_excel(writer, sheet_name='Summary', index=False)

            series_df = pd.DataFrame([
                {
                    'Period': bucket.label,
                    'Orders': bucket.order_count,
                    'Revenue': float(bucket.revenue)
                }
                for bucket in report.series
            ])
            series_df.to_excel(writer, sheet_name='Sales', index=False)

            status_df = pd.DataFrame(
                [{'Status': s.status.value, 'Orders': s.count} for s in report.status_breakdown],
                columns=['Status', 'Orders']
            )
            status_df.to_excel(writer, sheet_name='Status', index=False)

        return output.getvalue()
