import io
from datetime import datetime
from decimal import Decimal

import pandas as pd
import pytest
import pytz

from cafe_orders.models.analytics import Granularity
from cafe_orders.models.order import (
    CreateOrderCommand,
    Order,
    OrderStatus,
    PaymentStatus,
    UpdateOrderStatusCommand,
)
from cafe_orders.services.order_service import OrderService
from cafe_orders.services.report_service import ReportService, aggregate_orders
from cafe_orders.utils.timeframes import build_window
from tests.conftest import KOLKATA, local_time

NOW = local_time(2024, 5, 16, 12, 0)


async def place_order(db, clock, when, items, paid=False, status=OrderStatus.PENDING):
    clock.set(when.astimezone(pytz.utc))
    command = CreateOrderCommand(
        items=[{"product_id": product["id"], "quantity": quantity} for product, quantity in items],
        status=status,
        payment_status=PaymentStatus.PAID if paid else PaymentStatus.UNPAID,
    )
    return await OrderService(db).create_order("student:1", command)


def make_order(order_id, created_at, total, status="pending", payment_status="unpaid") -> Order:
    return Order(
        id=order_id,
        user_id="student:1",
        total_amount=Decimal(total),
        payment_method="cash",
        status=status,
        payment_status=payment_status,
        created_at=created_at,
    )


@pytest.mark.asyncio
async def test_revenue_counts_only_paid_orders(db, clock, products):
    coffee, samosa, burger = products["coffee"], products["samosa"], products["burger"]
    await place_order(db, clock, local_time(2024, 5, 16, 9, 0), [(coffee, 1)], paid=True)
    await place_order(db, clock, local_time(2024, 5, 16, 9, 30), [(burger, 1)], paid=True)
    await place_order(db, clock, local_time(2024, 5, 16, 10, 15), [(burger, 2)], paid=True)
    await place_order(db, clock, local_time(2024, 5, 16, 11, 0), [(coffee, 1)])
    await place_order(db, clock, local_time(2024, 5, 16, 11, 5), [(samosa, 6)])

    report = await ReportService(db, clock).get_report(Granularity.HOUR, now=NOW)

    assert report.total_revenue == Decimal("300.00")
    assert report.total_orders == 5
    assert report.paid_orders == 3
    assert report.average_order_value == Decimal("100.00")

    by_label = {bucket.label: bucket for bucket in report.series}
    assert by_label["09:00"].order_count == 2
    assert by_label["09:00"].revenue == Decimal("140.00")
    assert by_label["11:00"].order_count == 2
    assert by_label["11:00"].revenue == Decimal(0)
    assert sum(bucket.revenue for bucket in report.series) == report.total_revenue


@pytest.mark.asyncio
async def test_day_series_is_dense(db, clock, products):
    coffee = products["coffee"]
    await place_order(db, clock, local_time(2024, 5, 13, 8, 0), [(coffee, 1)], paid=True)
    await place_order(db, clock, local_time(2024, 5, 14, 8, 0), [(coffee, 2)], paid=True)
    await place_order(db, clock, local_time(2024, 5, 16, 8, 0), [(coffee, 1)], paid=True)

    report = await ReportService(db, clock).get_report("day", now=NOW)

    assert [bucket.label for bucket in report.series] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    assert [bucket.order_count for bucket in report.series] == [0, 1, 1, 0, 1, 0, 0]
    assert report.series[3].revenue == Decimal(0)
    assert report.series[2].revenue == Decimal("120.00")


@pytest.mark.asyncio
async def test_order_on_bucket_boundary_opens_next_bucket(db, clock, products):
    await place_order(db, clock, local_time(2024, 5, 16, 10, 0), [(products["samosa"], 1)], paid=True)

    report = await ReportService(db, clock).get_report(Granularity.HOUR, now=NOW)

    by_label = {bucket.label: bucket for bucket in report.series}
    assert by_label["10:00"].order_count == 1
    assert by_label["09:00"].order_count == 0


@pytest.mark.asyncio
async def test_orders_outside_window_are_ignored(db, clock, products):
    coffee = products["coffee"]
    await place_order(db, clock, local_time(2024, 5, 15, 23, 59), [(coffee, 1)], paid=True)
    await place_order(db, clock, local_time(2024, 5, 17, 0, 0), [(coffee, 1)], paid=True)
    await place_order(db, clock, local_time(2024, 5, 16, 0, 0), [(coffee, 1)], paid=True)

    report = await ReportService(db, clock).get_report(Granularity.HOUR, now=NOW)

    assert report.total_orders == 1
    assert report.series[0].order_count == 1
    assert report.window_start == local_time(2024, 5, 16)


@pytest.mark.asyncio
async def test_report_is_repeatable(db, clock, products):
    await place_order(db, clock, local_time(2024, 5, 2, 9, 0), [(products["burger"], 1)], paid=True)
    service = ReportService(db, clock)

    first = await service.get_report(Granularity.WEEK, now=NOW)
    second = await service.get_report(Granularity.WEEK, now=NOW)

    assert first == second
    assert first.series[0].label == "05-01"
    assert first.series[0].revenue == Decimal("80.00")


@pytest.mark.asyncio
async def test_status_counts_and_breakdown(db, clock, products):
    coffee = products["coffee"]
    cancelled = await place_order(db, clock, local_time(2024, 5, 16, 8, 0), [(coffee, 1)])
    await place_order(db, clock, local_time(2024, 5, 16, 9, 0), [(coffee, 1)])
    await place_order(db, clock, local_time(2024, 5, 16, 9, 5), [(coffee, 1)])
    await OrderService(db).update_order_status(
        cancelled.id, UpdateOrderStatusCommand(status=OrderStatus.CANCELLED)
    )

    report = await ReportService(db, clock).get_report(Granularity.HOUR, now=NOW)

    assert report.status_counts == {
        OrderStatus.PENDING: 2,
        OrderStatus.CONFIRMED: 0,
        OrderStatus.COMPLETED: 0,
        OrderStatus.CANCELLED: 1,
    }
    assert [(s.status, s.count) for s in report.status_breakdown] == [
        (OrderStatus.PENDING, 2),
        (OrderStatus.CANCELLED, 1),
    ]


def test_average_is_zero_without_paid_orders():
    window = build_window(Granularity.HOUR, NOW, tz=KOLKATA)
    orders = [make_order(1, local_time(2024, 5, 16, 9, 0), "60.00")]

    report = aggregate_orders(orders, window)

    assert report.total_orders == 1
    assert report.paid_orders == 0
    assert report.total_revenue == Decimal(0)
    assert report.average_order_value == Decimal(0)


def test_average_is_rounded_to_cents():
    window = build_window(Granularity.HOUR, NOW, tz=KOLKATA)
    orders = [
        make_order(i, local_time(2024, 5, 16, 9, i), total, payment_status="paid")
        for i, total in enumerate(["10.00", "10.00", "15.00"], start=1)
    ]

    report = aggregate_orders(orders, window)

    assert report.average_order_value == Decimal("11.67")


def test_empty_window_has_zero_buckets():
    window = build_window(Granularity.YEAR, NOW, tz=KOLKATA)

    report = aggregate_orders([], window)

    assert len(report.series) == 12
    assert all(bucket.order_count == 0 for bucket in report.series)
    assert report.status_breakdown == []
    assert set(report.status_counts) == set(OrderStatus)


def test_naive_timestamps_are_read_as_utc():
    window = build_window(Granularity.HOUR, NOW, tz=KOLKATA)
    # 04:00 UTC is 09:30 in Kolkata
    orders = [make_order(1, datetime(2024, 5, 16, 4, 0), "60.00", payment_status="paid")]

    report = aggregate_orders(orders, window)

    assert report.series[9].order_count == 1


@pytest.mark.asyncio
async def test_excel_report_sheets(db, clock, products):
    await place_order(db, clock, local_time(2024, 5, 16, 9, 0), [(products["coffee"], 2)], paid=True)

    content = await ReportService(db, clock).generate_excel_report(Granularity.HOUR, now=NOW)

    sheets = pd.read_excel(io.BytesIO(content), sheet_name=None)
    assert set(sheets) == {"Summary", "Sales", "Status"}
    assert len(sheets["Sales"]) == 24
    assert sheets["Sales"].loc[9, "Revenue"] == 120.0
    assert list(sheets["Status"]["Status"]) == ["pending"]
    summary = dict(zip(sheets["Summary"]["Metric"], sheets["Summary"]["Value"]))
    assert summary["Total orders"] == 1
