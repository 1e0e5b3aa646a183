from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from horder.domain.accounting.reports import (
    TimeWindow,
    build_dashboard,
    compute_stats,
    order_contribution,
    recent_orders,
)
from horder.domain.orders.aggregates import Order, OrderItem, RefundInfo

UTC = timezone.utc
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


def _order(created_at: datetime, total: int = 100000, cost: int = 60000, refund: RefundInfo | None = None) -> Order:
    return Order(
        customer_id="c1",
        customer_name="Lan",
        customer_phone="0901",
        items=[OrderItem(product_id="p", product_name="P", price_at_sale=total, cost_at_sale=cost, usage_time="1 tháng")],
        total_amount=total,
        status="cancelled" if refund else "completed",
        refund_info=refund,
        created_at=created_at,
    )


def test_completed_order_contribution():
    assert order_contribution(_order(NOW)) == (100000, 40000)


def test_cancelled_order_contribution():
    refund = RefundInfo(refund_to_customer=50000, refund_from_supplier=20000, refund_date=NOW)
    assert order_contribution(_order(NOW, refund=refund)) == (50000, 10000)


def test_cancelled_orders_still_counted():
    refund = RefundInfo(refund_to_customer=100000, refund_date=NOW)
    stats = compute_stats([_order(NOW), _order(NOW, refund=refund)], TimeWindow(kind="all"), now=NOW, tz=UTC)
    assert stats.order_count == 2
    assert stats.revenue == 100000
    assert stats.profit == 40000 + (100000 - 60000 - 100000)


def test_today_window_is_calendar_day():
    orders = [
        _order(datetime(2024, 3, 15, 0, 0, tzinfo=UTC)),
        _order(datetime(2024, 3, 14, 23, 59, tzinfo=UTC)),
    ]
    stats = compute_stats(orders, TimeWindow(kind="today"), now=NOW, tz=UTC)
    assert stats.order_count == 1


def test_today_window_respects_report_timezone():
    hcm = ZoneInfo("Asia/Ho_Chi_Minh")
    # 18:00 UTC on the 14th is 01:00 on the 15th in Ho Chi Minh City.
    order = _order(datetime(2024, 3, 14, 18, 0, tzinfo=UTC))
    assert compute_stats([order], TimeWindow(kind="today"), now=NOW, tz=hcm).order_count == 1
    assert compute_stats([order], TimeWindow(kind="today"), now=NOW, tz=UTC).order_count == 0


def test_week_window_is_rolling_seven_days():
    orders = [
        _order(NOW - timedelta(days=7)),
        _order(NOW - timedelta(days=7, seconds=1)),
        _order(NOW - timedelta(days=1)),
    ]
    assert compute_stats(orders, TimeWindow(kind="week"), now=NOW, tz=UTC).order_count == 2


def test_month_window_is_calendar_month():
    orders = [
        _order(datetime(2024, 3, 1, tzinfo=UTC)),
        _order(datetime(2024, 2, 29, 23, 0, tzinfo=UTC)),
        _order(datetime(2023, 3, 10, tzinfo=UTC)),
    ]
    assert compute_stats(orders, TimeWindow(kind="month"), now=NOW, tz=UTC).order_count == 1


def test_custom_window_is_inclusive_of_whole_days():
    window = TimeWindow(kind="custom", start=date(2024, 3, 1), end=date(2024, 3, 10))
    orders = [
        _order(datetime(2024, 3, 1, 0, 0, tzinfo=UTC)),
        _order(datetime(2024, 3, 10, 23, 59, 59, tzinfo=UTC)),
        _order(datetime(2024, 3, 11, 0, 0, tzinfo=UTC)),
        _order(datetime(2024, 2, 29, 23, 59, 59, tzinfo=UTC)),
    ]
    stats = compute_stats(orders, window, now=NOW, tz=UTC)
    assert stats.order_count == 2
    assert stats.revenue == 200000
    assert stats.profit == 80000


def test_custom_window_validation():
    with pytest.raises(ValidationError):
        TimeWindow(kind="custom", start=date(2024, 3, 2), end=date(2024, 3, 1))
    with pytest.raises(ValidationError):
        TimeWindow(kind="custom", start=date(2024, 3, 2))
    with pytest.raises(ValidationError):
        TimeWindow(kind="quarter")


def test_recent_orders_ignores_window():
    orders = [_order(NOW - timedelta(days=i * 40)) for i in range(7)]
    recent = recent_orders(reversed(orders), limit=5)
    assert [o.created_at for o in recent] == [o.created_at for o in orders[:5]]


def test_dashboard_bundles_stats_and_recent_orders():
    orders = [_order(NOW - timedelta(days=i * 40)) for i in range(7)]
    dashboard = build_dashboard(orders, TimeWindow(kind="today"), now=NOW, tz=UTC)
    assert dashboard.stats.order_count == 1
    assert len(dashboard.recent_orders) == 5
    assert dashboard.recent_orders[0].created_at == NOW
    assert dashboard.window.label == "Hôm nay"
