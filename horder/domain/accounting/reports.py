from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, Literal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, model_validator

from horder.core.config import get_settings
from horder.domain.catalog import utc_now
from horder.domain.orders.aggregates import Order
from horder.domain.orders.projections import sort_orders_newest_first

WindowKind = Literal["today", "week", "month", "all", "custom"]

WINDOW_LABELS: dict[str, str] = {
    "today": "Hôm nay",
    "week": "7 ngày qua",
    "month": "Tháng này",
    "all": "Toàn thời gian",
    "custom": "Tùy chọn",
}


class TimeWindow(BaseModel):
    kind: WindowKind = "month"
    start: date | None = None
    end: date | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "TimeWindow":
        if self.kind != "custom":
            return self
        if self.start is None or self.end is None:
            raise ValueError("custom window requires start and end dates")
        if self.end < self.start:
            raise ValueError("custom window end must not be before start")
        return self

    @property
    def label(self) -> str:
        if self.kind == "custom" and self.start and self.end:
            return f"{self.start.strftime('%d/%m')} - {self.end.strftime('%d/%m')}"
        return WINDOW_LABELS[self.kind]


@dataclass
class OrderStats:
    revenue: int = 0
    profit: int = 0
    order_count: int = 0


@dataclass
class Dashboard:
    window: TimeWindow
    stats: OrderStats
    recent_orders: list[Order] = field(default_factory=list)


def report_timezone() -> tzinfo:
    return ZoneInfo(get_settings().report_timezone)


def in_window(created_at: datetime, window: TimeWindow, now: datetime, tz: tzinfo) -> bool:
    local = created_at.astimezone(tz)
    local_now = now.astimezone(tz)

    if window.kind == "all":
        return True
    if window.kind == "today":
        return local.date() == local_now.date()
    if window.kind == "week":
        return created_at >= now - timedelta(days=7)
    if window.kind == "month":
        return local.year == local_now.year and local.month == local_now.month
    start = datetime.combine(window.start, time.min, tzinfo=tz)
    end = datetime.combine(window.end, time.max, tzinfo=tz)
    return start <= local <= end


def order_contribution(order: Order) -> tuple[int, int]:
    """(revenue, profit) one order adds to the totals."""
    total = order.total_amount
    cost = order.total_cost
    if order.is_cancelled and order.refund_info is not None:
        refund = order.refund_info
        revenue = total - refund.refund_to_customer
        profit = total - cost - refund.refund_to_customer + refund.refund_from_supplier
        return revenue, profit
    return total, total - cost


def compute_stats(
    orders: Iterable[Order],
    window: TimeWindow,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> OrderStats:
    now = now or utc_now()
    tz = tz or report_timezone()

    stats = OrderStats()
    for order in orders:
        if not in_window(order.created_at, window, now, tz):
            continue
        revenue, profit = order_contribution(order)
        stats.revenue += revenue
        stats.profit += profit
        stats.order_count += 1
    return stats


def recent_orders(orders: Iterable[Order], limit: int | None = None) -> list[Order]:
    limit = limit if limit is not None else get_settings().recent_orders_limit
    return sort_orders_newest_first(orders)[:limit]


def build_dashboard(
    orders: Iterable[Order],
    window: TimeWindow,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> Dashboard:
    snapshot = list(orders)
    return Dashboard(
        window=window,
        stats=compute_stats(snapshot, window, now=now, tz=tz),
        recent_orders=recent_orders(snapshot),
    )
