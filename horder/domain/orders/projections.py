from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Literal

from horder.domain.catalog import Customer, utc_now
from horder.domain.durations import expiry_date
from horder.domain.orders.aggregates import Order, OrderItem

StatusFilter = Literal["all", "active", "expired", "cancelled"]
STATUS_FILTERS: tuple[str, ...] = ("all", "active", "expired", "cancelled")


@dataclass(frozen=True)
class ItemExpiry:
    expires_at: datetime | None
    expired: bool


def item_expiry(order: Order, item: OrderItem, now: datetime | None = None) -> ItemExpiry:
    expires_at = expiry_date(order.created_at, item.usage_time)
    if expires_at is None:
        return ItemExpiry(expires_at=None, expired=False)
    return ItemExpiry(expires_at=expires_at, expired=(now or utc_now()) > expires_at)


def has_active_item(order: Order, now: datetime | None = None) -> bool:
    now = now or utc_now()
    return any(not item_expiry(order, item, now).expired for item in order.items)


def _matches_status(order: Order, status_filter: str, now: datetime) -> bool:
    if status_filter == "all":
        return True
    if status_filter == "cancelled":
        return order.is_cancelled
    if order.is_cancelled:
        return False
    active = has_active_item(order, now)
    if status_filter == "active":
        return active
    if status_filter == "expired":
        return not active
    raise ValueError(f"unsupported status filter: {status_filter}")


def _matches_search(order: Order, term: str) -> bool:
    if not term:
        return True
    haystack = (order.customer_name, order.customer_phone, order.id, order.notes or "")
    return any(term in field.lower() for field in haystack)


def sort_orders_newest_first(orders: Iterable[Order]) -> list[Order]:
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


def filter_orders(
    orders: Iterable[Order],
    status_filter: StatusFilter | str = "all",
    search_term: str | None = "",
    now: datetime | None = None,
) -> list[Order]:
    if status_filter not in STATUS_FILTERS:
        raise ValueError(f"unsupported status filter: {status_filter}")
    now = now or utc_now()
    term = (search_term or "").strip().lower()
    return [
        order
        for order in sort_orders_newest_first(orders)
        if _matches_status(order, status_filter, now) and _matches_search(order, term)
    ]


def filter_customers(customers: Iterable[Customer], search_term: str | None = "") -> list[Customer]:
    term = (search_term or "").strip().lower()
    if not term:
        return list(customers)
    return [
        customer
        for customer in customers
        if term in customer.name.lower() or term in customer.phone.lower() or term in customer.email.lower()
    ]


@dataclass(frozen=True)
class CustomerHistory:
    customer_id: str
    orders: list[Order]

    @property
    def order_count(self) -> int:
        return len(self.orders)

    @property
    def total_spent(self) -> int:
        # Gross order totals; cancelled orders count at their original amount.
        return sum(order.total_amount for order in self.orders)


def customer_history(orders: Iterable[Order], customer_id: str) -> CustomerHistory:
    return CustomerHistory(
        customer_id=customer_id,
        orders=[order for order in sort_orders_newest_first(orders) if order.customer_id == customer_id],
    )
