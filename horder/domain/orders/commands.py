from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel, Field

from horder.domain.catalog import Customer, utc_now
from horder.domain.customers import NewCustomer, ensure_customer
from horder.domain.errors import OrderNotFound, OrderValidationError
from horder.domain.orders.aggregates import Order, OrderItem
from horder.persistence.repositories import Repository

logger = logging.getLogger(__name__)


class CartLine(BaseModel):
    product_id: str
    variant_id: str
    price_override: int | None = Field(default=None, ge=0)
    usage_time: str | None = None


class CustomerRef(BaseModel):
    customer_id: str | None = None
    new_customer: NewCustomer | None = None


def _resolve_customer(repo: Repository, ref: CustomerRef, now: datetime) -> Customer:
    if ref.customer_id:
        customer = repo.get_customer(ref.customer_id)
        if customer is None:
            raise OrderValidationError(f"unknown customer: {ref.customer_id}")
        return customer
    if ref.new_customer is not None:
        return ensure_customer(repo, ref.new_customer, now=now)
    raise OrderValidationError("an existing customer id or new customer name and phone is required")


def _snapshot_line(repo: Repository, line: CartLine) -> OrderItem:
    product = repo.get_product(line.product_id)
    if product is None:
        raise OrderValidationError(f"unknown product: {line.product_id}")
    if not product.orderable:
        raise OrderValidationError(f"product has no variants: {product.id}")
    variant = product.find_variant(line.variant_id)
    if variant is None:
        raise OrderValidationError(f"unknown variant {line.variant_id} for product {product.id}")

    price = line.price_override if line.price_override is not None else variant.sell_price
    usage_time = (line.usage_time or "").strip() or variant.duration
    return OrderItem(
        product_id=product.id,
        product_name=f"{product.name} ({variant.duration})",
        price_at_sale=price,
        cost_at_sale=variant.import_price,
        usage_time=usage_time,
    )


def load_order(repo: Repository, order_id: str) -> Order:
    order = repo.get_order(order_id)
    if order is None:
        raise OrderNotFound(order_id)
    return order


def create_order(
    repo: Repository,
    customer: CustomerRef,
    items: list[CartLine],
    notes: str | None = None,
    order_date: datetime | None = None,
    now: datetime | None = None,
) -> Order:
    if not items:
        raise OrderValidationError("order must contain at least one item")

    now = now or utc_now()
    resolved = _resolve_customer(repo, customer, now)
    order_items = [_snapshot_line(repo, line) for line in items]

    order = Order(
        customer_id=resolved.id,
        customer_name=resolved.name,
        customer_phone=resolved.phone,
        items=order_items,
        total_amount=sum(item.price_at_sale for item in order_items),
        status="completed",
        notes=(notes or "").strip(),
        created_at=order_date or now,
    )
    repo.insert_order(order)
    logger.info(
        "order created: order_id=%s customer_id=%s items=%d total=%d",
        order.id,
        order.customer_id,
        len(order.items),
        order.total_amount,
    )
    return order
