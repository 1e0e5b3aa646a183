from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from horder.domain.catalog import utc_now
from horder.domain.durations import days_for
from horder.domain.errors import InvalidOrderTransition, OrderValidationError
from horder.domain.orders.aggregates import Order, OrderItem, RefundInfo
from horder.domain.orders.commands import load_order
from horder.persistence.repositories import Repository

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class OrderDeletion:
    order_id: str
    customer_id: str
    customer_deleted: bool
    cascade_error: str | None = None


def elapsed_days(since: datetime, now: datetime) -> float:
    return (now - since).total_seconds() / SECONDS_PER_DAY


def item_refund(item: OrderItem, used_days: float) -> int:
    total_days = days_for(item.usage_time)
    if total_days == 0:
        return 0
    remaining = max(0.0, total_days - used_days)
    return math.floor(item.price_at_sale * remaining / total_days)


def compute_recommended_refund(order: Order, now: datetime | None = None) -> int:
    """Suggested refund pro-rated by remaining subscription time.

    The operator may override the value before confirming the cancellation.
    """
    used_days = elapsed_days(order.created_at, now or utc_now())
    return sum(item_refund(item, used_days) for item in order.items)


def cancel_order(
    repo: Repository,
    order_id: str,
    refund_to_customer: int,
    refund_from_supplier: int = 0,
    reason: str | None = None,
    now: datetime | None = None,
) -> Order:
    order = load_order(repo, order_id)
    if order.status != "completed":
        raise InvalidOrderTransition(f"order {order_id} cannot be cancelled from status {order.status}")
    if refund_to_customer < 0 or refund_from_supplier < 0:
        raise OrderValidationError("refund amounts must not be negative")

    refund = RefundInfo(
        refund_to_customer=refund_to_customer,
        refund_from_supplier=refund_from_supplier,
        refund_date=now or utc_now(),
        reason=(reason or "").strip() or None,
    )
    cancelled = order.model_copy(update={"status": "cancelled", "refund_info": refund})

    # Status and refund info go out in a single conditional update.
    if not repo.update_order(cancelled, expected_status="completed"):
        raise InvalidOrderTransition(f"order {order_id} changed status during cancellation")

    logger.info(
        "order cancelled: order_id=%s refund_to_customer=%d refund_from_supplier=%d",
        order_id,
        refund.refund_to_customer,
        refund.refund_from_supplier,
    )
    return cancelled


def delete_order(repo: Repository, order_id: str) -> OrderDeletion:
    """Hard-delete an order in any status.

    When the customer is left without orders the customer record is removed
    as well. That second step is best-effort: its failure never undoes the
    order deletion.
    """
    order = load_order(repo, order_id)
    repo.delete_order(order_id)
    logger.info("order deleted: order_id=%s status=%s", order_id, order.status)

    try:
        customer_deleted = _delete_orphaned_customer(repo, order.customer_id)
    except SQLAlchemyError as exc:
        logger.warning("customer cascade failed: customer_id=%s error=%s", order.customer_id, exc)
        return OrderDeletion(
            order_id=order_id,
            customer_id=order.customer_id,
            customer_deleted=False,
            cascade_error=str(exc),
        )
    return OrderDeletion(order_id=order_id, customer_id=order.customer_id, customer_deleted=customer_deleted)


def _delete_orphaned_customer(repo: Repository, customer_id: str) -> bool:
    if repo.count_orders_for_customer(customer_id) > 0:
        return False
    with repo.savepoint():
        deleted = repo.delete_customer(customer_id)
    if deleted:
        logger.info("orphaned customer deleted: customer_id=%s", customer_id)
    return deleted
