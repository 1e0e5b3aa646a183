from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from horder.api.utils import get_repository, iso_z
from horder.core.security import get_session_context
from horder.domain.catalog import utc_now
from horder.domain.orders.aggregates import Order
from horder.domain.orders.commands import CartLine, CustomerRef, create_order, load_order
from horder.domain.orders.projections import STATUS_FILTERS, filter_orders, item_expiry
from horder.domain.orders.refunds import cancel_order, compute_recommended_refund, delete_order
from horder.persistence.repositories import SqlRepository

router = APIRouter(tags=["orders"], dependencies=[Depends(get_session_context)])


class OrderCreateRequest(BaseModel):
    customer: CustomerRef
    items: list[CartLine]
    notes: str | None = None
    order_date: datetime | None = None


class CancelRequest(BaseModel):
    refund_to_customer: int | None = Field(default=None, ge=0)
    refund_from_supplier: int = Field(default=0, ge=0)
    reason: str | None = None


def _order_view(order: Order, now: datetime) -> dict:
    data = order.model_dump(mode="json")
    for raw, item in zip(data["items"], order.items):
        expiry = item_expiry(order, item, now)
        raw["expires_at"] = iso_z(expiry.expires_at)
        raw["expired"] = expiry.expired
    return data


@router.get("/orders")
def list_orders(
    status: str = Query(default="all"),
    search: str | None = Query(default=None),
    repo: SqlRepository = Depends(get_repository),
):
    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=400, detail=f"status must be one of {', '.join(STATUS_FILTERS)}")
    now = utc_now()
    orders = filter_orders(repo.list_orders(), status, search, now=now)
    return {"count": len(orders), "orders": [_order_view(o, now) for o in orders]}


@router.post("/orders", status_code=201)
def post_order(body: OrderCreateRequest, repo: SqlRepository = Depends(get_repository)):
    order = create_order(repo, body.customer, body.items, notes=body.notes, order_date=body.order_date)
    return _order_view(order, utc_now())


@router.get("/orders/{order_id}")
def get_order(order_id: str, repo: SqlRepository = Depends(get_repository)):
    return _order_view(load_order(repo, order_id), utc_now())


@router.get("/orders/{order_id}/refund-recommendation")
def get_refund_recommendation(order_id: str, repo: SqlRepository = Depends(get_repository)):
    order = load_order(repo, order_id)
    return {
        "order_id": order.id,
        "total_amount": order.total_amount,
        "recommended_refund": compute_recommended_refund(order),
    }


@router.post("/orders/{order_id}/cancel")
def post_cancel(order_id: str, body: CancelRequest, repo: SqlRepository = Depends(get_repository)):
    refund_to_customer = body.refund_to_customer
    if refund_to_customer is None:
        refund_to_customer = compute_recommended_refund(load_order(repo, order_id))
    order = cancel_order(
        repo,
        order_id,
        refund_to_customer=refund_to_customer,
        refund_from_supplier=body.refund_from_supplier,
        reason=body.reason,
    )
    return _order_view(order, utc_now())


@router.delete("/orders/{order_id}")
def remove_order(order_id: str, repo: SqlRepository = Depends(get_repository)):
    result = delete_order(repo, order_id)
    return {
        "deleted": True,
        "order_id": result.order_id,
        "customer_id": result.customer_id,
        "customer_deleted": result.customer_deleted,
    }
