from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from horder.api.utils import get_repository
from horder.core.security import get_session_context
from horder.domain.customers import NewCustomer, ensure_customer, update_customer
from horder.domain.errors import EntityNotFound
from horder.domain.inventory.commands import ProductInput, create_product, delete_product, update_product
from horder.domain.orders.projections import CustomerHistory, customer_history, filter_customers
from horder.persistence.repositories import SqlRepository

router = APIRouter(tags=["catalog"], dependencies=[Depends(get_session_context)])


@router.get("/products")
def list_products(repo: SqlRepository = Depends(get_repository)):
    return [p.model_dump(mode="json") for p in repo.list_products()]


@router.post("/products", status_code=201)
def post_product(body: ProductInput, repo: SqlRepository = Depends(get_repository)):
    return create_product(repo, body).model_dump(mode="json")


@router.get("/products/{product_id}")
def get_product(product_id: str, repo: SqlRepository = Depends(get_repository)):
    product = repo.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="product not found")
    return product.model_dump(mode="json")


@router.put("/products/{product_id}")
def put_product(product_id: str, body: ProductInput, repo: SqlRepository = Depends(get_repository)):
    return update_product(repo, product_id, body).model_dump(mode="json")


@router.delete("/products/{product_id}")
def remove_product(product_id: str, repo: SqlRepository = Depends(get_repository)):
    delete_product(repo, product_id)
    return {"deleted": True}


def _history_totals(history: CustomerHistory) -> dict:
    return {"order_count": history.order_count, "total_spent": history.total_spent}


@router.get("/customers")
def list_customers(
    search: str | None = Query(default=None),
    repo: SqlRepository = Depends(get_repository),
):
    orders = repo.list_orders()
    return [
        {**c.model_dump(mode="json"), **_history_totals(customer_history(orders, c.id))}
        for c in filter_customers(repo.list_customers(), search)
    ]


@router.get("/customers/{customer_id}/orders")
def get_customer_orders(customer_id: str, repo: SqlRepository = Depends(get_repository)):
    customer = repo.get_customer(customer_id)
    if customer is None:
        raise EntityNotFound("customer", customer_id)
    history = customer_history(repo.list_orders(), customer_id)
    return {
        "customer": customer.model_dump(mode="json"),
        **_history_totals(history),
        "orders": [o.model_dump(mode="json") for o in history.orders],
    }


@router.post("/customers", status_code=201)
def post_customer(body: NewCustomer, repo: SqlRepository = Depends(get_repository)):
    return ensure_customer(repo, body).model_dump(mode="json")


@router.put("/customers/{customer_id}")
def put_customer(customer_id: str, body: NewCustomer, repo: SqlRepository = Depends(get_repository)):
    return update_customer(repo, customer_id, body).model_dump(mode="json")
