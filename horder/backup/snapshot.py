from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from horder.domain.catalog import Customer, Product, utc_now
from horder.domain.errors import InvalidSnapshotError
from horder.domain.orders.aggregates import Order
from horder.persistence.repositories import Repository, UserRecord

logger = logging.getLogger(__name__)

REQUIRED_COLLECTIONS = ("products", "customers", "orders")


@dataclass
class RestoreResult:
    products: int
    customers: int
    orders: int
    users: int


def export_snapshot(repo: Repository, now: datetime | None = None) -> dict[str, Any]:
    return {
        "products": [p.model_dump(mode="json") for p in repo.list_products()],
        "customers": [c.model_dump(mode="json") for c in repo.list_customers()],
        "orders": [o.model_dump(mode="json") for o in repo.list_orders()],
        "users": [asdict(u) for u in repo.list_users()],
        "timestamp": (now or utc_now()).isoformat().replace("+00:00", "Z"),
    }


def _parse(snapshot: dict[str, Any]) -> tuple[list[Product], list[Customer], list[Order], list[UserRecord]]:
    if not isinstance(snapshot, dict):
        raise InvalidSnapshotError("backup must be a JSON object")
    missing = [key for key in REQUIRED_COLLECTIONS if not isinstance(snapshot.get(key), list)]
    if missing:
        raise InvalidSnapshotError(f"invalid backup, missing collections: {', '.join(missing)}")

    try:
        products = [Product.model_validate(raw) for raw in snapshot["products"]]
        customers = [Customer.model_validate(raw) for raw in snapshot["customers"]]
        orders = [Order.model_validate(raw) for raw in snapshot["orders"]]
    except ValidationError as exc:
        raise InvalidSnapshotError(f"invalid backup record: {exc.errors()[0].get('msg')}") from exc

    users: list[UserRecord] = []
    for raw in snapshot.get("users") or []:
        if not isinstance(raw, dict) or not raw.get("username") or not raw.get("password"):
            raise InvalidSnapshotError("invalid backup record: user needs username and password")
        users.append(
            UserRecord(
                username=str(raw["username"]).strip().lower(),
                password=str(raw["password"]),
                full_name=str(raw.get("full_name") or "Administrator"),
            )
        )
    return products, customers, orders, users


def restore_snapshot(repo: Repository, snapshot: dict[str, Any]) -> RestoreResult:
    """Replace every collection with the snapshot's contents.

    Users are only replaced when the snapshot carries at least one.
    Everything is validated before anything is deleted.
    """
    products, customers, orders, users = _parse(snapshot)

    for kind in REQUIRED_COLLECTIONS:
        repo.clear(kind)
    if users:
        repo.clear("users")
        for user in users:
            repo.insert_user(user)

    for product in products:
        repo.insert_product(product)
    for customer in customers:
        repo.insert_customer(customer)
    for order in orders:
        repo.insert_order(order)

    result = RestoreResult(
        products=len(products),
        customers=len(customers),
        orders=len(orders),
        users=len(users),
    )
    logger.info(
        "restore completed: products=%d customers=%d orders=%d users=%d",
        result.products,
        result.customers,
        result.orders,
        result.users,
    )
    return result
