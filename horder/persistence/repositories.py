from __future__ import annotations

from dataclasses import dataclass
from typing import ContextManager, Protocol

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.orm import Session

from horder.domain.catalog import Customer, Product
from horder.domain.orders.aggregates import Order, OrderStatus
from horder.persistence.models import CustomerModel, OrderModel, ProductModel, UserModel


@dataclass
class UserRecord:
    username: str
    password: str
    full_name: str = "Administrator"


class Repository(Protocol):
    def list_products(self) -> list[Product]:
        ...

    def get_product(self, product_id: str) -> Product | None:
        ...

    def insert_product(self, product: Product) -> Product:
        ...

    def update_product(self, product: Product) -> bool:
        ...

    def delete_product(self, product_id: str) -> bool:
        ...

    def list_customers(self) -> list[Customer]:
        ...

    def get_customer(self, customer_id: str) -> Customer | None:
        ...

    def find_customer_by_phone(self, phone: str) -> Customer | None:
        ...

    def insert_customer(self, customer: Customer) -> Customer:
        ...

    def update_customer(self, customer: Customer) -> bool:
        ...

    def delete_customer(self, customer_id: str) -> bool:
        ...

    def list_orders(self) -> list[Order]:
        ...

    def get_order(self, order_id: str) -> Order | None:
        ...

    def insert_order(self, order: Order) -> Order:
        ...

    def update_order(self, order: Order, expected_status: OrderStatus | None = None) -> bool:
        ...

    def delete_order(self, order_id: str) -> bool:
        ...

    def count_orders_for_customer(self, customer_id: str) -> int:
        ...

    def list_users(self) -> list[UserRecord]:
        ...

    def get_user(self, username: str) -> UserRecord | None:
        ...

    def insert_user(self, user: UserRecord) -> UserRecord:
        ...

    def update_user(self, user: UserRecord) -> bool:
        ...

    def clear(self, kind: str) -> int:
        ...

    def savepoint(self) -> ContextManager:
        ...


def _product_from_row(row: ProductModel) -> Product:
    return Product.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "source": row.source,
            "variants": row.variants or [],
            "last_updated": row.last_updated,
        }
    )


def _customer_from_row(row: CustomerModel) -> Customer:
    return Customer.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "phone": row.phone,
            "email": row.email or "",
            "fb_link": row.fb_link or "",
            "created_at": row.created_at,
        }
    )


def _order_from_row(row: OrderModel) -> Order:
    return Order.model_validate(
        {
            "id": row.id,
            "customer_id": row.customer_id,
            "customer_name": row.customer_name,
            "customer_phone": row.customer_phone,
            "items": row.items or [],
            "total_amount": row.total_amount,
            "status": row.status,
            "notes": row.notes or "",
            "refund_info": row.refund_info,
            "created_at": row.created_at,
        }
    )


def _user_from_row(row: UserModel) -> UserRecord:
    return UserRecord(username=row.username, password=row.password, full_name=row.full_name)


def _refund_json(order: Order) -> dict | None:
    if order.refund_info is None:
        return None
    return order.refund_info.model_dump(mode="json")


class SqlRepository:
    """Document-style store keyed by business id, one table per entity kind."""

    _TABLES = {
        "products": ProductModel,
        "customers": CustomerModel,
        "orders": OrderModel,
        "users": UserModel,
    }

    def __init__(self, session: Session):
        self.session = session

    # products

    def list_products(self) -> list[Product]:
        rows = self.session.scalars(select(ProductModel).order_by(ProductModel.seq_id.asc())).all()
        return [_product_from_row(row) for row in rows]

    def get_product(self, product_id: str) -> Product | None:
        row = self.session.scalar(select(ProductModel).where(ProductModel.id == product_id))
        return _product_from_row(row) if row is not None else None

    def insert_product(self, product: Product) -> Product:
        self.session.add(
            ProductModel(
                id=product.id,
                name=product.name,
                source=product.source,
                variants=[v.model_dump(mode="json") for v in product.variants],
                last_updated=product.last_updated,
            )
        )
        self.session.flush()
        return product

    def update_product(self, product: Product) -> bool:
        result = self.session.execute(
            update(ProductModel)
            .where(ProductModel.id == product.id)
            .values(
                name=product.name,
                source=product.source,
                variants=[v.model_dump(mode="json") for v in product.variants],
                last_updated=product.last_updated,
            )
        )
        return result.rowcount > 0

    def delete_product(self, product_id: str) -> bool:
        result = self.session.execute(delete(ProductModel).where(ProductModel.id == product_id))
        return result.rowcount > 0

    # customers

    def list_customers(self) -> list[Customer]:
        rows = self.session.scalars(select(CustomerModel).order_by(CustomerModel.seq_id.asc())).all()
        return [_customer_from_row(row) for row in rows]

    def get_customer(self, customer_id: str) -> Customer | None:
        row = self.session.scalar(select(CustomerModel).where(CustomerModel.id == customer_id))
        return _customer_from_row(row) if row is not None else None

    def find_customer_by_phone(self, phone: str) -> Customer | None:
        row = self.session.scalar(
            select(CustomerModel).where(CustomerModel.phone == phone).order_by(CustomerModel.seq_id.asc()).limit(1)
        )
        return _customer_from_row(row) if row is not None else None

    def insert_customer(self, customer: Customer) -> Customer:
        self.session.add(
            CustomerModel(
                id=customer.id,
                name=customer.name,
                phone=customer.phone,
                email=customer.email,
                fb_link=customer.fb_link,
                created_at=customer.created_at,
            )
        )
        self.session.flush()
        return customer

    def update_customer(self, customer: Customer) -> bool:
        result = self.session.execute(
            update(CustomerModel)
            .where(CustomerModel.id == customer.id)
            .values(
                name=customer.name,
                phone=customer.phone,
                email=customer.email,
                fb_link=customer.fb_link,
            )
        )
        return result.rowcount > 0

    def delete_customer(self, customer_id: str) -> bool:
        result = self.session.execute(delete(CustomerModel).where(CustomerModel.id == customer_id))
        return result.rowcount > 0

    # orders

    def list_orders(self) -> list[Order]:
        stmt = select(OrderModel).order_by(desc(OrderModel.created_at), desc(OrderModel.seq_id))
        return [_order_from_row(row) for row in self.session.scalars(stmt).all()]

    def get_order(self, order_id: str) -> Order | None:
        row = self.session.scalar(select(OrderModel).where(OrderModel.id == order_id))
        return _order_from_row(row) if row is not None else None

    def insert_order(self, order: Order) -> Order:
        self.session.add(
            OrderModel(
                id=order.id,
                customer_id=order.customer_id,
                customer_name=order.customer_name,
                customer_phone=order.customer_phone,
                items=[item.model_dump(mode="json") for item in order.items],
                total_amount=order.total_amount,
                status=order.status,
                notes=order.notes,
                refund_info=_refund_json(order),
                created_at=order.created_at,
            )
        )
        self.session.flush()
        return order

    def update_order(self, order: Order, expected_status: OrderStatus | None = None) -> bool:
        # Only the lifecycle fields are writable; items and totals are frozen at creation.
        stmt = update(OrderModel).where(OrderModel.id == order.id)
        if expected_status is not None:
            stmt = stmt.where(OrderModel.status == expected_status)
        result = self.session.execute(stmt.values(status=order.status, refund_info=_refund_json(order)))
        return result.rowcount > 0

    def delete_order(self, order_id: str) -> bool:
        result = self.session.execute(delete(OrderModel).where(OrderModel.id == order_id))
        return result.rowcount > 0

    def count_orders_for_customer(self, customer_id: str) -> int:
        stmt = select(func.count()).select_from(OrderModel).where(OrderModel.customer_id == customer_id)
        return int(self.session.scalar(stmt) or 0)

    # users

    def list_users(self) -> list[UserRecord]:
        rows = self.session.scalars(select(UserModel).order_by(UserModel.seq_id.asc())).all()
        return [_user_from_row(row) for row in rows]

    def get_user(self, username: str) -> UserRecord | None:
        row = self.session.scalar(select(UserModel).where(UserModel.username == username))
        return _user_from_row(row) if row is not None else None

    def insert_user(self, user: UserRecord) -> UserRecord:
        self.session.add(UserModel(username=user.username, password=user.password, full_name=user.full_name))
        self.session.flush()
        return user

    def update_user(self, user: UserRecord) -> bool:
        result = self.session.execute(
            update(UserModel)
            .where(UserModel.username == user.username)
            .values(password=user.password, full_name=user.full_name)
        )
        return result.rowcount > 0

    # bulk

    def clear(self, kind: str) -> int:
        model = self._TABLES.get(kind)
        if model is None:
            raise ValueError(f"unknown collection: {kind}")
        result = self.session.execute(delete(model))
        return result.rowcount or 0

    def savepoint(self) -> ContextManager:
        return self.session.begin_nested()
