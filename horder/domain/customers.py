from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel

from horder.domain.catalog import Customer, utc_now
from horder.domain.errors import EntityNotFound, ValidationError
from horder.persistence.repositories import Repository

logger = logging.getLogger(__name__)


class NewCustomer(BaseModel):
    name: str = ""
    phone: str = ""
    email: str = ""
    fb_link: str = ""


def ensure_customer(repo: Repository, data: NewCustomer, now: datetime | None = None) -> Customer:
    """Return the customer with ``data.phone``, creating it when none exists."""
    name = data.name.strip()
    phone = data.phone.strip()
    if not name or not phone:
        raise ValidationError("customer name and phone are required")

    existing = repo.find_customer_by_phone(phone)
    if existing is not None:
        return existing

    customer = Customer(
        name=name,
        phone=phone,
        email=data.email.strip(),
        fb_link=data.fb_link.strip(),
        created_at=now or utc_now(),
    )
    repo.insert_customer(customer)
    logger.info("customer created: customer_id=%s", customer.id)
    return customer


def update_customer(repo: Repository, customer_id: str, data: NewCustomer) -> Customer:
    current = repo.get_customer(customer_id)
    if current is None:
        raise EntityNotFound("customer", customer_id)
    name = data.name.strip()
    phone = data.phone.strip()
    if not name or not phone:
        raise ValidationError("customer name and phone are required")

    # Past orders keep their own name/phone snapshot.
    updated = current.model_copy(
        update={"name": name, "phone": phone, "email": data.email.strip(), "fb_link": data.fb_link.strip()}
    )
    repo.update_customer(updated)
    return updated
