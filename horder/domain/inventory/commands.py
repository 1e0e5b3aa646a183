from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel, Field

from horder.domain.catalog import Product, Variant, new_id, utc_now
from horder.domain.errors import EntityNotFound, ValidationError
from horder.persistence.repositories import Repository

logger = logging.getLogger(__name__)


class VariantInput(BaseModel):
    id: str | None = None
    duration: str
    import_price: int = Field(ge=0)
    sell_price: int = Field(ge=0)


class ProductInput(BaseModel):
    name: str
    source: str = ""
    variants: list[VariantInput] = Field(default_factory=list)


def _build_product(product_id: str, data: ProductInput, now: datetime) -> Product:
    name = data.name.strip()
    if not name:
        raise ValidationError("product name is required")
    if not data.variants:
        raise ValidationError("product must have at least one variant")
    try:
        variants = [
            Variant(
                id=v.id or new_id(),
                duration=v.duration,
                import_price=v.import_price,
                sell_price=v.sell_price,
            )
            for v in data.variants
        ]
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    return Product(id=product_id, name=name, source=data.source.strip(), variants=variants, last_updated=now)


def create_product(repo: Repository, data: ProductInput, now: datetime | None = None) -> Product:
    product = _build_product(new_id(), data, now or utc_now())
    repo.insert_product(product)
    logger.info("product created: product_id=%s variants=%d", product.id, len(product.variants))
    return product


def update_product(repo: Repository, product_id: str, data: ProductInput, now: datetime | None = None) -> Product:
    if repo.get_product(product_id) is None:
        raise EntityNotFound("product", product_id)
    product = _build_product(product_id, data, now or utc_now())
    repo.update_product(product)
    logger.info("product updated: product_id=%s", product_id)
    return product


def delete_product(repo: Repository, product_id: str) -> None:
    # Orders keep their own item snapshots, nothing cascades.
    if not repo.delete_product(product_id):
        raise EntityNotFound("product", product_id)
    logger.info("product deleted: product_id=%s", product_id)
