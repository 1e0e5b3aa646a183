from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

USAGE_OPTIONS: tuple[str, ...] = (
    "1 tháng",
    "2 tháng",
    "3 tháng",
    "6 tháng",
    "9 tháng",
    "1 năm",
    "Vĩnh viễn",
)


def new_id() -> str:
    return uuid4().hex[:12]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Variant(BaseModel):
    id: str = Field(default_factory=new_id)
    duration: str
    import_price: int = Field(ge=0, description="cost price, VND")
    sell_price: int = Field(ge=0, description="list price, VND")

    @field_validator("duration")
    @classmethod
    def _known_duration(cls, value: str) -> str:
        value = value.strip()
        if value not in USAGE_OPTIONS:
            raise ValueError(f"unsupported duration: {value!r}")
        return value


class Product(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    source: str = ""
    variants: list[Variant] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utc_now)

    @field_validator("last_updated")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def orderable(self) -> bool:
        return bool(self.variants)

    def find_variant(self, variant_id: str) -> Variant | None:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None


class Customer(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str = ""
    fb_link: str = ""
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("name", "phone")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("created_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)
