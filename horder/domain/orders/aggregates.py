from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from horder.domain.catalog import as_utc, new_id, utc_now

OrderStatus = Literal["completed", "pending", "cancelled"]


class OrderItem(BaseModel):
    product_id: str
    product_name: str
    price_at_sale: int = Field(ge=0, description="sell price snapshot, VND")
    cost_at_sale: int = Field(ge=0, description="import price snapshot, VND")
    usage_time: str


class RefundInfo(BaseModel):
    refund_to_customer: int = Field(ge=0)
    refund_from_supplier: int = Field(default=0, ge=0)
    refund_date: datetime = Field(default_factory=utc_now)
    reason: str | None = None

    @field_validator("refund_date")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class Order(BaseModel):
    id: str = Field(default_factory=new_id)
    customer_id: str
    customer_name: str
    customer_phone: str
    items: list[OrderItem] = Field(min_length=1)
    total_amount: int = Field(ge=0)
    status: OrderStatus = "completed"
    notes: str = ""
    refund_info: RefundInfo | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _check_invariants(self) -> "Order":
        expected = sum(item.price_at_sale for item in self.items)
        if self.total_amount != expected:
            raise ValueError(f"total_amount {self.total_amount} != sum of item prices {expected}")
        if self.status == "cancelled" and self.refund_info is None:
            raise ValueError("cancelled order must carry refund_info")
        return self

    @property
    def total_cost(self) -> int:
        return sum(item.cost_at_sale for item in self.items)

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"
