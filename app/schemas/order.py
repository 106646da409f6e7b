import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal["ordered", "preparing", "out_for_delivery", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "completed", "refunded"]
DeliveryStatus = Literal["pending", "out_for_delivery", "delivered"]


class DeliveryAddress(SQLModel):
    """
    Address snapshot copied onto the order at placement.
    """

    model_config = ConfigDict(extra="forbid")

    label: str
    line1: str
    line2: str | None = None
    city: str
    zip: str

    @field_validator("label", "line1", "city", "zip")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("line2")
    @classmethod
    def normalize_line2(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderItemCreate(SQLModel):
    """
    One requested line: menu item + quantity (+ optional note).
    """

    model_config = ConfigDict(extra="forbid")

    menu_item_id: uuid.UUID
    quantity: int = Field(ge=1)
    note: str | None = Field(default=None, max_length=300)

    @field_validator("note")
    @classmethod
    def normalize_note(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderCreate(SQLModel):
    """
    Payload for placing an order.

    Backend derives:
      - user_id from token
      - vendor_id from the menu items (must be a single vendor)
      - total_amount from current menu prices
      - status / payment_status / delivery_status = ordered / pending / pending
    """

    model_config = ConfigDict(extra="forbid")

    items: list[OrderItemCreate] = Field(min_length=1)
    delivery_address: DeliveryAddress


class OrderItemRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    menu_item_id: uuid.UUID
    quantity: int
    unit_price: float
    note: str | None
    line_total: float


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    vendor_id: uuid.UUID
    total_amount: float
    status: OrderStatus
    payment_status: PaymentStatus
    delivery_status: DeliveryStatus
    address_label: str
    address_line1: str
    address_line2: str | None
    city: str
    zip_code: str
    created_at: datetime
    updated_at: datetime


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderStatusUpdate(SQLModel):
    """
    Vendor/admin payload to advance order status.

    Kept as a plain string: unsupported values are a 400 from the
    service, not a schema error.
    """

    model_config = ConfigDict(extra="forbid")

    status: str


class PurgeResult(SQLModel):
    deleted: int
    cutoff: datetime
