import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order placed with a single vendor.

    Three independent status axes:
      - status:          ordered | preparing | out_for_delivery | delivered | cancelled
      - payment_status:  pending | completed | refunded
      - delivery_status: pending | out_for_delivery | delivered

    The axes are written by OrderService, PaymentService and
    DeliveryService; cross-setting rules live in those services.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    vendor_id: uuid.UUID = Field(
        foreign_key="vendors.id",
        index=True,
    )

    # Fixed at placement
    total_amount: float = Field(
        ge=0,
        description="Sum of unit_price * quantity over all items",
    )

    status: str = Field(
        default="ordered",
        index=True,
    )

    payment_status: str = Field(
        default="pending",
        index=True,
    )

    delivery_status: str = Field(
        default="pending",
        index=True,
    )

    # Delivery address snapshot (copied at placement)
    address_label: str
    address_line1: str
    address_line2: str | None = None
    city: str
    zip_code: str

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last status change (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    menu_item_id: uuid.UUID = Field(
        foreign_key="menu_items.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        description="Menu item price at time of order",
    )

    note: str | None = Field(
        default=None,
        description="Customer note for the kitchen",
    )
