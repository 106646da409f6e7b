import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Payment(SQLModel, table=True):
    """
    One payment attempt for an order.

    An order may have several attempts (retries after failure).
    Status: initiated | success | failed | refunded
    """

    __tablename__ = "payments"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    # Razorpay | Paytm | Stripe
    gateway: str

    transaction_id: str = Field(
        unique=True,
        index=True,
        description="Reference used by gateway callbacks",
    )

    amount: float = Field(ge=0)

    # UPI | Wallet | Card | NetBanking
    method: str

    status: str = Field(
        default="initiated",
        index=True,
    )

    failure_reason: str | None = Field(default=None)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
