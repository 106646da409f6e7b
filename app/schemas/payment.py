import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.order import OrderRead

Gateway = Literal["Razorpay", "Paytm", "Stripe"]
PaymentMethod = Literal["UPI", "Wallet", "Card", "NetBanking"]
PaymentAttemptStatus = Literal["initiated", "success", "failed", "refunded"]


class PaymentInitiate(SQLModel):
    """
    Customer payload to start paying for an order.
    `amount` must equal the order total.
    """

    model_config = ConfigDict(extra="forbid")

    order_id: uuid.UUID
    gateway: Gateway
    method: PaymentMethod
    amount: float = Field(ge=0)


class GatewayCallback(SQLModel):
    """
    Gateway success/failure report keyed by transaction reference.
    """

    model_config = ConfigDict(extra="forbid")

    transaction_id: str
    reason: str | None = None

    @field_validator("transaction_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("transaction_id cannot be empty")
        return v


class PaymentRetry(SQLModel):
    model_config = ConfigDict(extra="forbid")

    order_id: uuid.UUID


class PaymentRefund(SQLModel):
    model_config = ConfigDict(extra="forbid")

    transaction_id: str
    reason: str | None = None


class PaymentRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    gateway: Gateway
    transaction_id: str
    amount: float
    method: PaymentMethod
    status: PaymentAttemptStatus
    failure_reason: str | None
    created_at: datetime
    updated_at: datetime


class PaymentOutcome(SQLModel):
    """
    Result of a gateway callback or refund: the attempt, the order
    it touched, and an optional human-readable reason.
    """

    payment: PaymentRead
    order: OrderRead | None
    reason: str | None = None
