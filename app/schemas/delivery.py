import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.order import OrderRead


class AgentCreate(SQLModel):
    """
    Admin payload to register a delivery agent.
    `user_id` links the profile to the agent's login account.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    contact: str | None = None
    user_id: uuid.UUID | None = None
    latitude: float = Field(default=0.0, ge=-90, le=90)
    longitude: float = Field(default=0.0, ge=-180, le=180)

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class AgentUpdate(SQLModel):
    """
    Partial profile update (agent self-service).
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    contact: str | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class LocationUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class AgentRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID | None
    name: str
    contact: str | None
    latitude: float
    longitude: float
    current_orders: list[uuid.UUID]
    created_at: datetime


class AssignmentRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    order_id: uuid.UUID


class DeliveryStatusUpdate(SQLModel):
    """
    Agent payload to move a delivery forward.

    Kept as a plain string: unsupported values are a 400 from the
    service, not a schema error.
    """

    model_config = ConfigDict(extra="forbid")

    order_id: uuid.UUID
    status: str
    notes: str | None = None


class AssignmentResult(SQLModel):
    order: OrderRead
    agent: AgentRead
    notes: str | None = None


class DeliveryHistory(SQLModel):
    orders: list[OrderRead]
    total: int
    total_pages: int
    current_page: int
    page_size: int
