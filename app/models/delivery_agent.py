import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class DeliveryAgent(SQLModel, table=True):
    """
    Courier profile. `user_id` links the profile to the login that
    is allowed to act as this agent.
    """

    __tablename__ = "delivery_agents"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    name: str = Field(max_length=100)

    contact: str | None = Field(default=None)

    # Current location point
    latitude: float = Field(default=0.0, ge=-90, le=90)
    longitude: float = Field(default=0.0, ge=-180, le=180)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class AgentAssignment(SQLModel, table=True):
    """
    Membership row of an agent's assignment set (currently active orders).

    order_id is unique: an order belongs to at most one agent's set.
    """

    __tablename__ = "agent_assignments"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    agent_id: uuid.UUID = Field(
        foreign_key="delivery_agents.id",
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        unique=True,
        index=True,
    )

    assigned_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
