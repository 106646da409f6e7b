import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Vendor(SQLModel, table=True):
    """
    Restaurant / kitchen selling menu items.

    average_rating and total_reviews are derived from the vendor's
    reviews and rebuilt by RatingService; never edit them directly.
    """

    __tablename__ = "vendors"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    owner_id: uuid.UUID = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
        description="User account that manages this vendor",
    )

    name: str = Field(
        max_length=100,
        index=True,
    )

    description: str | None = Field(default=None)

    location: str = Field(
        description="Free-form location (area / city)",
    )

    average_rating: float = Field(
        default=0.0,
        ge=0,
        le=5,
        index=True,
    )

    total_reviews: int = Field(default=0, ge=0)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
