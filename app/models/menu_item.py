import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class MenuItem(SQLModel, table=True):
    """
    Catalog entry sold by a single vendor.
    """

    __tablename__ = "menu_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    vendor_id: uuid.UUID = Field(
        foreign_key="vendors.id",
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
    )

    description: str | None = Field(default=None)

    price: float = Field(
        ge=0,
        description="Current unit price",
    )

    image_url: str | None = Field(
        default=None,
        description="Public URL in Supabase Storage",
    )

    is_available: bool = Field(
        default=True,
        index=True,
        description="Whether the item can be ordered right now",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
