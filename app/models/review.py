import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Review(SQLModel, table=True):
    """
    Customer review of a vendor, optionally about one of its menu items.

    One review per (user, vendor, menu_item); a missing menu_item is
    its own key. Uniqueness is checked in ReviewService because NULLs
    never collide in a unique index.
    """

    __tablename__ = "reviews"

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

    menu_item_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="menu_items.id",
        index=True,
    )

    rating: int = Field(ge=1, le=5)

    comment: str | None = Field(default=None)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
