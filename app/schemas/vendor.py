import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.review import ReviewRead


class VendorCreate(SQLModel):
    """
    Payload for creating the caller's vendor profile.
    Ratings start at 0 and are maintained by the backend.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    description: str | None = None
    location: str

    @field_validator("name", "location")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class VendorUpdate(SQLModel):
    """
    Partial update payload. All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    location: str | None = None

    @field_validator("name", "location")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class VendorRead(SQLModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    description: str | None
    location: str
    average_rating: float
    total_reviews: int
    created_at: datetime


class VendorOrderStats(SQLModel):
    total: int
    completed: int
    pending: int


class VendorAnalytics(SQLModel):
    """
    Owner dashboard: order counts, delivered revenue, latest reviews.
    """

    vendor: VendorRead
    orders: VendorOrderStats
    revenue: float
    recent_reviews: list[ReviewRead]


class MenuItemCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    description: str | None = None
    price: float = Field(ge=0)
    is_available: bool = True

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class MenuItemUpdate(SQLModel):
    """
    Partial update payload for menu items.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    is_available: bool | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class AvailabilityUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    is_available: bool


class MenuItemRead(SQLModel):
    id: uuid.UUID
    vendor_id: uuid.UUID
    name: str
    description: str | None
    price: float
    image_url: str | None
    is_available: bool
    created_at: datetime
