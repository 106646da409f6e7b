# app/routers/vendors.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_roles, require_vendor
from app.database import get_session
from app.models.user import User
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.review_repo import ReviewRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.vendor import VendorAnalytics, VendorCreate, VendorRead, VendorUpdate
from app.services.vendor_service import VendorService

router = APIRouter(prefix="/vendors", tags=["Vendors"])

vendor_repo = VendorRepository()
menu_item_repo = MenuItemRepository()
review_repo = ReviewRepository()
service = VendorService(vendor_repo, menu_item_repo, review_repo)


# -------- Public endpoints --------


@router.get("", response_model=list[VendorRead])
def list_vendors(
    session: Session = Depends(get_session),
    search: str | None = None,
    location: str | None = None,
    min_rating: float | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List vendors, best rated first.

    - `search` matches name or description.
    """
    return service.list_vendors(
        session,
        search=search,
        location=location,
        min_rating=min_rating,
        skip=skip,
        limit=limit,
    )


# -------- Vendor endpoints --------


@router.get("/me", response_model=VendorRead)
def get_my_vendor(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    The caller's vendor profile.
    """
    return service.get_my_vendor(session, current_user)


@router.post(
    "",
    response_model=VendorRead,
    status_code=status.HTTP_201_CREATED,
)
def create_vendor(
    payload: VendorCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Create the caller's vendor profile (one per account).
    """
    return service.create_vendor(session, current_user, payload)


@router.get("/{vendor_id}", response_model=VendorRead)
def get_vendor(
    vendor_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single vendor (public).
    """
    return service.get_vendor(session, vendor_id)


@router.patch("/{vendor_id}", response_model=VendorRead)
def update_vendor(
    vendor_id: uuid.UUID,
    payload: VendorUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Update the caller's vendor profile. Ratings are not editable.
    """
    return service.update_vendor(session, vendor_id, current_user, payload)


@router.get("/{vendor_id}/analytics", response_model=VendorAnalytics)
def vendor_analytics(
    vendor_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Order counts, delivered revenue and recent reviews for the caller's vendor.
    """
    return service.get_analytics(session, vendor_id, current_user)


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vendor(
    vendor_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_roles("vendor", "admin")),
):
    """
    Delete a vendor with its menu and reviews (owner or admin).

    Refused once the vendor has any orders.
    """
    service.delete_vendor(session, vendor_id, current_user)
    return None
