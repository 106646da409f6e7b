# app/routers/reviews.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin, require_auth, require_customer
from app.database import get_session
from app.models.user import User
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.review_repo import ReviewRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.review import ReviewCreate, ReviewPage, ReviewRead, ReviewUpdate
from app.services.rating_service import RatingService
from app.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])

review_repo = ReviewRepository()
order_repo = OrderRepository()
vendor_repo = VendorRepository()
menu_item_repo = MenuItemRepository()
rating_service = RatingService(review_repo, vendor_repo)
service = ReviewService(review_repo, order_repo, vendor_repo, menu_item_repo, rating_service)


# -------- Public endpoints --------


@router.get("/vendor/{vendor_id}", response_model=ReviewPage)
def list_vendor_reviews(
    vendor_id: uuid.UUID,
    session: Session = Depends(get_session),
    rating: int | None = Query(None, ge=1, le=5),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    """
    Paginated reviews of a vendor, newest first.
    """
    return service.list_for_vendor(session, vendor_id, rating, page, page_size)


@router.get("/menu-item/{menu_item_id}", response_model=ReviewPage)
def list_menu_item_reviews(
    menu_item_id: uuid.UUID,
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    """
    Paginated reviews of a single menu item.
    """
    return service.list_for_menu_item(session, menu_item_id, page, page_size)


# -------- Customer endpoints --------


@router.post(
    "",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
)
def create_review(
    payload: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Review a vendor (optionally one of its menu items).

    Requires a delivered order from that vendor. The vendor's
    average rating is recomputed afterwards.
    """
    return service.create_review(session, current_user, payload)


@router.get("/me", response_model=ReviewPage)
def list_my_reviews(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    """
    Reviews written by the caller.
    """
    return service.list_mine(session, current_user, page, page_size)


@router.put("/{review_id}", response_model=ReviewRead)
def update_review(
    review_id: uuid.UUID,
    payload: ReviewUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Edit one of the caller's reviews.
    """
    return service.update_review(session, review_id, current_user, payload)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Delete one of the caller's reviews.
    """
    service.delete_review(session, review_id, current_user)
    return None


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=ReviewPage,
    dependencies=[Depends(require_admin)],
)
def list_all_reviews(
    session: Session = Depends(get_session),
    vendor_id: uuid.UUID | None = None,
    rating: int | None = Query(None, ge=1, le=5),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    """
    List all reviews (admin only).
    """
    return service.list_all(session, vendor_id, rating, page, page_size)
