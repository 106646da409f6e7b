import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from app.models.review import Review
from app.models.user import User
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.review_repo import ReviewRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.review import ReviewCreate, ReviewPage, ReviewRead, ReviewUpdate
from app.services.rating_service import RatingService
from app.utils.pagination import paginate


class ReviewService:
    """
    Business logic for reviews.

    Rules:
      - only customers with a delivered order from the vendor may review it
      - one review per (customer, vendor, menu item); no menu item is its own key
      - a referenced menu item must belong to the reviewed vendor
      - only the author may edit or delete a review
      - every create / update / delete triggers a vendor rating recompute
    """

    def __init__(
        self,
        review_repo: ReviewRepository,
        order_repo: OrderRepository,
        vendor_repo: VendorRepository,
        menu_item_repo: MenuItemRepository,
        rating_service: RatingService,
    ):
        self.review_repo = review_repo
        self.order_repo = order_repo
        self.vendor_repo = vendor_repo
        self.menu_item_repo = menu_item_repo
        self.rating_service = rating_service

    def _get_own_review(self, session: Session, review_id: uuid.UUID, actor: User) -> Review:
        review = self.review_repo.get_by_id(session, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        if review.user_id != actor.id:
            raise ForbiddenError()
        return review

    @staticmethod
    def _page(result) -> ReviewPage:
        return ReviewPage(
            reviews=[ReviewRead.model_validate(r) for r in result.items],
            total=result.total,
            total_pages=result.total_pages,
            current_page=result.current_page,
            page_size=result.page_size,
        )

    # ----- Customer operations -----

    def create_review(self, session: Session, actor: User, payload: ReviewCreate) -> Review:
        if self.vendor_repo.get_by_id(session, payload.vendor_id) is None:
            raise NotFoundError("Vendor not found")

        if payload.menu_item_id is not None:
            menu_item = self.menu_item_repo.get_by_id(session, payload.menu_item_id)
            if menu_item is None or menu_item.vendor_id != payload.vendor_id:
                raise InvalidInputError("Menu item does not belong to this vendor")

        if self.order_repo.find_delivered_for(session, actor.id, payload.vendor_id) is None:
            raise InvalidStateError("You can only review vendors you have ordered from")

        existing = self.review_repo.find_existing(
            session, actor.id, payload.vendor_id, payload.menu_item_id
        )
        if existing is not None:
            raise InvalidStateError("You have already reviewed this vendor/item")

        review = Review(
            user_id=actor.id,
            vendor_id=payload.vendor_id,
            menu_item_id=payload.menu_item_id,
            rating=payload.rating,
            comment=payload.comment,
        )
        review = self.review_repo.create(session, review)

        self.rating_service.recompute(session, review.vendor_id)
        session.refresh(review)
        return review

    def update_review(
        self,
        session: Session,
        review_id: uuid.UUID,
        actor: User,
        payload: ReviewUpdate,
    ) -> Review:
        review = self._get_own_review(session, review_id, actor)

        review.rating = payload.rating
        review.comment = payload.comment
        review.updated_at = datetime.now(timezone.utc)
        review = self.review_repo.update(session, review)

        self.rating_service.recompute(session, review.vendor_id)
        session.refresh(review)
        return review

    def delete_review(self, session: Session, review_id: uuid.UUID, actor: User) -> None:
        review = self._get_own_review(session, review_id, actor)
        vendor_id = review.vendor_id
        self.review_repo.delete(session, review)

        self.rating_service.recompute(session, vendor_id)

    # ----- Listings -----

    def list_for_vendor(
        self,
        session: Session,
        vendor_id: uuid.UUID,
        rating: int | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> ReviewPage:
        query = self.review_repo.query(vendor_id=vendor_id, rating=rating)
        return self._page(paginate(session=session, query=query, page=page, page_size=page_size))

    def list_for_menu_item(
        self,
        session: Session,
        menu_item_id: uuid.UUID,
        page: int = 1,
        page_size: int = 10,
    ) -> ReviewPage:
        query = self.review_repo.query(menu_item_id=menu_item_id)
        return self._page(paginate(session=session, query=query, page=page, page_size=page_size))

    def list_mine(
        self,
        session: Session,
        actor: User,
        page: int = 1,
        page_size: int = 10,
    ) -> ReviewPage:
        query = self.review_repo.query(user_id=actor.id)
        return self._page(paginate(session=session, query=query, page=page, page_size=page_size))

    def list_all(
        self,
        session: Session,
        vendor_id: uuid.UUID | None = None,
        rating: int | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> ReviewPage:
        query = self.review_repo.query(vendor_id=vendor_id, rating=rating)
        return self._page(paginate(session=session, query=query, page=page, page_size=page_size))
