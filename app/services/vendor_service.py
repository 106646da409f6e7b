import uuid

from sqlmodel import Session

from app.core.errors import ForbiddenError, InvalidStateError, NotFoundError
from app.models.user import User
from app.models.vendor import Vendor
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.review_repo import ReviewRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.review import ReviewRead
from app.schemas.vendor import (
    VendorAnalytics,
    VendorCreate,
    VendorOrderStats,
    VendorRead,
    VendorUpdate,
)

ACTIVE_ORDER_STATUSES = ("ordered", "preparing", "out_for_delivery")


class VendorService:
    """
    Business logic for vendor profiles.

    Responsibilities:
      - one vendor profile per owner account
      - owner-only edits and analytics
      - guarded deletion (no active orders, no order history)

    Rating fields are read-only here; RatingService owns them.
    """

    def __init__(
        self,
        vendor_repo: VendorRepository,
        menu_item_repo: MenuItemRepository,
        review_repo: ReviewRepository,
    ):
        self.vendor_repo = vendor_repo
        self.menu_item_repo = menu_item_repo
        self.review_repo = review_repo

    def get_vendor(self, session: Session, vendor_id: uuid.UUID) -> Vendor:
        vendor = self.vendor_repo.get_by_id(session, vendor_id)
        if vendor is None:
            raise NotFoundError("Vendor not found")
        return vendor

    def _get_owned(self, session: Session, vendor_id: uuid.UUID, actor: User) -> Vendor:
        vendor = self.get_vendor(session, vendor_id)
        if vendor.owner_id != actor.id:
            raise ForbiddenError()
        return vendor

    def list_vendors(
        self,
        session: Session,
        search: str | None = None,
        location: str | None = None,
        min_rating: float | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Vendor]:
        return self.vendor_repo.list_vendors(
            session,
            search=search,
            location=location,
            min_rating=min_rating,
            skip=skip,
            limit=limit,
        )

    def get_my_vendor(self, session: Session, actor: User) -> Vendor:
        vendor = self.vendor_repo.get_by_owner(session, actor.id)
        if vendor is None:
            raise NotFoundError("Vendor profile not found")
        return vendor

    def create_vendor(self, session: Session, actor: User, payload: VendorCreate) -> Vendor:
        if self.vendor_repo.get_by_owner(session, actor.id) is not None:
            raise InvalidStateError("User already has a vendor profile")

        vendor = Vendor(
            owner_id=actor.id,
            name=payload.name,
            description=payload.description,
            location=payload.location,
            average_rating=0.0,
            total_reviews=0,
        )
        return self.vendor_repo.create(session, vendor)

    def update_vendor(
        self,
        session: Session,
        vendor_id: uuid.UUID,
        actor: User,
        payload: VendorUpdate,
    ) -> Vendor:
        vendor = self._get_owned(session, vendor_id, actor)

        if payload.name is not None:
            vendor.name = payload.name
        if payload.description is not None:
            vendor.description = payload.description
        if payload.location is not None:
            vendor.location = payload.location

        return self.vendor_repo.update(session, vendor)

    def get_analytics(self, session: Session, vendor_id: uuid.UUID, actor: User) -> VendorAnalytics:
        vendor = self._get_owned(session, vendor_id, actor)

        stats = VendorOrderStats(
            total=self.vendor_repo.count_orders(session, vendor.id),
            completed=self.vendor_repo.count_orders(session, vendor.id, ("delivered",)),
            pending=self.vendor_repo.count_orders(session, vendor.id, ACTIVE_ORDER_STATUSES),
        )
        recent = self.review_repo.recent_for_vendor(session, vendor.id, limit=5)

        return VendorAnalytics(
            vendor=VendorRead.model_validate(vendor),
            orders=stats,
            revenue=self.vendor_repo.delivered_revenue(session, vendor.id),
            recent_reviews=[ReviewRead.model_validate(r) for r in recent],
        )

    def delete_vendor(self, session: Session, vendor_id: uuid.UUID, actor: User) -> None:
        """
        Delete a vendor with its menu items and reviews.

        Refused while orders are in flight, and for vendors with any order
        history (order rows keep a foreign key to the vendor).
        """
        vendor = self.get_vendor(session, vendor_id)
        if actor.role != "admin" and vendor.owner_id != actor.id:
            raise ForbiddenError()

        if self.vendor_repo.count_orders(session, vendor.id, ACTIVE_ORDER_STATUSES) > 0:
            raise InvalidStateError("Cannot delete vendor with active orders")
        if self.vendor_repo.count_orders(session, vendor.id) > 0:
            raise InvalidStateError("Cannot delete vendor with order history")

        for review in session.exec(self.review_repo.query(vendor_id=vendor.id)).all():
            session.delete(review)
        for item in self.menu_item_repo.list_for_vendor(session, vendor.id):
            session.delete(item)
        self.vendor_repo.delete(session, vendor)
