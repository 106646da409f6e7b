import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.models.order import Order
from app.models.vendor import Vendor


class VendorRepository:
    """
    Data access layer for vendors.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, vendor_id: uuid.UUID) -> Vendor | None:
        return session.get(Vendor, vendor_id)

    def get_by_owner(self, session: Session, owner_id: uuid.UUID) -> Vendor | None:
        stmt = select(Vendor).where(Vendor.owner_id == owner_id)
        return session.exec(stmt).first()

    def list_vendors(
        self,
        session: Session,
        *,
        search: str | None = None,
        location: str | None = None,
        min_rating: float | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Vendor]:
        stmt = select(Vendor)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Vendor.name.ilike(pattern), Vendor.description.ilike(pattern))
            )
        if location:
            stmt = stmt.where(Vendor.location.ilike(f"%{location}%"))
        if min_rating is not None:
            stmt = stmt.where(Vendor.average_rating >= min_rating)
        stmt = (
            stmt.order_by(Vendor.average_rating.desc(), Vendor.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def create(self, session: Session, vendor: Vendor) -> Vendor:
        session.add(vendor)
        session.commit()
        session.refresh(vendor)
        return vendor

    def update(self, session: Session, vendor: Vendor) -> Vendor:
        session.add(vendor)
        session.commit()
        session.refresh(vendor)
        return vendor

    def delete(self, session: Session, vendor: Vendor) -> None:
        session.delete(vendor)
        session.commit()

    # ----- Order aggregates (analytics) -----

    def count_orders(
        self,
        session: Session,
        vendor_id: uuid.UUID,
        statuses: tuple[str, ...] | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.vendor_id == vendor_id)
        if statuses is not None:
            stmt = stmt.where(Order.status.in_(statuses))
        value = session.exec(stmt).one()
        return int(value or 0)

    def delivered_revenue(self, session: Session, vendor_id: uuid.UUID) -> float:
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(
            Order.vendor_id == vendor_id,
            Order.status == "delivered",
        )
        value = session.exec(stmt).one()
        return float(value or 0.0)
