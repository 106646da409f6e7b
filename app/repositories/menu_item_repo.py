import uuid

from sqlalchemy import or_
from sqlmodel import Session, select

from app.models.menu_item import MenuItem
from app.models.order import OrderItem
from app.models.review import Review


class MenuItemRepository:
    """
    Data access layer for menu items.
    """

    def get_by_id(self, session: Session, item_id: uuid.UUID) -> MenuItem | None:
        return session.get(MenuItem, item_id)

    def list_items(
        self,
        session: Session,
        *,
        vendor_id: uuid.UUID | None = None,
        is_available: bool | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[MenuItem]:
        stmt = select(MenuItem)
        if vendor_id is not None:
            stmt = stmt.where(MenuItem.vendor_id == vendor_id)
        if is_available is not None:
            stmt = stmt.where(MenuItem.is_available == is_available)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(MenuItem.name.ilike(pattern), MenuItem.description.ilike(pattern))
            )
        stmt = stmt.order_by(MenuItem.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def list_for_vendor(self, session: Session, vendor_id: uuid.UUID) -> list[MenuItem]:
        stmt = select(MenuItem).where(MenuItem.vendor_id == vendor_id)
        return session.exec(stmt).all()

    def create(self, session: Session, item: MenuItem) -> MenuItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: MenuItem) -> MenuItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: MenuItem) -> None:
        session.delete(item)
        session.commit()

    def is_referenced(self, session: Session, item_id: uuid.UUID) -> bool:
        """True when any order line or review points at the item."""
        ordered = session.exec(
            select(OrderItem.id).where(OrderItem.menu_item_id == item_id).limit(1)
        ).first()
        if ordered is not None:
            return True
        reviewed = session.exec(
            select(Review.id).where(Review.menu_item_id == item_id).limit(1)
        ).first()
        return reviewed is not None
