import uuid
from datetime import datetime, timezone

from sqlmodel import Session, select

from app.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; placement and the payment/delivery transitions
        write several rows. The service is responsible for session.commit().
    """

    # ---- Orders ----

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def list_orders(
        self,
        session: Session,
        *,
        user_id: uuid.UUID | None = None,
        vendor_id: uuid.UUID | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = select(Order)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        if vendor_id is not None:
            stmt = stmt.where(Order.vendor_id == vendor_id)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def find_delivered_for(
        self,
        session: Session,
        user_id: uuid.UUID,
        vendor_id: uuid.UUID,
    ) -> Order | None:
        stmt = select(Order).where(
            Order.user_id == user_id,
            Order.vendor_id == vendor_id,
            Order.status == "delivered",
        )
        return session.exec(stmt).first()

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        order.updated_at = datetime.now(timezone.utc)
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def list_ids_created_before(
        self,
        session: Session,
        cutoff: datetime,
    ) -> list[uuid.UUID]:
        stmt = select(Order.id).where(Order.created_at < cutoff)
        return list(session.exec(stmt).all())

    def delete_orders(self, session: Session, order_ids: list[uuid.UUID]) -> None:
        """
        Delete orders together with their line items.
        """
        for order_id in order_ids:
            for item in self.list_items_for_order(session, order_id):
                session.delete(item)
            order = session.get(Order, order_id)
            if order is not None:
                session.delete(order)
        session.flush()

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id)
        return session.exec(stmt).all()

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items
