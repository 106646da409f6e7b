import uuid
from datetime import datetime, timezone

from sqlmodel import Session, select

from app.models.order import Order
from app.models.payment import Payment


class PaymentRepository:
    """
    Data access layer for payment attempts.

    NOTE:
      - No commits here; gateway callbacks update the attempt and the
        order together and the service commits both.
    """

    def get_by_id(self, session: Session, payment_id: uuid.UUID) -> Payment | None:
        return session.get(Payment, payment_id)

    def get_by_transaction(
        self,
        session: Session,
        transaction_id: str,
    ) -> Payment | None:
        stmt = select(Payment).where(Payment.transaction_id == transaction_id)
        return session.exec(stmt).first()

    def latest_failed_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> Payment | None:
        stmt = (
            select(Payment)
            .where(Payment.order_id == order_id, Payment.status == "failed")
            .order_by(Payment.created_at.desc())
        )
        return session.exec(stmt).first()

    def list_for_order(self, session: Session, order_id: uuid.UUID) -> list[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.order_id == order_id)
            .order_by(Payment.created_at.desc())
        )
        return session.exec(stmt).all()

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Payment]:
        stmt = (
            select(Payment)
            .join(Order, Order.id == Payment.order_id)
            .where(Order.user_id == user_id)
            .order_by(Payment.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def list_all(
        self,
        session: Session,
        *,
        status: str | None = None,
        gateway: str | None = None,
        method: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Payment]:
        stmt = select(Payment)
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        if gateway is not None:
            stmt = stmt.where(Payment.gateway == gateway)
        if method is not None:
            stmt = stmt.where(Payment.method == method)
        stmt = stmt.order_by(Payment.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, payment: Payment) -> Payment:
        session.add(payment)
        session.flush()
        session.refresh(payment)
        return payment

    def update(self, session: Session, payment: Payment) -> Payment:
        payment.updated_at = datetime.now(timezone.utc)
        session.add(payment)
        session.flush()
        session.refresh(payment)
        return payment

    def delete_for_orders(self, session: Session, order_ids: list[uuid.UUID]) -> None:
        if not order_ids:
            return
        stmt = select(Payment).where(Payment.order_id.in_(order_ids))
        for payment in session.exec(stmt).all():
            session.delete(payment)
        session.flush()
