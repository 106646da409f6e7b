import logging
import secrets
import string
import time
import uuid

from sqlmodel import Session

from app.core.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NoFailedAttemptError,
    NotFoundError,
)
from app.models.order import Order
from app.models.payment import Payment
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.payment_repo import PaymentRepository
from app.schemas.order import OrderRead
from app.schemas.payment import PaymentInitiate, PaymentOutcome, PaymentRead

logger = logging.getLogger(__name__)

_REF_ALPHABET = string.ascii_lowercase + string.digits
_REF_SUFFIX_LEN = 9


class PaymentService:
    """
    Business logic for payment attempts (payment coordinator).

    Responsibilities:
      - create attempts for an order (initiate / retry)
      - apply gateway callbacks (success / failure) by transaction reference
      - admin refunds
      - keep order.payment_status in line with attempt outcomes

    The gateway itself is a black box; it only reports outcomes for a
    transaction reference generated here.
    """

    def __init__(self, payment_repo: PaymentRepository, order_repo: OrderRepository):
        self.payment_repo = payment_repo
        self.order_repo = order_repo

    # ----- Helpers -----

    def _generate_transaction_id(self, session: Session, gateway: str) -> str:
        """
        Reference format: <gateway>_<epoch millis>_<9 random chars>.
        Regenerates on the (unlikely) collision with an existing reference.
        """
        while True:
            suffix = "".join(secrets.choice(_REF_ALPHABET) for _ in range(_REF_SUFFIX_LEN))
            ref = f"{gateway}_{int(time.time() * 1000)}_{suffix}"
            if self.payment_repo.get_by_transaction(session, ref) is None:
                return ref

    def _get_owned_order(self, session: Session, order_id: uuid.UUID, actor: User) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if order.user_id != actor.id:
            raise ForbiddenError()
        return order

    def _get_by_transaction(self, session: Session, transaction_id: str) -> Payment:
        payment = self.payment_repo.get_by_transaction(session, transaction_id)
        if payment is None:
            raise NotFoundError("Payment not found")
        return payment

    @staticmethod
    def _outcome(payment: Payment, order: Order | None, reason: str | None = None) -> PaymentOutcome:
        return PaymentOutcome(
            payment=PaymentRead.model_validate(payment),
            order=OrderRead.model_validate(order) if order is not None else None,
            reason=reason,
        )

    # ----- Customer operations -----

    def initiate(
        self,
        session: Session,
        actor: User,
        payload: PaymentInitiate,
    ) -> Payment:
        """
        Start a payment attempt for the caller's order.

        - 400 if the order is already paid
        - 400 if amount differs from the order total
        The order itself is not modified.
        """
        order = self._get_owned_order(session, payload.order_id, actor)

        if order.payment_status == "completed":
            raise InvalidStateError("Order already paid")

        # Money is compared at cent precision
        if round(payload.amount, 2) != round(order.total_amount, 2):
            raise InvalidInputError("Amount mismatch")

        payment = Payment(
            order_id=order.id,
            gateway=payload.gateway,
            transaction_id=self._generate_transaction_id(session, payload.gateway),
            amount=payload.amount,
            method=payload.method,
            status="initiated",
        )
        payment = self.payment_repo.create(session, payment)
        session.commit()
        session.refresh(payment)

        logger.info("Payment %s initiated for order %s", payment.transaction_id, order.id)
        return payment

    def retry(self, session: Session, actor: User, order_id: uuid.UUID) -> Payment:
        """
        Clone the most recent failed attempt (gateway, amount, method)
        into a new attempt with a fresh reference.
        """
        order = self._get_owned_order(session, order_id, actor)

        if order.payment_status == "completed":
            raise InvalidStateError("Order already paid")

        last_failed = self.payment_repo.latest_failed_for_order(session, order.id)
        if last_failed is None:
            raise NoFailedAttemptError()

        payment = Payment(
            order_id=order.id,
            gateway=last_failed.gateway,
            transaction_id=self._generate_transaction_id(session, last_failed.gateway),
            amount=last_failed.amount,
            method=last_failed.method,
            status="initiated",
        )
        payment = self.payment_repo.create(session, payment)
        session.commit()
        session.refresh(payment)

        logger.info(
            "Payment %s retries failed attempt %s for order %s",
            payment.transaction_id,
            last_failed.transaction_id,
            order.id,
        )
        return payment

    # ----- Gateway callbacks -----

    def report_success(self, session: Session, transaction_id: str) -> PaymentOutcome:
        """
        Mark the attempt successful and the order paid.

        At most once per reference: a repeated report is rejected. Once an
        order is paid, no other attempt of that order can succeed.
        """
        payment = self._get_by_transaction(session, transaction_id)

        if payment.status == "success":
            raise InvalidStateError("Payment already processed")

        order = self.order_repo.get_by_id(session, payment.order_id)
        if order is not None and order.payment_status == "completed":
            raise InvalidStateError("Order already paid")

        payment.status = "success"
        payment.failure_reason = None
        self.payment_repo.update(session, payment)

        if order is not None:
            order.payment_status = "completed"
            self.order_repo.update_order(session, order)

        session.commit()
        session.refresh(payment)
        if order is not None:
            session.refresh(order)

        logger.info("Payment %s succeeded for order %s", transaction_id, payment.order_id)
        return self._outcome(payment, order)

    def report_failure(
        self,
        session: Session,
        transaction_id: str,
        reason: str | None = None,
    ) -> PaymentOutcome:
        """
        Mark the attempt failed and put the order back to payment_status
        'pending'. Safe to repeat.
        """
        payment = self._get_by_transaction(session, transaction_id)
        reason = reason or "Payment processing failed"

        payment.status = "failed"
        payment.failure_reason = reason
        self.payment_repo.update(session, payment)

        order = self.order_repo.get_by_id(session, payment.order_id)
        if order is not None:
            order.payment_status = "pending"
            self.order_repo.update_order(session, order)

        session.commit()
        session.refresh(payment)
        if order is not None:
            session.refresh(order)

        logger.warning("Payment %s failed for order %s: %s", transaction_id, payment.order_id, reason)
        return self._outcome(payment, order, reason)

    # ----- Admin operations -----

    def refund(
        self,
        session: Session,
        transaction_id: str,
        reason: str | None = None,
    ) -> PaymentOutcome:
        """
        Refund a successful attempt; the order becomes payment_status 'refunded'.
        """
        payment = self._get_by_transaction(session, transaction_id)

        if payment.status != "success":
            raise InvalidStateError("Can only refund successful payments")

        payment.status = "refunded"
        self.payment_repo.update(session, payment)

        order = self.order_repo.get_by_id(session, payment.order_id)
        if order is not None:
            order.payment_status = "refunded"
            self.order_repo.update_order(session, order)

        session.commit()
        session.refresh(payment)
        if order is not None:
            session.refresh(order)

        reason = reason or "Refund processed"
        logger.info("Payment %s refunded: %s", transaction_id, reason)
        return self._outcome(payment, order, reason)

    # ----- Listings -----

    def get_by_transaction(self, session: Session, transaction_id: str, actor: User) -> Payment:
        payment = self._get_by_transaction(session, transaction_id)
        if actor.role == "customer":
            order = self.order_repo.get_by_id(session, payment.order_id)
            if order is None or order.user_id != actor.id:
                raise ForbiddenError()
        return payment

    def list_for_order(self, session: Session, order_id: uuid.UUID, actor: User) -> list[Payment]:
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if actor.role == "customer" and order.user_id != actor.id:
            raise ForbiddenError()
        return self.payment_repo.list_for_order(session, order.id)

    def list_my_payments(
        self,
        session: Session,
        actor: User,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Payment]:
        return self.payment_repo.list_for_user(session, actor.id, skip, limit)

    def list_all(
        self,
        session: Session,
        status: str | None = None,
        gateway: str | None = None,
        method: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Payment]:
        return self.payment_repo.list_all(
            session,
            status=status,
            gateway=gateway,
            method=method,
            skip=skip,
            limit=limit,
        )
