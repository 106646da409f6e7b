# app/routers/payments.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin, require_auth, require_customer
from app.database import get_session
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.payment_repo import PaymentRepository
from app.schemas.payment import (
    GatewayCallback,
    PaymentInitiate,
    PaymentOutcome,
    PaymentRead,
    PaymentRefund,
    PaymentRetry,
)
from app.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])

payment_repo = PaymentRepository()
order_repo = OrderRepository()
service = PaymentService(payment_repo, order_repo)


# -------- Customer endpoints --------


@router.post(
    "/initiate",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
)
def initiate_payment(
    payload: PaymentInitiate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Start a payment attempt for one of the caller's orders.

    The amount must match the order total. The order is not modified
    until the gateway reports back.
    """
    return service.initiate(session, current_user, payload)


@router.post(
    "/retry",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
)
def retry_payment(
    payload: PaymentRetry,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Retry the most recent failed attempt with a fresh transaction reference.
    """
    return service.retry(session, current_user, payload.order_id)


@router.get("/me", response_model=list[PaymentRead])
def list_my_payments(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    skip: int = 0,
    limit: int = 50,
):
    """
    List payment attempts on the caller's orders.
    """
    return service.list_my_payments(session, current_user, skip, limit)


# -------- Gateway callbacks --------


@router.post(
    "/success",
    response_model=PaymentOutcome,
    dependencies=[Depends(require_auth)],
)
def payment_success(
    payload: GatewayCallback,
    session: Session = Depends(get_session),
):
    """
    Gateway reports a successful attempt; the order becomes paid.
    """
    return service.report_success(session, payload.transaction_id)


@router.post(
    "/failure",
    response_model=PaymentOutcome,
    dependencies=[Depends(require_auth)],
)
def payment_failure(
    payload: GatewayCallback,
    session: Session = Depends(get_session),
):
    """
    Gateway reports a failed attempt; the order goes back to
    payment_status=pending.
    """
    return service.report_failure(session, payload.transaction_id, payload.reason)


# -------- Admin endpoints --------


@router.post(
    "/refund",
    response_model=PaymentOutcome,
    dependencies=[Depends(require_admin)],
)
def refund_payment(
    payload: PaymentRefund,
    session: Session = Depends(get_session),
):
    """
    Refund a successful attempt (admin only).
    """
    return service.refund(session, payload.transaction_id, payload.reason)


@router.get(
    "",
    response_model=list[PaymentRead],
    dependencies=[Depends(require_admin)],
)
def list_payments(
    session: Session = Depends(get_session),
    status: str | None = None,
    gateway: str | None = None,
    method: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List all payment attempts (admin only), optionally filtered.
    """
    return service.list_all(
        session,
        status=status,
        gateway=gateway,
        method=method,
        skip=skip,
        limit=limit,
    )


# -------- Lookups --------


@router.get("/transaction/{transaction_id}", response_model=PaymentRead)
def get_payment(
    transaction_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Look up an attempt by its transaction reference.
    Customers only see attempts on their own orders.
    """
    return service.get_by_transaction(session, transaction_id, current_user)


@router.get("/order/{order_id}", response_model=list[PaymentRead])
def list_order_payments(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    List all attempts for an order, newest first.
    """
    return service.list_for_order(session, order_id, current_user)
