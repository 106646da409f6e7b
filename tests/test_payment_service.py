import re

import pytest

from app.core.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NoFailedAttemptError,
    NotFoundError,
)
from app.models.order import Order
from app.schemas.payment import PaymentInitiate


@pytest.fixture
def initiate(session, payment_service):
    def _initiate(order, customer, amount=None, gateway="Razorpay", method="UPI"):
        payload = PaymentInitiate(
            order_id=order.id,
            gateway=gateway,
            method=method,
            amount=order.total_amount if amount is None else amount,
        )
        return payment_service.initiate(session, customer, payload)

    return _initiate


def test_initiate_creates_attempt_without_touching_order(session, placed_order, initiate):
    order, customer, _, _ = placed_order

    payment = initiate(order, customer)

    assert payment.status == "initiated"
    assert payment.amount == 250.0
    assert re.fullmatch(r"Razorpay_\d+_[a-z0-9]{9}", payment.transaction_id)
    assert session.get(Order, order.id).payment_status == "pending"


def test_initiate_amount_mismatch(placed_order, initiate):
    order, customer, _, _ = placed_order

    with pytest.raises(InvalidInputError) as exc:
        initiate(order, customer, amount=249.0)
    assert exc.value.detail == "Amount mismatch"


def test_initiate_other_customers_order_forbidden(placed_order, initiate, make_user):
    order, _, _, _ = placed_order

    with pytest.raises(ForbiddenError):
        initiate(order, make_user("customer"))


def test_initiate_on_paid_order_rejected(session, payment_service, placed_order, initiate):
    order, customer, _, _ = placed_order
    payment = initiate(order, customer)
    payment_service.report_success(session, payment.transaction_id)

    with pytest.raises(InvalidStateError) as exc:
        initiate(order, customer)
    assert exc.value.detail == "Order already paid"


def test_report_success_only_once(session, payment_service, placed_order, initiate):
    order, customer, _, _ = placed_order
    payment = initiate(order, customer)

    outcome = payment_service.report_success(session, payment.transaction_id)
    assert outcome.payment.status == "success"
    assert outcome.order.payment_status == "completed"

    with pytest.raises(InvalidStateError) as exc:
        payment_service.report_success(session, payment.transaction_id)
    assert exc.value.detail == "Payment already processed"


def test_second_attempt_cannot_succeed_after_order_paid(
    session, payment_service, placed_order, initiate
):
    order, customer, _, _ = placed_order
    first = initiate(order, customer)
    second = initiate(order, customer, gateway="Paytm", method="Wallet")

    payment_service.report_success(session, first.transaction_id)

    with pytest.raises(InvalidStateError):
        payment_service.report_success(session, second.transaction_id)


def test_report_unknown_transaction(session, payment_service):
    with pytest.raises(NotFoundError):
        payment_service.report_success(session, "Stripe_0_missing00")


def test_report_failure_uses_default_reason(session, payment_service, placed_order, initiate):
    order, customer, _, _ = placed_order
    payment = initiate(order, customer)

    outcome = payment_service.report_failure(session, payment.transaction_id)

    assert outcome.payment.status == "failed"
    assert outcome.payment.failure_reason == "Payment processing failed"
    assert outcome.reason == "Payment processing failed"
    assert outcome.order.payment_status == "pending"


def test_retry_clones_latest_failed_attempt(session, payment_service, placed_order, initiate):
    order, customer, _, _ = placed_order
    failed = initiate(order, customer, gateway="Stripe", method="Card")
    payment_service.report_failure(session, failed.transaction_id, "Card declined")

    retried = payment_service.retry(session, customer, order.id)

    assert retried.transaction_id != failed.transaction_id
    assert retried.status == "initiated"
    assert (retried.gateway, retried.method, retried.amount) == ("Stripe", "Card", 250.0)
    assert len(payment_service.list_for_order(session, order.id, customer)) == 2


def test_retry_without_failed_attempt(session, payment_service, placed_order, initiate):
    order, customer, _, _ = placed_order
    initiate(order, customer)

    with pytest.raises(NoFailedAttemptError):
        payment_service.retry(session, customer, order.id)


def test_refund_requires_successful_attempt(session, payment_service, placed_order, initiate):
    order, customer, _, _ = placed_order
    payment = initiate(order, customer)

    with pytest.raises(InvalidStateError) as exc:
        payment_service.refund(session, payment.transaction_id)
    assert exc.value.detail == "Can only refund successful payments"

    payment_service.report_success(session, payment.transaction_id)
    outcome = payment_service.refund(session, payment.transaction_id, "Customer request")

    assert outcome.payment.status == "refunded"
    assert outcome.order.payment_status == "refunded"
    assert outcome.reason == "Customer request"


def test_customer_cannot_read_foreign_payment(
    session, payment_service, placed_order, initiate, make_user
):
    order, customer, _, _ = placed_order
    payment = initiate(order, customer)

    with pytest.raises(ForbiddenError):
        payment_service.get_by_transaction(session, payment.transaction_id, make_user("customer"))

    admin = make_user("admin")
    assert payment_service.get_by_transaction(session, payment.transaction_id, admin).id == payment.id
    assert [p.id for p in payment_service.list_my_payments(session, customer)] == [payment.id]


def test_report_failure_can_repeat(session, payment_service, placed_order, initiate):
    order, customer, _, _ = placed_order
    payment = initiate(order, customer)

    first = payment_service.report_failure(session, payment.transaction_id, "Timeout")
    second = payment_service.report_failure(session, payment.transaction_id, "Timeout again")

    assert first.order.payment_status == "pending"
    assert second.order.payment_status == "pending"
    assert second.payment.status == "failed"
    assert second.payment.failure_reason == "Timeout again"


def test_report_failure_after_success_resets_order(
    session, payment_service, placed_order, initiate
):
    order, customer, _, _ = placed_order
    payment = initiate(order, customer)
    payment_service.report_success(session, payment.transaction_id)

    outcome = payment_service.report_failure(session, payment.transaction_id)

    assert outcome.payment.status == "failed"
    assert outcome.order.payment_status == "pending"
