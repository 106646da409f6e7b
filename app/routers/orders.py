# app/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin, require_auth, require_customer, require_staff, require_vendor
from app.database import get_session
from app.models.user import User
from app.repositories.delivery_repo import DeliveryRepository
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.payment_repo import PaymentRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.order import (
    OrderCreate,
    OrderRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
    PurgeResult,
)
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
menu_item_repo = MenuItemRepository()
vendor_repo = VendorRepository()
payment_repo = PaymentRepository()
delivery_repo = DeliveryRepository()
service = OrderService(order_repo, menu_item_repo, vendor_repo, payment_repo, delivery_repo)


# -------- Customer endpoints --------


@router.post(
    "",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def place_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Place an order for items from a single vendor.

    Starts as status=ordered, payment_status=pending, delivery_status=pending.
    Unit prices are captured from the menu at placement time.
    """
    return service.place_order(session, current_user, payload)


@router.get("/me", response_model=list[OrderRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated customer's orders, newest first (without items).
    """
    return service.list_my_orders(session, current_user, skip, limit)


# -------- Vendor / admin endpoints --------


@router.get("/vendor", response_model=list[OrderRead])
def list_vendor_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
    status: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List orders placed with the caller's vendor profile.
    """
    return service.list_vendor_orders(session, current_user, status, skip, limit)


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    status: str | None = None,
    vendor_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders (admin only), optionally filtered.
    """
    return service.list_all_orders(
        session,
        status=status,
        vendor_id=vendor_id,
        user_id=user_id,
        skip=skip,
        limit=limit,
    )


@router.delete(
    "/expired",
    response_model=PurgeResult,
    dependencies=[Depends(require_admin)],
)
def purge_expired_orders(session: Session = Depends(get_session)):
    """
    Delete orders older than the configured retention window (admin only),
    with their items, payment attempts and delivery assignments.
    """
    return service.purge_expired(session)


@router.get("/{order_id}", response_model=OrderWithItemsRead)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get a single order with items.

    Visible to the customer who placed it, the owning vendor, the
    delivery agent holding it and admins.
    """
    return service.get_order(session, order_id, current_user)


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_staff),
):
    """
    Advance an order (owning vendor or admin).

      preparing | out_for_delivery | delivered

    out_for_delivery and delivered are mirrored onto delivery_status.
    """
    return service.advance_status(session, order_id, payload.status, current_user)


@router.post("/{order_id}/cancel", response_model=OrderRead)
def cancel_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Cancel an order that has not been delivered.

    Allowed for the customer who placed it, the owning vendor and admins.
    """
    return service.cancel_order(session, order_id, current_user)
