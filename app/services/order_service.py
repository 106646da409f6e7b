import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from app.models.menu_item import MenuItem
from app.models.order import Order, OrderItem
from app.models.user import User
from app.repositories.delivery_repo import DeliveryRepository
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.payment_repo import PaymentRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.order import (
    OrderCreate,
    OrderItemCreate,
    OrderItemRead,
    OrderWithItemsRead,
    PurgeResult,
)

logger = logging.getLogger(__name__)

# Targets reachable through advance_status; "ordered" is the initial
# state and "cancelled" is only reachable through cancel().
ADVANCEABLE_STATUSES = {"preparing", "out_for_delivery", "delivered"}

# Advancing to one of these also moves delivery_status to the same value
DELIVERY_MIRRORED_STATUSES = {"out_for_delivery", "delivered"}


class OrderService:
    """
    Business logic for orders (order lifecycle engine).

    Responsibilities:
      - Place single-vendor orders from menu items (price snapshot, total)
      - Advance order status (vendor owner / admin)
      - Cancel orders (customer owner / vendor owner / admin)
      - Order listings and detail with access checks
      - Purge orders past the retention window

    payment_status is written by PaymentService and delivery_status by
    DeliveryService; this service only mirrors delivery_status when the
    vendor advances an order to out_for_delivery / delivered.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        menu_item_repo: MenuItemRepository,
        vendor_repo: VendorRepository,
        payment_repo: PaymentRepository,
        delivery_repo: DeliveryRepository,
    ):
        self.order_repo = order_repo
        self.menu_item_repo = menu_item_repo
        self.vendor_repo = vendor_repo
        self.payment_repo = payment_repo
        self.delivery_repo = delivery_repo

    # -------- Customer operations --------

    def place_order(
        self,
        session: Session,
        customer: User,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Place an order.

        Steps:
          1. Resolve every menu item (must exist and be available).
          2. total_amount = sum(price * quantity).
          3. Reject carts spanning more than one vendor.
          4. Create Order (ordered / pending / pending) + OrderItem rows
             with the current price snapshotted.
          5. Commit and return the full order.
        """
        total_amount = 0.0
        vendor_ids: set[uuid.UUID] = set()
        resolved: list[tuple[OrderItemCreate, MenuItem]] = []

        for line in payload.items:
            menu_item = self.menu_item_repo.get_by_id(session, line.menu_item_id)
            if menu_item is None:
                raise InvalidInputError(f"Menu item {line.menu_item_id} not found")
            if not menu_item.is_available:
                raise InvalidInputError(f"Menu item {menu_item.name} is not available")

            total_amount += menu_item.price * line.quantity
            vendor_ids.add(menu_item.vendor_id)
            resolved.append((line, menu_item))

        if len(vendor_ids) > 1:
            raise InvalidInputError("Order items must be from a single vendor")

        address = payload.delivery_address
        order = Order(
            user_id=customer.id,
            vendor_id=resolved[0][1].vendor_id,
            total_amount=total_amount,
            status="ordered",
            payment_status="pending",
            delivery_status="pending",
            address_label=address.label,
            address_line1=address.line1,
            address_line2=address.line2,
            city=address.city,
            zip_code=address.zip,
        )
        order = self.order_repo.create_order(session, order)

        items = self.order_repo.create_items(
            session,
            [
                OrderItem(
                    order_id=order.id,
                    menu_item_id=menu_item.id,
                    quantity=line.quantity,
                    unit_price=menu_item.price,
                    note=line.note,
                )
                for line, menu_item in resolved
            ],
        )

        session.commit()
        session.refresh(order)

        logger.info(
            "Order %s placed by %s with vendor %s (total=%.2f)",
            order.id,
            customer.id,
            order.vendor_id,
            order.total_amount,
        )
        return self._build_order_with_items_dto(order, items)

    def list_my_orders(
        self,
        session: Session,
        customer: User,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        return self.order_repo.list_orders(
            session, user_id=customer.id, skip=skip, limit=limit
        )

    def get_order(
        self,
        session: Session,
        order_id: uuid.UUID,
        actor: User,
    ) -> OrderWithItemsRead:
        """
        Single order with items.

        Visible to the owning customer, the owning vendor, the delivery
        agent currently holding it, and admins.
        """
        order = self._get_order(session, order_id)

        if not (
            self._can_manage(session, actor, order)
            or self._agent_holds(session, actor, order)
        ):
            raise ForbiddenError()

        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    # -------- Vendor / admin operations --------

    def list_vendor_orders(
        self,
        session: Session,
        actor: User,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        vendor = self.vendor_repo.get_by_owner(session, actor.id)
        if vendor is None:
            raise NotFoundError("Vendor profile not found")
        return self.order_repo.list_orders(
            session, vendor_id=vendor.id, status=status, skip=skip, limit=limit
        )

    def list_all_orders(
        self,
        session: Session,
        status: str | None = None,
        vendor_id: uuid.UUID | None = None,
        user_id: uuid.UUID | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        return self.order_repo.list_orders(
            session,
            user_id=user_id,
            vendor_id=vendor_id,
            status=status,
            skip=skip,
            limit=limit,
        )

    def advance_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        new_status: str,
        actor: User,
    ) -> Order:
        """
        Vendor/admin status update.

          - new_status must be preparing | out_for_delivery | delivered
          - out_for_delivery / delivered also set delivery_status

        Consecutive calls are not ordered: ordered -> delivered is accepted.
        """
        if new_status not in ADVANCEABLE_STATUSES:
            raise InvalidInputError("Invalid status")

        order = self._get_order(session, order_id)

        if actor.role != "admin" and not self._vendor_owns(session, actor, order):
            raise ForbiddenError()

        previous = order.status
        order.status = new_status
        if new_status in DELIVERY_MIRRORED_STATUSES:
            order.delivery_status = new_status

        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)

        logger.info("Order %s status %s -> %s by %s", order.id, previous, new_status, actor.id)
        return order

    def cancel_order(
        self,
        session: Session,
        order_id: uuid.UUID,
        actor: User,
    ) -> Order:
        """
        Cancel an order that has not been delivered.

        payment_status and delivery_status are left as they are; a
        completed payment is not refunded automatically.
        """
        order = self._get_order(session, order_id)

        if not self._can_manage(session, actor, order):
            raise ForbiddenError()

        if order.status == "delivered":
            raise InvalidStateError("Cannot cancel delivered order")

        order.status = "cancelled"
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)

        logger.info(
            "Order %s cancelled by %s (payment_status=%s)",
            order.id,
            actor.id,
            order.payment_status,
        )
        return order

    def purge_expired(
        self,
        session: Session,
        now: datetime | None = None,
    ) -> PurgeResult:
        """
        Housekeeping: delete orders older than ORDER_RETENTION_DAYS,
        along with their items, payment attempts and assignment rows.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=get_settings().ORDER_RETENTION_DAYS)

        order_ids = self.order_repo.list_ids_created_before(session, cutoff)
        self.payment_repo.delete_for_orders(session, order_ids)
        self.delivery_repo.remove_orders(session, order_ids)
        self.order_repo.delete_orders(session, order_ids)
        session.commit()

        logger.info("Purged %d orders created before %s", len(order_ids), cutoff.isoformat())
        return PurgeResult(deleted=len(order_ids), cutoff=cutoff)

    # -------- Helpers --------

    def _get_order(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def _vendor_owns(self, session: Session, actor: User, order: Order) -> bool:
        if actor.role != "vendor":
            return False
        vendor = self.vendor_repo.get_by_owner(session, actor.id)
        return vendor is not None and vendor.id == order.vendor_id

    def _can_manage(self, session: Session, actor: User, order: Order) -> bool:
        if actor.role == "admin":
            return True
        if actor.role == "customer":
            return order.user_id == actor.id
        return self._vendor_owns(session, actor, order)

    def _agent_holds(self, session: Session, actor: User, order: Order) -> bool:
        if actor.role != "deliveryAgent":
            return False
        agent = self.delivery_repo.get_by_user(session, actor.id)
        return agent is not None and self.delivery_repo.in_set(session, agent.id, order.id)

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        """
        Compose OrderWithItemsRead from ORM models.
        """
        item_dtos = [
            OrderItemRead(
                id=it.id,
                order_id=it.order_id,
                menu_item_id=it.menu_item_id,
                quantity=it.quantity,
                unit_price=it.unit_price,
                note=it.note,
                line_total=it.quantity * it.unit_price,
            )
            for it in items
        ]

        return OrderWithItemsRead(
            id=order.id,
            user_id=order.user_id,
            vendor_id=order.vendor_id,
            total_amount=order.total_amount,
            status=order.status,
            payment_status=order.payment_status,
            delivery_status=order.delivery_status,
            address_label=order.address_label,
            address_line1=order.address_line1,
            address_line2=order.address_line2,
            city=order.city,
            zip_code=order.zip_code,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=item_dtos,
        )
