import os
import uuid

# Settings are read at import time; point the app at in-memory SQLite.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from app.core.auth import get_current_user
from app.database import engine, get_session
from app.main import app
from app.models.delivery_agent import DeliveryAgent
from app.models.menu_item import MenuItem
from app.models.user import User
from app.models.vendor import Vendor
from app.repositories.delivery_repo import DeliveryRepository
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.payment_repo import PaymentRepository
from app.repositories.review_repo import ReviewRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.order import DeliveryAddress, OrderCreate, OrderItemCreate
from app.services.delivery_service import DeliveryService
from app.services.order_service import OrderService
from app.services.payment_service import PaymentService
from app.services.rating_service import RatingService
from app.services.review_service import ReviewService


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


# -------- Services --------


@pytest.fixture
def order_service() -> OrderService:
    return OrderService(
        OrderRepository(),
        MenuItemRepository(),
        VendorRepository(),
        PaymentRepository(),
        DeliveryRepository(),
    )


@pytest.fixture
def payment_service() -> PaymentService:
    return PaymentService(PaymentRepository(), OrderRepository())


@pytest.fixture
def delivery_service() -> DeliveryService:
    return DeliveryService(DeliveryRepository(), OrderRepository())


@pytest.fixture
def rating_service() -> RatingService:
    return RatingService(ReviewRepository(), VendorRepository())


@pytest.fixture
def review_service(rating_service) -> ReviewService:
    return ReviewService(
        ReviewRepository(),
        OrderRepository(),
        VendorRepository(),
        MenuItemRepository(),
        rating_service,
    )


# -------- Factories --------


@pytest.fixture
def make_user(session):
    def _make(role: str = "customer", name: str | None = None) -> User:
        user_id = uuid.uuid4()
        user = User(
            id=user_id,
            email=f"{user_id.hex[:8]}@example.com",
            name=name or role,
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_vendor(session, make_user):
    def _make(owner: User | None = None, name: str = "Spice Route") -> Vendor:
        owner = owner or make_user("vendor")
        vendor = Vendor(owner_id=owner.id, name=name, location="Downtown")
        session.add(vendor)
        session.commit()
        session.refresh(vendor)
        return vendor

    return _make


@pytest.fixture
def make_menu_item(session):
    def _make(
        vendor: Vendor,
        name: str = "Paneer Tikka",
        price: float = 100.0,
        is_available: bool = True,
    ) -> MenuItem:
        item = MenuItem(
            vendor_id=vendor.id,
            name=name,
            price=price,
            is_available=is_available,
        )
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    return _make


@pytest.fixture
def make_agent(session, make_user):
    def _make(user: User | None = None) -> DeliveryAgent:
        user = user or make_user("deliveryAgent")
        agent = DeliveryAgent(user_id=user.id, name=user.name, contact="555-0100")
        session.add(agent)
        session.commit()
        session.refresh(agent)
        return agent

    return _make


@pytest.fixture
def order_payload():
    def _build(*lines: tuple[MenuItem, int]) -> OrderCreate:
        return OrderCreate(
            items=[OrderItemCreate(menu_item_id=item.id, quantity=qty) for item, qty in lines],
            delivery_address=DeliveryAddress(
                label="Home",
                line1="12 Baker Street",
                city="Springfield",
                zip="12345",
            ),
        )

    return _build


@pytest.fixture
def placed_order(session, order_service, make_user, make_vendor, make_menu_item, order_payload):
    """A fresh order (2 x 100 + 1 x 50) with its customer and vendor owner."""
    customer = make_user("customer")
    owner = make_user("vendor")
    vendor = make_vendor(owner)
    item_a = make_menu_item(vendor, "Item A", 100.0)
    item_b = make_menu_item(vendor, "Item B", 50.0)
    order = order_service.place_order(session, customer, order_payload((item_a, 2), (item_b, 1)))
    return order, customer, owner, vendor


# -------- HTTP client --------


@pytest.fixture
def client(session):
    """
    TestClient sharing the test session. Set `client.user` to act as
    that user; None means anonymous.
    """

    def _get_session():
        yield session

    test_client = TestClient(app)
    test_client.user = None

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_current_user] = lambda: test_client.user
    yield test_client
    app.dependency_overrides.clear()
