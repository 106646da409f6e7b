import pytest
from fastapi import HTTPException

from app.core.errors import ForbiddenError, InvalidStateError, NotFoundError
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.review_repo import ReviewRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.vendor import MenuItemCreate, MenuItemUpdate, VendorCreate, VendorUpdate
from app.services import menu_item_service as menu_item_module
from app.services.menu_item_service import MAX_IMAGE_BYTES, MenuItemService
from app.services.vendor_service import VendorService


@pytest.fixture
def vendor_service() -> VendorService:
    return VendorService(VendorRepository(), MenuItemRepository(), ReviewRepository())


@pytest.fixture
def menu_item_service() -> MenuItemService:
    return MenuItemService(MenuItemRepository(), VendorRepository())


# -------- Vendors --------


def test_one_vendor_profile_per_owner(session, vendor_service, make_user):
    owner = make_user("vendor")
    vendor = vendor_service.create_vendor(
        session, owner, VendorCreate(name="Curry House", location="Midtown")
    )
    assert (vendor.average_rating, vendor.total_reviews) == (0.0, 0)
    assert vendor_service.get_my_vendor(session, owner).id == vendor.id

    with pytest.raises(InvalidStateError):
        vendor_service.create_vendor(session, owner, VendorCreate(name="Again", location="Midtown"))


def test_only_owner_updates_vendor(session, vendor_service, make_vendor, make_user):
    vendor = make_vendor()

    with pytest.raises(ForbiddenError):
        vendor_service.update_vendor(session, vendor.id, make_user("vendor"), VendorUpdate(name="Mine"))


def test_list_vendors_filters(session, vendor_service, make_vendor):
    make_vendor(name="Pizza Place")
    top = make_vendor(name="Burger Barn")
    top.average_rating = 4.8
    session.add(top)
    session.commit()

    assert [v.name for v in vendor_service.list_vendors(session, search="pizza")] == ["Pizza Place"]
    assert [v.id for v in vendor_service.list_vendors(session, min_rating=4.0)] == [top.id]


def test_analytics_counts_orders(session, vendor_service, order_service, placed_order):
    order, _, owner, vendor = placed_order
    order_service.advance_status(session, order.id, "delivered", owner)

    analytics = vendor_service.get_analytics(session, vendor.id, owner)

    assert analytics.orders.total == 1
    assert analytics.orders.completed == 1
    assert analytics.orders.pending == 0
    assert analytics.revenue == 250.0


def test_delete_vendor_with_orders_refused(session, vendor_service, placed_order):
    _, _, owner, vendor = placed_order

    with pytest.raises(InvalidStateError) as exc:
        vendor_service.delete_vendor(session, vendor.id, owner)
    assert exc.value.detail == "Cannot delete vendor with active orders"


def test_delete_vendor_removes_menu(session, vendor_service, make_vendor, make_menu_item, make_user):
    vendor = make_vendor()
    make_menu_item(vendor)

    vendor_service.delete_vendor(session, vendor.id, make_user("admin"))

    with pytest.raises(NotFoundError):
        vendor_service.get_vendor(session, vendor.id)
    assert MenuItemRepository().list_for_vendor(session, vendor.id) == []


# -------- Menu items --------


def test_create_item_needs_vendor_profile(session, menu_item_service, make_user):
    with pytest.raises(NotFoundError):
        menu_item_service.create_item(
            session, make_user("vendor"), MenuItemCreate(name="Naan", price=3.5)
        )


def test_item_updates_are_owner_only(session, menu_item_service, make_vendor, make_user):
    owner = make_user("vendor")
    make_vendor(owner)
    item = menu_item_service.create_item(session, owner, MenuItemCreate(name="Naan", price=3.5))

    updated = menu_item_service.update_item(session, item.id, owner, MenuItemUpdate(price=4.0))
    assert updated.price == 4.0
    assert menu_item_service.set_availability(session, item.id, owner, False).is_available is False

    stranger = make_user("vendor")
    make_vendor(stranger, name="Rival")
    with pytest.raises(ForbiddenError):
        menu_item_service.set_availability(session, item.id, stranger, True)


def test_ordered_item_cannot_be_deleted(session, menu_item_service, placed_order):
    order, _, owner, _ = placed_order
    item_id = order.items[0].menu_item_id

    with pytest.raises(InvalidStateError):
        menu_item_service.delete_item(session, item_id, owner)


def test_set_image_uploads_and_replaces(
    session, menu_item_service, make_user, make_vendor, make_menu_item, monkeypatch
):
    owner = make_user("vendor")
    item = make_menu_item(make_vendor(owner))
    uploaded: list[str] = []
    deleted: list[str] = []
    monkeypatch.setattr(
        menu_item_module,
        "upload_to_storage",
        lambda path, data: uploaded.append(path) or f"https://cdn.test/{path}",
    )
    monkeypatch.setattr(menu_item_module, "delete_public_url", deleted.append)

    first = menu_item_service.set_image(session, item.id, owner, "image/png", b"png-bytes")
    assert first.image_url.startswith(f"https://cdn.test/menu-items/{item.id}/")
    assert uploaded[0].endswith(".png")

    previous = first.image_url
    menu_item_service.set_image(session, item.id, owner, "image/jpeg", b"jpeg-bytes")
    assert deleted == [previous]


def test_set_image_validation(session, menu_item_service, make_user, make_vendor, make_menu_item):
    owner = make_user("vendor")
    item = make_menu_item(make_vendor(owner))

    with pytest.raises(HTTPException) as exc:
        menu_item_service.set_image(session, item.id, owner, "image/gif", b"gif")
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        menu_item_service.set_image(session, item.id, owner, "image/png", b"x" * (MAX_IMAGE_BYTES + 1))
    assert exc.value.status_code == 413
