import pytest

from app.core.errors import ForbiddenError, InvalidInputError, InvalidStateError
from app.models.vendor import Vendor
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.services.rating_service import average_rating


@pytest.fixture
def delivered_customer(session, order_service, make_user, make_menu_item, order_payload):
    """Build a customer with a delivered order from `vendor`."""

    def _make(vendor: Vendor):
        customer = make_user("customer")
        item = make_menu_item(vendor, name="Thali", price=20.0)
        order = order_service.place_order(session, customer, order_payload((item, 1)))
        admin = make_user("admin")
        order_service.advance_status(session, order.id, "delivered", admin)
        return customer

    return _make


@pytest.mark.parametrize(
    "ratings, expected",
    [
        ([5, 4], 4.5),
        ([5, 4, 3], 4.0),
        ([4, 4, 5, 4], 4.3),
        ([1], 1.0),
    ],
)
def test_average_rating_rounds_half_up(ratings, expected):
    assert average_rating(ratings) == expected


def test_recompute_after_reviews(session, review_service, make_vendor, delivered_customer):
    vendor = make_vendor()

    for rating in (5, 4):
        review_service.create_review(
            session, delivered_customer(vendor), ReviewCreate(vendor_id=vendor.id, rating=rating)
        )
    session.refresh(vendor)
    assert (vendor.average_rating, vendor.total_reviews) == (4.5, 2)

    review_service.create_review(
        session, delivered_customer(vendor), ReviewCreate(vendor_id=vendor.id, rating=3)
    )
    session.refresh(vendor)
    assert (vendor.average_rating, vendor.total_reviews) == (4.0, 3)


def test_deleting_last_review_keeps_stored_rating(
    session, review_service, make_vendor, delivered_customer
):
    vendor = make_vendor()
    customer = delivered_customer(vendor)
    review = review_service.create_review(
        session, customer, ReviewCreate(vendor_id=vendor.id, rating=2)
    )

    review_service.delete_review(session, review.id, customer)

    session.refresh(vendor)
    assert (vendor.average_rating, vendor.total_reviews) == (2.0, 1)


def test_update_review_recomputes(session, review_service, make_vendor, delivered_customer):
    vendor = make_vendor()
    customer = delivered_customer(vendor)
    review = review_service.create_review(
        session, customer, ReviewCreate(vendor_id=vendor.id, rating=2)
    )

    review_service.update_review(session, review.id, customer, ReviewUpdate(rating=5, comment="Better"))

    session.refresh(vendor)
    assert vendor.average_rating == 5.0


def test_review_requires_delivered_order(session, review_service, make_vendor, make_user):
    vendor = make_vendor()

    with pytest.raises(InvalidStateError) as exc:
        review_service.create_review(session, make_user(), ReviewCreate(vendor_id=vendor.id, rating=5))
    assert exc.value.detail == "You can only review vendors you have ordered from"


def test_one_review_per_vendor_and_item(
    session, review_service, make_vendor, make_menu_item, delivered_customer
):
    vendor = make_vendor()
    customer = delivered_customer(vendor)
    item = make_menu_item(vendor, name="Dosa")

    review_service.create_review(session, customer, ReviewCreate(vendor_id=vendor.id, rating=4))
    with pytest.raises(InvalidStateError):
        review_service.create_review(session, customer, ReviewCreate(vendor_id=vendor.id, rating=3))

    # A menu-item review is a separate key
    review_service.create_review(
        session, customer, ReviewCreate(vendor_id=vendor.id, menu_item_id=item.id, rating=3)
    )


def test_menu_item_must_belong_to_vendor(
    session, review_service, make_vendor, make_menu_item, delivered_customer
):
    vendor = make_vendor()
    foreign_item = make_menu_item(make_vendor(name="Elsewhere"))

    with pytest.raises(InvalidInputError):
        review_service.create_review(
            session,
            delivered_customer(vendor),
            ReviewCreate(vendor_id=vendor.id, menu_item_id=foreign_item.id, rating=4),
        )


def test_only_author_edits(session, review_service, make_vendor, make_user, delivered_customer):
    vendor = make_vendor()
    review = review_service.create_review(
        session, delivered_customer(vendor), ReviewCreate(vendor_id=vendor.id, rating=4)
    )

    with pytest.raises(ForbiddenError):
        review_service.delete_review(session, review.id, make_user("customer"))


def test_vendor_review_listing_paginates(session, review_service, make_vendor, delivered_customer):
    vendor = make_vendor()
    for rating in (5, 4, 5):
        review_service.create_review(
            session, delivered_customer(vendor), ReviewCreate(vendor_id=vendor.id, rating=rating)
        )

    page = review_service.list_for_vendor(session, vendor.id, page=1, page_size=2)
    assert (page.total, page.total_pages, len(page.reviews)) == (3, 2, 2)

    fives = review_service.list_for_vendor(session, vendor.id, rating=5)
    assert fives.total == 2


def test_failed_recompute_is_logged_not_raised(
    session, review_service, make_vendor, delivered_customer, monkeypatch, caplog
):
    vendor = make_vendor()
    customer = delivered_customer(vendor)

    def broken_update(session, vendor):
        raise RuntimeError("db down")

    monkeypatch.setattr(review_service.rating_service.vendor_repo, "update", broken_update)

    with caplog.at_level("ERROR", logger="app.services.rating_service"):
        review = review_service.create_review(
            session, customer, ReviewCreate(vendor_id=vendor.id, rating=5)
        )

    assert review.id is not None
    assert review.rating == 5
    session.refresh(vendor)
    assert (vendor.average_rating, vendor.total_reviews) == (0.0, 0)
    assert "Error updating vendor rating" in caplog.text
