import uuid

from sqlmodel import Session, select

from app.models.review import Review


class ReviewRepository:
    """
    Data access layer for reviews.
    """

    def get_by_id(self, session: Session, review_id: uuid.UUID) -> Review | None:
        return session.get(Review, review_id)

    def find_existing(
        self,
        session: Session,
        user_id: uuid.UUID,
        vendor_id: uuid.UUID,
        menu_item_id: uuid.UUID | None,
    ) -> Review | None:
        """
        Look up the user's review for (vendor, menu_item).
        A missing menu_item only matches vendor-level reviews.
        """
        stmt = select(Review).where(
            Review.user_id == user_id,
            Review.vendor_id == vendor_id,
        )
        if menu_item_id is None:
            stmt = stmt.where(Review.menu_item_id.is_(None))
        else:
            stmt = stmt.where(Review.menu_item_id == menu_item_id)
        return session.exec(stmt).first()

    def ratings_for_vendor(self, session: Session, vendor_id: uuid.UUID) -> list[int]:
        stmt = select(Review.rating).where(Review.vendor_id == vendor_id)
        return list(session.exec(stmt).all())

    def query(
        self,
        *,
        vendor_id: uuid.UUID | None = None,
        menu_item_id: uuid.UUID | None = None,
        user_id: uuid.UUID | None = None,
        rating: int | None = None,
    ):
        """
        Filtered statement (newest first) for paginated listings.
        """
        stmt = select(Review)
        if vendor_id is not None:
            stmt = stmt.where(Review.vendor_id == vendor_id)
        if menu_item_id is not None:
            stmt = stmt.where(Review.menu_item_id == menu_item_id)
        if user_id is not None:
            stmt = stmt.where(Review.user_id == user_id)
        if rating is not None:
            stmt = stmt.where(Review.rating == rating)
        return stmt.order_by(Review.created_at.desc())

    def recent_for_vendor(
        self,
        session: Session,
        vendor_id: uuid.UUID,
        limit: int = 5,
    ) -> list[Review]:
        stmt = self.query(vendor_id=vendor_id).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    def update(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    def delete(self, session: Session, review: Review) -> None:
        session.delete(review)
        session.commit()
