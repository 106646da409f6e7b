import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP

from sqlmodel import Session

from app.repositories.review_repo import ReviewRepository
from app.repositories.vendor_repo import VendorRepository

logger = logging.getLogger(__name__)


def average_rating(ratings: list[int]) -> float:
    """
    Mean of `ratings` rounded half-up to one decimal (4.25 -> 4.3).
    """
    # Exact Decimal mean, so ties like 4.25 never fall to binary float error
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class RatingService:
    """
    Keeps Vendor.average_rating / Vendor.total_reviews in sync with the
    vendor's reviews. The fields are rebuilt from the full review set on
    every review change, never adjusted incrementally.
    """

    def __init__(self, review_repo: ReviewRepository, vendor_repo: VendorRepository):
        self.review_repo = review_repo
        self.vendor_repo = vendor_repo

    def recompute(self, session: Session, vendor_id: uuid.UUID) -> None:
        """
        Rebuild the vendor's rating fields.

        - No reviews left: stored values are left untouched.
        - Any failure is logged and swallowed; the review operation that
          triggered the recompute has already been committed.
        """
        try:
            ratings = self.review_repo.ratings_for_vendor(session, vendor_id)
            if not ratings:
                return

            vendor = self.vendor_repo.get_by_id(session, vendor_id)
            if vendor is None:
                logger.warning("Rating recompute skipped: vendor %s not found", vendor_id)
                return

            vendor.average_rating = average_rating(ratings)
            vendor.total_reviews = len(ratings)
            self.vendor_repo.update(session, vendor)
        except Exception:
            session.rollback()
            logger.exception("Error updating vendor rating for %s", vendor_id)
