import logging

from sqlalchemy import delete, func, insert, select, update

from hotel_portal.db.database import (
    Database,
    hotel_details,
    is_blank,
    returns_default,
    returns_status,
    review_details,
)
from hotel_portal.schemas.hotel import ANONYMOUS, Review, parse_review_date, review_sort_key
from hotel_portal.status import Status

logger = logging.getLogger(__name__)


def _to_review(row) -> Review | None:
    try:
        submitted_at = parse_review_date(row.reviewdate or "")
    except ValueError:
        logger.warning("Review %s has unreadable date %r", row.reviewid, row.reviewdate)
        return None
    return Review(
        review_id=row.reviewid,
        hotel_id=row.hotelid,
        user=row.user or ANONYMOUS,
        rating=row.rating or 0.0,
        is_recommended=bool(row.isrecommended),
        title=row.title or "",
        text=row.reviewtext or "",
        submitted_at=submitted_at,
    )


def _sorted_reviews(rows) -> list[Review]:
    reviews = [r for r in (_to_review(row) for row in rows) if r is not None]
    return sorted(reviews, key=review_sort_key)


def _hotel_exists(conn, hotel_id: str) -> bool:
    found = conn.execute(select(hotel_details.c.id).where(hotel_details.c.id == hotel_id)).first()
    return found is not None


def _values(review: Review) -> dict:
    return {
        "hotelid": review.hotel_id,
        "user": review.user,
        "rating": review.rating,
        "isrecommended": review.is_recommended,
        "title": review.title,
        "reviewtext": review.text,
        "reviewdate": review.submitted,
    }


class ReviewStore:
    def __init__(self, db: Database):
        self._db = db

    @returns_status
    def add_review(self, review: Review) -> Status:
        if is_blank(review.review_id) or is_blank(review.hotel_id):
            return Status.INVALID_REVIEW
        with self._db.transaction() as conn:
            if not _hotel_exists(conn, review.hotel_id):
                return Status.INVALID_HOTEL
            found = conn.execute(
                select(review_details.c.reviewid).where(
                    review_details.c.reviewid == review.review_id
                )
            ).first()
            if found is not None:
                return Status.DUPLICATE_REVIEW
            conn.execute(insert(review_details).values(reviewid=review.review_id, **_values(review)))
        return Status.OK

    @returns_status
    def update_review(self, review: Review) -> Status:
        if is_blank(review.review_id) or is_blank(review.hotel_id):
            return Status.INVALID_REVIEW
        with self._db.transaction() as conn:
            if not _hotel_exists(conn, review.hotel_id):
                return Status.INVALID_HOTEL
            result = conn.execute(
                update(review_details)
                .where(review_details.c.reviewid == review.review_id)
                .values(**_values(review))
            )
        return Status.OK if result.rowcount == 1 else Status.INVALID_REVIEW

    @returns_status
    def remove_review(self, review_id: str) -> Status:
        if is_blank(review_id):
            return Status.INVALID_REVIEW
        with self._db.transaction() as conn:
            result = conn.execute(
                delete(review_details).where(review_details.c.reviewid == review_id)
            )
        return Status.OK if result.rowcount == 1 else Status.INVALID_REVIEW

    @returns_status
    def remove_reviews_by_user(self, user: str) -> Status:
        if is_blank(user):
            return Status.INVALID_USER
        with self._db.transaction() as conn:
            result = conn.execute(delete(review_details).where(review_details.c.user == user))
        logger.info("Removed %d reviews written by %s", result.rowcount, user)
        return Status.OK

    @returns_default(lambda: None)
    def get_review(self, review_id: str) -> Review | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                select(review_details).where(review_details.c.reviewid == review_id)
            ).first()
        return _to_review(row) if row is not None else None

    @returns_default(list)
    def get_reviews_by_hotel(self, hotel_id: str) -> list[Review]:
        with self._db.transaction() as conn:
            rows = conn.execute(
                select(review_details).where(review_details.c.hotelid == hotel_id)
            ).all()
        return _sorted_reviews(rows)

    @returns_default(list)
    def get_reviews_by_user(self, user: str) -> list[Review]:
        with self._db.transaction() as conn:
            rows = conn.execute(select(review_details).where(review_details.c.user == user)).all()
        return _sorted_reviews(rows)

    @returns_default(lambda: 0.0)
    def avg_rating(self, hotel_id: str) -> float:
        with self._db.transaction() as conn:
            value = conn.execute(
                select(func.avg(review_details.c.rating)).where(
                    review_details.c.hotelid == hotel_id
                )
            ).scalar()
        return float(value) if value is not None else 0.0
