import logging

from hotel_portal.db.hotels import HotelStore
from hotel_portal.db.reviews import ReviewStore
from hotel_portal.schemas.responses import MirrorReport
from hotel_portal.services.hotel_index import HotelIndex
from hotel_portal.status import Status

logger = logging.getLogger(__name__)


def mirror_index(index: HotelIndex, hotels: HotelStore, reviews: ReviewStore) -> MirrorReport:
    """Copy every indexed hotel, then every indexed review, into the store.

    Rows that already exist are left alone, so running it twice is harmless.
    """
    snapshot = index.snapshot()
    report = MirrorReport()

    for hotel in snapshot.hotels:
        status = hotels.add_hotel(hotel)
        if status is Status.OK:
            report.hotels_added += 1
        elif status is Status.DUPLICATE_HOTEL:
            report.hotels_existing += 1
        else:
            logger.warning("Could not store hotel %s: %s", hotel.id, status.message)
            report.failures += 1

    for review in snapshot.reviews:
        status = reviews.add_review(review)
        if status is Status.OK:
            report.reviews_added += 1
        elif status is Status.DUPLICATE_REVIEW:
            report.reviews_existing += 1
        else:
            logger.warning("Could not store review %s: %s", review.review_id, status.message)
            report.failures += 1

    logger.info(
        "Mirrored index: %d hotels added (%d existing), %d reviews added (%d existing), %d failures",
        report.hotels_added, report.hotels_existing,
        report.reviews_added, report.reviews_existing, report.failures,
    )
    return report
