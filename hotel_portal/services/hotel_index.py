"""In-memory hotel index shared by the ingestion workers, the fetchers and
the web layer.

All maps are guarded by one reader/writer lock. Readers get copies, so
nothing handed out can be used to mutate indexed state outside the lock.
"""

import logging
from bisect import bisect_left
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone

from hotel_portal.exceptions.custom import InvalidDate, InvalidRating
from hotel_portal.locks import ReadWriteLock
from hotel_portal.schemas.hotel import (
    ANONYMOUS,
    DescriptionBundle,
    Hotel,
    Review,
    TouristAttraction,
    parse_review_date,
    review_sort_key,
)

logger = logging.getLogger(__name__)

MIN_RATING = 0
MAX_RATING = 5


def build_review(
    hotel_id: str,
    review_id: str,
    rating: int,
    title: str,
    text: str,
    is_recommended: bool,
    submitted: str | datetime,
    user: str | None,
) -> Review:
    """Validate raw review fields and build a Review.

    Raises InvalidRating for ratings outside [0, 5] and InvalidDate when the
    submission time does not parse.
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating(f"Rating must be an integer, got {rating!r}", review_id)
    if rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidRating(f"Invalid rating {rating}", review_id)

    if isinstance(submitted, datetime):
        submitted_at = submitted
        if submitted_at.tzinfo is not None:
            # stored dates are naive UTC
            submitted_at = submitted_at.astimezone(timezone.utc).replace(tzinfo=None)
    else:
        try:
            submitted_at = parse_review_date(submitted)
        except (TypeError, ValueError) as exc:
            raise InvalidDate(f"Invalid review date {submitted!r}", review_id) from exc

    nickname = (user or "").strip() or ANONYMOUS
    return Review(
        review_id=review_id,
        hotel_id=hotel_id,
        user=nickname,
        rating=rating,
        is_recommended=is_recommended,
        title=title,
        text=text,
        submitted_at=submitted_at,
    )


class ReviewSet:
    """Reviews of one hotel ordered newest first, then by nickname, then by id.

    Review ids are unique within a set. Not thread-safe on its own: a set is
    either private to one worker or owned by a HotelIndex.
    """

    def __init__(self, reviews: list[Review] | None = None) -> None:
        self._keys: list[tuple[float, str, str]] = []
        self._reviews: list[Review] = []
        self._ids: set[str] = set()
        for review in reviews or ():
            self.add(review)

    def add(self, review: Review) -> bool:
        if review.review_id in self._ids:
            logger.debug("Duplicate review id %s ignored", review.review_id)
            return False
        key = review_sort_key(review)
        pos = bisect_left(self._keys, key)
        self._keys.insert(pos, key)
        self._reviews.insert(pos, review)
        self._ids.add(review.review_id)
        return True

    def first(self, count: int) -> list[Review]:
        return [r.model_copy() for r in self._reviews[:max(count, 0)]]

    def copy(self) -> "ReviewSet":
        clone = ReviewSet()
        clone._keys = list(self._keys)
        clone._reviews = [r.model_copy() for r in self._reviews]
        clone._ids = set(self._ids)
        return clone

    @property
    def hotel_id(self) -> str | None:
        return self._reviews[0].hotel_id if self._reviews else None

    def __iter__(self) -> Iterator[Review]:
        return iter(list(self._reviews))

    def __len__(self) -> int:
        return len(self._reviews)


@dataclass
class IndexSnapshot:
    hotels: list[Hotel] = field(default_factory=list)
    reviews: list[Review] = field(default_factory=list)


class HotelIndex:
    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._hotels: dict[str, Hotel] = {}
        self._reviews: dict[str, ReviewSet] = {}
        self._attractions: dict[str, list[TouristAttraction]] = {}
        self._descriptions: dict[str, DescriptionBundle] = {}

    # --- writers ---

    def add_hotel(self, hotel: Hotel) -> None:
        stored = hotel.model_copy()
        with self._lock.write():
            self._hotels[stored.id] = stored

    def add_review_local(
        self,
        review_set: ReviewSet,
        hotel_id: str,
        review_id: str,
        rating: int,
        title: str,
        text: str,
        is_recommended: bool,
        submitted: str | datetime,
        user: str | None,
    ) -> bool:
        """Add a review to a caller-owned set. Takes no lock."""
        try:
            review = build_review(
                hotel_id, review_id, rating, title, text, is_recommended, submitted, user
            )
        except (InvalidRating, InvalidDate) as exc:
            logger.debug("%s: %s", exc.kind, exc.message)
            return False
        return review_set.add(review)

    def add_review(
        self,
        hotel_id: str,
        review_id: str,
        rating: int,
        title: str,
        text: str,
        is_recommended: bool,
        submitted: str | datetime,
        user: str | None,
    ) -> bool:
        """Add a review straight into the indexed set of a known hotel."""
        try:
            review = build_review(
                hotel_id, review_id, rating, title, text, is_recommended, submitted, user
            )
        except (InvalidRating, InvalidDate) as exc:
            logger.debug("%s: %s", exc.kind, exc.message)
            return False

        with self._lock.write():
            if hotel_id not in self._hotels:
                logger.debug("Review %s refers to unknown hotel %s", review_id, hotel_id)
                return False
            return self._reviews.setdefault(hotel_id, ReviewSet()).add(review)

    def merge(self, hotel_id: str, review_set: ReviewSet) -> bool:
        """Install review_set as the reviews of hotel_id.

        Unknown hotels are skipped. The last merge for a hotel wins.
        """
        installed = review_set.copy()
        with self._lock.write():
            if hotel_id not in self._hotels:
                logger.info("Skipping %d reviews for unknown hotel %s", len(installed), hotel_id)
                return False
            self._reviews[hotel_id] = installed
        return True

    def add_attractions(self, hotel_id: str, attractions: list[TouristAttraction]) -> bool:
        installed = [a.model_copy() for a in attractions]
        with self._lock.write():
            if hotel_id not in self._hotels:
                return False
            self._attractions[hotel_id] = installed
        return True

    def set_descriptions(self, hotel_id: str, bundle: DescriptionBundle) -> bool:
        installed = bundle.model_copy(update={"hotel_id": hotel_id})
        with self._lock.write():
            hotel = self._hotels.get(hotel_id)
            if hotel is None:
                return False
            self._descriptions[hotel_id] = installed
            self._hotels[hotel_id] = hotel.model_copy(
                update={
                    "area_description": installed.area_description,
                    "property_description": installed.property_description,
                }
            )
        return True

    # --- readers ---

    def hotels(self) -> list[str]:
        with self._lock.read():
            return sorted(self._hotels)

    def find_hotel(self, hotel_id: str | None) -> Hotel | None:
        if hotel_id is None:
            return None
        with self._lock.read():
            hotel = self._hotels.get(hotel_id)
            return hotel.model_copy() if hotel else None

    def find_reviews(self, hotel_id: str | None, count: int) -> list[Review] | None:
        if hotel_id is None:
            return None
        with self._lock.read():
            review_set = self._reviews.get(hotel_id)
            if review_set is None:
                return None
            return review_set.first(count)

    def find_attractions(self, hotel_id: str | None) -> list[TouristAttraction] | None:
        with self._lock.read():
            attractions = self._attractions.get(hotel_id)
            if attractions is None:
                return None
            return [a.model_copy() for a in attractions]

    def find_descriptions(self, hotel_id: str | None) -> DescriptionBundle | None:
        with self._lock.read():
            bundle = self._descriptions.get(hotel_id)
            return bundle.model_copy() if bundle else None

    def review_counts(self) -> dict[str, int]:
        with self._lock.read():
            return {hotel_id: len(s) for hotel_id, s in sorted(self._reviews.items())}

    def all_reviews(self) -> list[Review]:
        return self.snapshot().reviews

    def snapshot(self) -> IndexSnapshot:
        """Consistent copy of every hotel and review, for mirroring to the store."""
        with self._lock.read():
            hotels = [self._hotels[h].model_copy() for h in sorted(self._hotels)]
            reviews = [
                review.model_copy()
                for hotel_id in sorted(self._reviews)
                for review in self._reviews[hotel_id]
            ]
        return IndexSnapshot(hotels=hotels, reviews=reviews)
