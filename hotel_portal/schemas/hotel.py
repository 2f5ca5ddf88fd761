from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

ANONYMOUS = "Anonymous"
REVIEW_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
_EPOCH = datetime(1970, 1, 1)


class Hotel(BaseModel):
    id: str
    name: str
    street: str = ""
    city: str = ""
    state: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    area_description: str | None = None
    property_description: str | None = None
    avg_rating: float | None = None


class Review(BaseModel):
    review_id: str
    hotel_id: str
    user: str = ANONYMOUS
    rating: float
    is_recommended: bool = False
    title: str = ""
    text: str = ""
    submitted_at: datetime

    @property
    def submitted(self) -> str:
        return self.submitted_at.strftime(REVIEW_DATE_FORMAT)


class TouristAttraction(BaseModel):
    id: str
    name: str
    rating: float = 0.0
    address: str = ""


class DescriptionBundle(BaseModel):
    hotel_id: str
    area_description: str = ""
    property_description: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.area_description and not self.property_description


def parse_review_date(value: str) -> datetime:
    """Parse ``YYYY-MM-DDTHH:MM:SS`` with an optional trailing ``Z``."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    return datetime.strptime(text, REVIEW_DATE_FORMAT)


def review_sort_key(review: Review) -> tuple[float, str, str]:
    # newest first, then nickname, then review id
    seconds = (review.submitted_at - _EPOCH).total_seconds()
    return (-seconds, review.user, review.review_id)
