from __future__ import annotations

from pydantic import BaseModel

from hotel_portal.schemas.hotel import DescriptionBundle, Hotel, Review, TouristAttraction
from hotel_portal.status import Status


class FileError(BaseModel):
    path: str
    message: str


class IngestReport(BaseModel):
    root: str
    files_seen: int = 0
    files_parsed: int = 0
    reviews_loaded: int = 0
    record_errors: int = 0
    hotels_merged: int = 0
    hotels_skipped: int = 0
    timed_out: bool = False
    file_errors: list[FileError] = []


class MirrorReport(BaseModel):
    hotels_added: int = 0
    hotels_existing: int = 0
    reviews_added: int = 0
    reviews_existing: int = 0
    failures: int = 0


class StatusResponse(BaseModel):
    status: str
    ordinal: int
    message: str

    @classmethod
    def of(cls, status: Status) -> StatusResponse:
        return cls(status=status.name, ordinal=status.ordinal, message=status.message)


class HotelSearchResponse(BaseModel):
    cities: list[str]
    hotels: list[Hotel]


class HotelInfoResponse(BaseModel):
    hotel: Hotel
    avg_rating: float
    saved: bool = False


class ReviewsResponse(BaseModel):
    hotel: Hotel
    username: str
    reviews: list[Review]


class AttractionsResponse(BaseModel):
    hotel_id: str
    name: str
    radius: int
    attractions: list[TouristAttraction]


class DescriptionsResponse(BaseModel):
    hotel_id: str
    descriptions: DescriptionBundle | None = None


class WelcomeResponse(BaseModel):
    username: str
    last_login: str


class ProfileResponse(BaseModel):
    username: str
    saved_hotels: list[Hotel]
    visited_links: list[str]
    reviews: list[Review]


class HomeResponse(BaseModel):
    username: str | None = None
    hotels: list[Hotel]


class FormResponse(BaseModel):
    error: str | None = None


class ReviewFormResponse(BaseModel):
    hotel_id: str
    review: Review | None = None
    error: str | None = None


class FavouritesResponse(BaseModel):
    hotel_id: str
    saved: StatusResponse | None = None
    visited: StatusResponse | None = None
