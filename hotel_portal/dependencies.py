from typing import Annotated

from fastapi import Depends, Query, Request

from hotel_portal.config import Settings
from hotel_portal.db.hotels import HotelStore
from hotel_portal.db.reviews import ReviewStore
from hotel_portal.db.saved_hotels import SavedHotelStore
from hotel_portal.db.users import UserStore
from hotel_portal.db.visited_links import VisitedLinkStore
from hotel_portal.exceptions.custom import LoginRequired
from hotel_portal.services.expedia import DescriptionScraper
from hotel_portal.services.hotel_index import HotelIndex
from hotel_portal.services.places import AttractionFinder
from hotel_portal.status import Status


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_index(request: Request) -> HotelIndex:
    return request.app.state.index


def get_hotel_store(request: Request) -> HotelStore:
    return request.app.state.hotel_store


def get_review_store(request: Request) -> ReviewStore:
    return request.app.state.review_store


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_saved_hotel_store(request: Request) -> SavedHotelStore:
    return request.app.state.saved_hotel_store


def get_visited_link_store(request: Request) -> VisitedLinkStore:
    return request.app.state.visited_link_store


def get_attraction_finder(request: Request) -> AttractionFinder:
    return request.app.state.attraction_finder


def get_description_scraper(request: Request) -> DescriptionScraper:
    return request.app.state.description_scraper


def require_user(request: Request) -> str:
    username = request.session.get("username")
    if not username:
        raise LoginRequired(request.url.path)
    return username


def get_error_message(error: str | None = None) -> str | None:
    """Message for an ``?error=<ordinal>`` query parameter."""
    if error is None:
        return None
    try:
        ordinal = int(error)
    except ValueError:
        ordinal = -1
    return Status.from_ordinal(ordinal).message


SettingsDep = Annotated[Settings, Depends(get_settings)]
IndexDep = Annotated[HotelIndex, Depends(get_index)]
HotelStoreDep = Annotated[HotelStore, Depends(get_hotel_store)]
ReviewStoreDep = Annotated[ReviewStore, Depends(get_review_store)]
UserStoreDep = Annotated[UserStore, Depends(get_user_store)]
SavedHotelStoreDep = Annotated[SavedHotelStore, Depends(get_saved_hotel_store)]
VisitedLinkStoreDep = Annotated[VisitedLinkStore, Depends(get_visited_link_store)]
AttractionFinderDep = Annotated[AttractionFinder, Depends(get_attraction_finder)]
DescriptionScraperDep = Annotated[DescriptionScraper, Depends(get_description_scraper)]
CurrentUser = Annotated[str, Depends(require_user)]
ErrorMessage = Annotated[str | None, Depends(get_error_message)]
HotelId = Annotated[str, Query(alias="hotelId")]
