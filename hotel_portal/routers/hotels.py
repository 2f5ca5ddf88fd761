import logging

from fastapi import APIRouter, HTTPException
from starlette.concurrency import run_in_threadpool

from hotel_portal.dependencies import (
    AttractionFinderDep,
    CurrentUser,
    DescriptionScraperDep,
    HotelId,
    HotelStoreDep,
    IndexDep,
    ReviewStoreDep,
    SavedHotelStoreDep,
    SettingsDep,
)
from hotel_portal.schemas.hotel import Hotel
from hotel_portal.schemas.responses import (
    AttractionsResponse,
    DescriptionsResponse,
    HotelInfoResponse,
    HotelSearchResponse,
)
from hotel_portal.status import Status

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/hotelSearch", response_model=HotelSearchResponse)
def hotel_search(
    _user: CurrentUser,
    hotels: HotelStoreDep,
    name: str | None = None,
    city: str | None = None,
) -> HotelSearchResponse:
    return HotelSearchResponse(
        cities=hotels.list_distinct_cities(),
        hotels=hotels.search_hotels(name, city),
    )


@router.get("/hotels", response_model=list[Hotel])
def list_hotels(_user: CurrentUser, index: IndexDep) -> list[Hotel]:
    found = (index.find_hotel(hotel_id) for hotel_id in index.hotels())
    return [hotel for hotel in found if hotel is not None]


@router.get("/hotelInfo", response_model=HotelInfoResponse)
def hotel_info(
    username: CurrentUser,
    hotels: HotelStoreDep,
    reviews: ReviewStoreDep,
    saved: SavedHotelStoreDep,
    index: IndexDep,
    hotel_id: HotelId,
) -> HotelInfoResponse:
    hotel = hotels.get_hotel(hotel_id) or index.find_hotel(hotel_id)
    if hotel is None:
        raise HTTPException(status_code=404, detail="Invalid hotel name")
    return HotelInfoResponse(
        hotel=hotel,
        avg_rating=reviews.avg_rating(hotel_id),
        saved=hotel_id in saved.get_saved_hotels(username),
    )


@router.get("/attractions", response_model=AttractionsResponse)
async def attractions(
    _user: CurrentUser,
    finder: AttractionFinderDep,
    index: IndexDep,
    settings: SettingsDep,
    hotel_id: HotelId,
    radius: str | None = None,
) -> AttractionsResponse:
    try:
        miles = int(radius) if radius is not None else settings.attractions_radius
    except ValueError:
        logger.info("Invalid radius %r, using %d", radius, settings.attractions_radius)
        miles = settings.attractions_radius

    hotel = await run_in_threadpool(index.find_hotel, hotel_id)
    if hotel is None:
        raise HTTPException(status_code=404, detail="Invalid hotel name")

    found = await finder.fetch_attractions(hotel_id, miles)
    return AttractionsResponse(hotel_id=hotel_id, name=hotel.name, radius=miles, attractions=found)


@router.get("/descriptions", response_model=DescriptionsResponse)
async def descriptions(
    _user: CurrentUser,
    scraper: DescriptionScraperDep,
    hotels: HotelStoreDep,
    index: IndexDep,
    hotel_id: HotelId,
) -> DescriptionsResponse:
    if await run_in_threadpool(index.find_hotel, hotel_id) is None:
        raise HTTPException(status_code=404, detail="Invalid hotel name")

    bundle = await scraper.fetch_descriptions(hotel_id)
    if bundle.is_empty:
        return DescriptionsResponse(hotel_id=hotel_id, descriptions=None)

    status = await run_in_threadpool(
        hotels.set_descriptions, hotel_id, bundle.area_description, bundle.property_description
    )
    if status is not Status.OK:
        logger.warning("Descriptions for %s not stored: %s", hotel_id, status.message)
    return DescriptionsResponse(hotel_id=hotel_id, descriptions=bundle)
