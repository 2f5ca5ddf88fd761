import logging
from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse

from hotel_portal.dependencies import (
    CurrentUser,
    HotelId,
    HotelStoreDep,
    IndexDep,
    ReviewStoreDep,
    SavedHotelStoreDep,
    VisitedLinkStoreDep,
)
from hotel_portal.schemas.responses import FavouritesResponse, ProfileResponse, StatusResponse
from hotel_portal.status import Status

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/addFavourites", response_model=FavouritesResponse)
def add_favourites(
    username: CurrentUser,
    saved: SavedHotelStoreDep,
    links: VisitedLinkStoreDep,
    hotel_id: HotelId,
    save: bool = False,
    visited: bool = False,
) -> FavouritesResponse:
    response = FavouritesResponse(hotel_id=hotel_id)
    if save:
        response.saved = StatusResponse.of(saved.save_hotel(username, hotel_id))
    if visited:
        response.visited = StatusResponse.of(links.save_link(username, hotel_id))
    return response


@router.api_route("/profile", methods=["GET", "POST"], response_model=ProfileResponse)
def profile(
    username: CurrentUser,
    hotels: HotelStoreDep,
    index: IndexDep,
    reviews: ReviewStoreDep,
    saved: SavedHotelStoreDep,
    links: VisitedLinkStoreDep,
    hotel_id: Annotated[str | None, Query(alias="hotelId")] = None,
    review_id: Annotated[str | None, Query(alias="reviewId")] = None,
    saved_hotel: Annotated[bool, Query(alias="savedHotel")] = False,
    visited_link: Annotated[bool, Query(alias="visitedLink")] = False,
    delete_review: Annotated[bool, Query(alias="deleteReview")] = False,
    clear_saved_hotels: Annotated[bool, Query(alias="clearSavedHotels")] = False,
    clear_visited_links: Annotated[bool, Query(alias="clearVisitedLinks")] = False,
    clear_reviews: Annotated[bool, Query(alias="clearReviews")] = False,
):
    """Show the user's saved hotels, visited links and reviews.

    Query flags remove entries first; a successful removal redirects back
    to a clean ``/profile``.
    """
    actions = []
    if clear_saved_hotels:
        actions.append(lambda: saved.remove_all_saved_hotels(username))
    if clear_visited_links:
        actions.append(lambda: links.clear_links(username))
    if clear_reviews:
        actions.append(lambda: reviews.remove_reviews_by_user(username))
    if hotel_id is not None and saved_hotel:
        actions.append(lambda: saved.remove_saved_hotel(username, hotel_id))
    if hotel_id is not None and visited_link:
        actions.append(lambda: links.remove_link(username, hotel_id))
    if review_id is not None and delete_review:
        review = reviews.get_review(review_id)
        if review is not None and review.user == username:
            actions.append(lambda: reviews.remove_review(review_id))

    changed = False
    for action in actions:
        status = action()
        if status is Status.OK:
            changed = True
        else:
            logger.info("Profile update for %s failed: %s", username, status.message)
    if changed:
        return RedirectResponse(url="/profile", status_code=302)

    saved_hotels = []
    for saved_id in saved.get_saved_hotels(username):
        hotel = hotels.get_hotel(saved_id) or index.find_hotel(saved_id)
        if hotel is not None:
            saved_hotels.append(hotel)
    return ProfileResponse(
        username=username,
        saved_hotels=saved_hotels,
        visited_links=links.get_links(username),
        reviews=reviews.get_reviews_by_user(username),
    )
