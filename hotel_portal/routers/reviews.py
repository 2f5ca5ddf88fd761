import logging
import random
from datetime import datetime
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import RedirectResponse

from hotel_portal.dependencies import (
    CurrentUser,
    ErrorMessage,
    HotelId,
    HotelStoreDep,
    IndexDep,
    ReviewStoreDep,
)
from hotel_portal.schemas.hotel import ANONYMOUS, Review
from hotel_portal.schemas.requests import ReviewEditForm, ReviewForm
from hotel_portal.schemas.responses import ReviewFormResponse, ReviewsResponse
from hotel_portal.services.hotel_index import MAX_RATING, MIN_RATING
from hotel_portal.status import Status

logger = logging.getLogger(__name__)

router = APIRouter()


def _redirect(path: str, **params: str) -> RedirectResponse:
    url = f"{path}?{urlencode(params)}" if params else path
    return RedirectResponse(url=url, status_code=302)


def new_review_id() -> str:
    return str(random.randint(100_000_000, 999_999_999))


def _review_from_form(form: ReviewForm, review_id: str, user: str) -> Review | None:
    if not MIN_RATING <= form.rating <= MAX_RATING:
        return None
    return Review(
        review_id=review_id,
        hotel_id=form.hotel_id,
        user=user.strip() or ANONYMOUS,
        rating=form.rating,
        is_recommended=form.is_recommended,
        title=form.title,
        text=form.text,
        submitted_at=datetime.now().replace(microsecond=0),
    )


@router.get("/reviews", response_model=ReviewsResponse)
def reviews_page(
    username: CurrentUser,
    reviews: ReviewStoreDep,
    hotels: HotelStoreDep,
    index: IndexDep,
    hotel_id: HotelId,
    review_id: Annotated[str | None, Query(alias="reviewId")] = None,
):
    if review_id is not None:
        review = reviews.get_review(review_id)
        if review is not None and review.user != username:
            raise HTTPException(status_code=403, detail="Only the author can delete a review")
        if reviews.remove_review(review_id) is Status.OK:
            return _redirect("/reviews", hotelId=hotel_id)

    hotel = hotels.get_hotel(hotel_id) or index.find_hotel(hotel_id)
    if hotel is None:
        raise HTTPException(status_code=404, detail="Invalid hotel name")
    return ReviewsResponse(
        hotel=hotel, username=username, reviews=reviews.get_reviews_by_hotel(hotel_id)
    )


@router.get("/addReview", response_model=ReviewFormResponse)
def add_review_page(_user: CurrentUser, hotel_id: HotelId, error: ErrorMessage):
    return ReviewFormResponse(hotel_id=hotel_id, error=error)


@router.post("/addReview")
def add_review(username: CurrentUser, form: ReviewForm, reviews: ReviewStoreDep) -> RedirectResponse:
    review = _review_from_form(form, new_review_id(), username)
    status = reviews.add_review(review) if review is not None else Status.INVALID_REVIEW
    if status is not Status.OK:
        logger.info("Review for %s rejected: %s", form.hotel_id, status.name)
        return _redirect("/addReview", hotelId=form.hotel_id, error=str(status.ordinal))
    return _redirect("/reviews", hotelId=form.hotel_id)


@router.get("/editReview", response_model=ReviewFormResponse)
def edit_review_page(
    _user: CurrentUser,
    reviews: ReviewStoreDep,
    hotel_id: HotelId,
    review_id: Annotated[str, Query(alias="reviewId")],
    error: ErrorMessage,
):
    return ReviewFormResponse(hotel_id=hotel_id, review=reviews.get_review(review_id), error=error)


@router.post("/editReview")
def edit_review(username: CurrentUser, form: ReviewEditForm, reviews: ReviewStoreDep) -> RedirectResponse:
    existing = reviews.get_review(form.review_id)
    if existing is not None and existing.user != username:
        raise HTTPException(status_code=403, detail="Only the author can edit a review")

    review = _review_from_form(form, form.review_id, username)
    status = reviews.update_review(review) if review is not None else Status.INVALID_REVIEW
    if status is not Status.OK:
        return _redirect(
            "/editReview", hotelId=form.hotel_id, reviewId=form.review_id, error=str(status.ordinal)
        )
    return _redirect("/reviews", hotelId=form.hotel_id)
