from datetime import datetime

import pytest

from hotel_portal.db.hotels import HotelStore
from hotel_portal.db.reviews import ReviewStore
from hotel_portal.schemas.hotel import Hotel, Review
from hotel_portal.status import Status


@pytest.fixture
def hotels(db):
    store = HotelStore(db)
    store.add_hotel(Hotel(id="1", name="Hilton Union Square", city="San Francisco", state="CA"))
    store.add_hotel(Hotel(id="2", name="Hilton Garden Inn", city="Oakland", state="CA"))
    store.add_hotel(Hotel(id="3", name="Marriott Marquis", city="San Francisco", state="CA"))
    return store


def test_add_hotel_is_insert_if_absent(hotels):
    assert hotels.add_hotel(Hotel(id="1", name="Other")) is Status.DUPLICATE_HOTEL
    assert hotels.get_hotel("1").name == "Hilton Union Square"


def test_add_hotel_requires_id_and_name(db):
    store = HotelStore(db)
    assert store.add_hotel(Hotel(id=" ", name="Nameless")) is Status.INVALID_HOTEL
    assert store.add_hotel(Hotel(id="9", name="")) is Status.INVALID_HOTEL


def test_check_and_remove(hotels):
    assert hotels.check_hotel_exists("2")
    assert hotels.remove_hotel("2") is Status.OK
    assert not hotels.check_hotel_exists("2")
    assert hotels.remove_hotel("2") is Status.INVALID_HOTEL


def test_distinct_cities(hotels):
    assert hotels.list_distinct_cities() == ["Oakland", "San Francisco"]


def test_search_by_name(hotels):
    assert [h.id for h in hotels.search_hotels("Hilton", "")] == ["2", "1"]


def test_search_by_city(hotels):
    assert [h.id for h in hotels.search_hotels(None, "San Francisco")] == ["1", "3"]


def test_search_by_name_and_city(hotels):
    assert [h.id for h in hotels.search_hotels("Hilton", "Oakland")] == ["2"]


def test_search_with_both_blank_finds_nothing(hotels):
    assert hotels.search_hotels("", "  ") == []
    assert hotels.search_hotels(None, None) == []


def test_search_carries_average_rating(db, hotels):
    reviews = ReviewStore(db)
    for review_id, rating in (("r1", 4.0), ("r2", 3.0), ("r3", 4.0)):
        reviews.add_review(
            Review(
                review_id=review_id,
                hotel_id="1",
                rating=rating,
                submitted_at=datetime(2020, 1, 1),
            )
        )

    found = {h.id: h.avg_rating for h in hotels.search_hotels("Hilton", "")}
    assert found == {"1": 3.7, "2": 0.0}


def test_set_descriptions(hotels):
    assert hotels.set_descriptions("3", "Area", "Property") is Status.OK
    hotel = hotels.get_hotel("3")
    assert hotel.area_description == "Area"
    assert hotel.property_description == "Property"
    assert hotels.set_descriptions("missing", "a", "p") is Status.INVALID_HOTEL


def test_list_all_hotels_sorted_by_name(hotels):
    assert [h.name for h in hotels.list_all_hotels()] == [
        "Hilton Garden Inn",
        "Hilton Union Square",
        "Marriott Marquis",
    ]
