import threading
from datetime import datetime, timedelta, timezone

from hotel_portal.schemas.hotel import DescriptionBundle, Hotel, TouristAttraction
from hotel_portal.services.hotel_index import HotelIndex, ReviewSet, build_review


def _index(*hotel_ids):
    index = HotelIndex()
    for hotel_id in hotel_ids:
        index.add_hotel(Hotel(id=hotel_id, name=f"Hotel {hotel_id}", city="X"))
    return index


def _review(review_id, date, user="bob", hotel_id="A", rating=3):
    return build_review(hotel_id, review_id, rating, "t", "x", False, date, user)


def _add(index, review_id, date="2024-01-01T00:00:00", rating=3, user="bob", hotel_id="A"):
    return index.add_review(hotel_id, review_id, rating, "t", "x", False, date, user)


def test_hotels_sorted():
    assert _index("B", "C", "A").hotels() == ["A", "B", "C"]


def test_out_of_range_rating_is_rejected():
    index = _index("A")
    assert _add(index, "r1")
    assert not _add(index, "r2", rating=7)
    assert not _add(index, "r3", rating=-1)
    assert [r.review_id for r in index.find_reviews("A", 10)] == ["r1"]


def test_bad_date_is_rejected():
    index = _index("A")
    assert not _add(index, "r1", date="01/02/2024")
    assert index.find_reviews("A", 10) is None


def test_review_for_unknown_hotel_is_rejected():
    index = _index("A")
    assert not _add(index, "r1", hotel_id="Z")
    assert index.find_reviews("Z", 10) is None


def test_order_is_date_desc_then_user_then_id():
    index = _index("A")
    _add(index, "r3", date="2024-01-01T00:00:00", user="carol")
    _add(index, "r2", date="2024-01-01T00:00:00", user="alice")
    _add(index, "r1", date="2024-01-01T00:00:00", user="alice")
    _add(index, "r4", date="2024-03-01T00:00:00", user="zed")

    ordered = index.find_reviews("A", 10)
    assert [r.review_id for r in ordered] == ["r4", "r1", "r2", "r3"]
    for earlier, later in zip(ordered, ordered[1:]):
        assert earlier.submitted_at >= later.submitted_at


def test_duplicate_review_id_is_rejected():
    index = _index("A")
    assert _add(index, "r1", user="first")
    assert not _add(index, "r1", user="second", date="2025-01-01T00:00:00")
    assert [r.user for r in index.find_reviews("A", 10)] == ["first"]


def test_find_reviews_limits():
    index = _index("A")
    for day in range(1, 6):
        _add(index, f"r{day}", date=f"2024-01-0{day}T00:00:00")
    assert len(index.find_reviews("A", 3)) == 3
    assert index.find_reviews("A", 0) == []
    assert index.find_reviews("A", -2) == []


def test_readers_get_copies():
    index = _index("A")
    _add(index, "r1")

    hotel = index.find_hotel("A")
    hotel.name = "Changed"
    review = index.find_reviews("A", 1)[0]
    review.title = "Changed"

    assert index.find_hotel("A").name == "Hotel A"
    assert index.find_reviews("A", 1)[0].title == "t"


def test_descriptions_and_attractions_are_handed_out_as_copies():
    index = _index("A")
    index.set_descriptions("A", DescriptionBundle(hotel_id="A", area_description="Area"))
    index.add_attractions("A", [TouristAttraction(id="p1", name="Pier", rating=4.5, address="Pier 39")])

    bundle = index.find_descriptions("A")
    assert bundle is not index.find_descriptions("A")
    bundle.area_description = "Changed"
    assert index.find_descriptions("A").area_description == "Area"

    attractions = index.find_attractions("A")
    assert attractions[0] is not index.find_attractions("A")[0]
    attractions[0].name = "Changed"
    attractions.clear()
    assert [a.name for a in index.find_attractions("A")] == ["Pier"]


def test_aware_dates_are_stored_as_naive_utc():
    review = _review("r1", datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2))))
    assert review.submitted_at == datetime(2024, 1, 1, 10, 0)

    index = _index("A")
    assert index.add_review("A", "r1", 3, "t", "x", False, review.submitted_at, "bob")
    assert _add(index, "r2", date=datetime(2024, 1, 2, tzinfo=timezone.utc))
    assert [r.review_id for r in index.find_reviews("A", 10)] == ["r2", "r1"]


def test_reviews_survive_a_round_trip():
    index = _index("A")
    date = "2016-06-29T18:41:58Z"
    assert index.add_review("A", "r1", 4, "Nice", "Clean rooms", True, date, "amy")

    review = index.find_reviews("A", 1)[0]
    assert review.review_id == "r1"
    assert review.hotel_id == "A"
    assert review.rating == 4
    assert review.title == "Nice"
    assert review.text == "Clean rooms"
    assert review.is_recommended is True
    assert review.user == "amy"
    assert review.submitted_at == datetime(2016, 6, 29, 18, 41, 58)


def test_merge_installs_set_for_known_hotel_only():
    index = _index("A")
    local = ReviewSet()
    index.add_review_local(local, "A", "r1", 5, "t", "x", True, "2024-01-01T00:00:00", "amy")

    assert index.merge("A", local)
    assert not index.merge("B", local)
    assert index.review_counts() == {"A": 1}


def test_merge_is_not_affected_by_later_changes_to_the_set():
    index = _index("A")
    local = ReviewSet([_review("r1", "2024-01-01T00:00:00")])
    index.merge("A", local)
    local.add(_review("r2", "2024-01-02T00:00:00"))

    assert [r.review_id for r in index.find_reviews("A", 10)] == ["r1"]


def test_concurrent_merges_install_one_whole_set():
    index = _index("A")
    first = ReviewSet([_review("r1", "2024-01-02T00:00:00")])
    second = ReviewSet([_review("r2", "2024-01-01T00:00:00")])
    start = threading.Barrier(2)

    def merge(review_set):
        start.wait()
        index.merge("A", review_set)

    threads = [threading.Thread(target=merge, args=(s,)) for s in (first, second)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    ids = [r.review_id for r in index.find_reviews("A", 10)]
    assert ids in (["r1"], ["r2"])


def test_attractions_and_descriptions():
    index = _index("A")
    attractions = [TouristAttraction(id="p1", name="Pier", rating=4.5, address="Bay St")]
    assert index.add_attractions("A", attractions)
    assert not index.add_attractions("B", attractions)
    assert index.find_attractions("A")[0].name == "Pier"
    assert index.find_attractions("B") is None

    bundle = DescriptionBundle(hotel_id="A", area_description="Area", property_description="Prop")
    assert index.set_descriptions("A", bundle)
    assert index.find_descriptions("A").area_description == "Area"
    assert index.find_hotel("A").property_description == "Prop"
    assert not index.set_descriptions("B", bundle)


def test_snapshot_lists_hotels_and_reviews():
    index = _index("B", "A")
    _add(index, "r1", hotel_id="B")
    _add(index, "r2", hotel_id="A")

    snapshot = index.snapshot()
    assert [h.id for h in snapshot.hotels] == ["A", "B"]
    assert [r.review_id for r in snapshot.reviews] == ["r2", "r1"]
    assert [r.review_id for r in index.all_reviews()] == ["r2", "r1"]
