import json

import httpx
import pytest
from httpx import ASGITransport

HOTELS = {
    "sr": [
        {
            "id": "A",
            "f": "Alpha Inn",
            "ad": "1 Market St",
            "ci": "San Francisco",
            "pr": "CA",
            "ll": {"lat": 37.79, "lng": -122.39},
        },
        {
            "id": "B",
            "f": "Beta Suites",
            "ad": "9 Broadway",
            "ci": "Oakland",
            "pr": "CA",
            "ll": {"lat": 37.80, "lng": -122.27},
        },
    ]
}

REVIEWS = {
    "reviewDetails": {
        "reviewCollection": {
            "review": [
                {
                    "hotelId": "A",
                    "reviewId": "ra1",
                    "ratingOverall": 3,
                    "title": "Fine",
                    "reviewText": "Okay stay",
                    "userNickname": "carol",
                    "isRecommended": False,
                    "reviewSubmissionTime": "2021-05-01T10:00:00Z",
                },
                {
                    "hotelId": "A",
                    "reviewId": "ra2",
                    "ratingOverall": 5,
                    "title": "Great",
                    "reviewText": "Loved it",
                    "userNickname": "dave",
                    "isRecommended": True,
                    "reviewSubmissionTime": "2022-05-01T10:00:00Z",
                },
            ]
        }
    }
}


@pytest.fixture
def mock_env(monkeypatch, tmp_path):
    properties = tmp_path / "database.properties"
    properties.write_text(f"url=sqlite:///{tmp_path / 'portal.db'}\n", encoding="utf-8")

    places = tmp_path / "config.json"
    places.write_text(json.dumps({"apikey": "test-key"}), encoding="utf-8")

    hotels = tmp_path / "hotels.json"
    hotels.write_text(json.dumps(HOTELS), encoding="utf-8")

    reviews = tmp_path / "reviews" / "A"
    reviews.mkdir(parents=True)
    (reviews / "reviews.json").write_text(json.dumps(REVIEWS), encoding="utf-8")

    monkeypatch.setenv("DATABASE_PROPERTIES", str(properties))
    monkeypatch.setenv("PLACES_CONFIG", str(places))
    monkeypatch.setenv("HOTELS_PATH", str(hotels))
    monkeypatch.setenv("REVIEWS_PATH", str(tmp_path / "reviews"))
    monkeypatch.setenv("INGEST_WORKERS", "2")


@pytest.fixture
async def client(mock_env):
    from hotel_portal.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c


@pytest.fixture
async def user_client(client):
    """Client with a registered ``amy`` logged in."""
    credentials = {"username": "amy", "password": "Ab1@c"}
    await client.post("/register", json=credentials)
    resp = await client.post("/login", json=credentials)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/welcome"
    return client
