import os
from pathlib import Path

import respx
from httpx import Response

PLACES_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
EXPEDIA_URL = "https://www.expedia.com/hA.Hotel-Information"

EXPEDIA_PAGE = """
<div>About this area<h4>Embarcadero</h4><p>By the Ferry Building.</p></div>
<div>About this property<h4>Alpha Inn</h4><p>Bay views.</p></div>
"""


async def test_search_requires_login(client):
    resp = await client.get("/hotelSearch", params={"name": "Alpha"})
    assert resp.status_code == 302


async def test_search_by_name(user_client):
    resp = await user_client.get("/hotelSearch", params={"name": "Alpha"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["cities"] == ["Oakland", "San Francisco"]
    assert [(h["id"], h["avg_rating"]) for h in data["hotels"]] == [("A", 4.0)]


async def test_search_without_terms_is_empty(user_client):
    resp = await user_client.get("/hotelSearch")
    assert resp.json()["hotels"] == []


async def test_hotels_lists_index(user_client):
    resp = await user_client.get("/hotels")
    assert [h["id"] for h in resp.json()] == ["A", "B"]


async def test_hotel_info(user_client):
    resp = await user_client.get("/hotelInfo", params={"hotelId": "A"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["hotel"]["name"] == "Alpha Inn"
    assert data["avg_rating"] == 4.0
    assert data["saved"] is False


async def test_hotel_info_unknown(user_client):
    resp = await user_client.get("/hotelInfo", params={"hotelId": "Z"})
    assert resp.status_code == 404


@respx.mock
async def test_attractions(user_client):
    route = respx.get(url__startswith=PLACES_URL).mock(
        return_value=Response(200, json={
            "status": "OK",
            "results": [{"id": "p1", "name": "Ferry Building", "rating": 4.7,
                         "formatted_address": "1 Ferry Bldg"}],
        })
    )

    resp = await user_client.get("/attractions", params={"hotelId": "A", "radius": "abc"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["radius"] == 2
    assert data["name"] == "Alpha Inn"
    assert data["attractions"][0]["name"] == "Ferry Building"
    assert route.calls.last.request.url.params["radius"] == "3219"


@respx.mock
async def test_attractions_upstream_failure(user_client):
    respx.get(url__startswith=PLACES_URL).mock(return_value=Response(500))
    resp = await user_client.get("/attractions", params={"hotelId": "A"})
    assert resp.status_code == 502


async def test_attractions_without_api_key(user_client):
    Path(os.environ["PLACES_CONFIG"]).unlink()
    resp = await user_client.get("/attractions", params={"hotelId": "A"})
    assert resp.status_code == 503


async def test_attractions_unknown_hotel(user_client):
    resp = await user_client.get("/attractions", params={"hotelId": "Z"})
    assert resp.status_code == 404


@respx.mock
async def test_descriptions_are_stored(user_client):
    respx.get(EXPEDIA_URL).mock(return_value=Response(200, text=EXPEDIA_PAGE))

    resp = await user_client.get("/descriptions", params={"hotelId": "A"})

    assert resp.status_code == 200
    assert resp.json()["descriptions"]["area_description"] == "Embarcadero\n\nBy the Ferry Building."
    info = await user_client.get("/hotelInfo", params={"hotelId": "A"})
    assert info.json()["hotel"]["property_description"] == "Alpha Inn\n\nBay views."


@respx.mock
async def test_descriptions_missing_sections(user_client):
    respx.get(EXPEDIA_URL).mock(return_value=Response(200, text="<html></html>"))
    resp = await user_client.get("/descriptions", params={"hotelId": "A"})
    assert resp.status_code == 200
    assert resp.json()["descriptions"] is None
