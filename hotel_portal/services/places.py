import asyncio
import json
import logging
import math
from pathlib import Path
from urllib.parse import quote

from pydantic import ValidationError

from hotel_portal.exceptions.custom import FetchFailed, MissingApiKey
from hotel_portal.schemas.hotel import TouristAttraction
from hotel_portal.schemas.places import PlaceResult, TextSearchResponse
from hotel_portal.services.hotel_index import HotelIndex
from hotel_portal.services.page_fetcher import PageFetcher, strip_headers

logger = logging.getLogger(__name__)

PLACES_HOST = "maps.googleapis.com"
PLACES_PATH = "/maps/api/place/textsearch/json"
METERS_PER_MILE = 1609.34

_OK_STATUSES = {None, "OK", "ZERO_RESULTS"}


def load_api_key(path: str | Path) -> str:
    """Read ``apikey`` from the Places config document."""
    try:
        with Path(path).open(encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise MissingApiKey(f"Unable to read API key from {path}: {exc}") from exc

    key = document.get("apikey") if isinstance(document, dict) else None
    if not isinstance(key, str) or not key.strip():
        raise MissingApiKey(f"API key missing in {path}")
    return key.strip()


def radius_in_meters(radius_miles: float) -> int:
    # half-up rounding
    return math.floor(radius_miles * METERS_PER_MILE + 0.5)


def build_attractions_url(
    city: str,
    latitude: float,
    longitude: float,
    radius_miles: float,
    api_key: str,
) -> str:
    query = (
        f"query=tourist%20attractions+in+{quote(city, safe='')}"
        f"&location={latitude},{longitude}"
        f"&radius={radius_in_meters(radius_miles)}"
        f"&key={quote(api_key, safe='')}"
    )
    return f"https://{PLACES_HOST}{PLACES_PATH}?{query}"


def _to_attraction(result: PlaceResult) -> TouristAttraction | None:
    attraction_id = result.id or result.place_id
    if not attraction_id:
        return None
    return TouristAttraction(
        id=attraction_id,
        name=result.name,
        rating=result.rating or 0.0,
        address=result.formatted_address or "",
    )


def parse_attractions(body: str) -> list[TouristAttraction]:
    try:
        data = TextSearchResponse(**json.loads(strip_headers(body)))
    except (json.JSONDecodeError, ValidationError, TypeError) as exc:
        raise FetchFailed(f"Unable to parse Places response: {exc}") from exc

    if data.status not in _OK_STATUSES:
        raise FetchFailed(f"Places API returned {data.status}: {data.error_message or ''}".strip())

    attractions = []
    for result in data.results:
        attraction = _to_attraction(result)
        if attraction is None:
            logger.debug("Skipping place without id: %s", result.name)
            continue
        attractions.append(attraction)
    return attractions


class AttractionFinder:
    def __init__(self, fetcher: PageFetcher, index: HotelIndex, config_path: str | Path):
        self._fetcher = fetcher
        self._index = index
        self._config_path = Path(config_path)

    async def fetch_attractions(self, hotel_id: str, radius_miles: float) -> list[TouristAttraction]:
        """Fetch tourist attractions around a hotel and install them in the index."""
        api_key = load_api_key(self._config_path)

        hotel = await asyncio.to_thread(self._index.find_hotel, hotel_id)
        if hotel is None:
            raise FetchFailed(f"Unknown hotel {hotel_id}")

        url = build_attractions_url(
            hotel.city, hotel.latitude, hotel.longitude, radius_miles, api_key
        )
        body = await self._fetcher.get(url)
        attractions = parse_attractions(body)

        await asyncio.to_thread(self._index.add_attractions, hotel_id, attractions)
        logger.info(
            "Found %d attractions within %s miles of hotel %s",
            len(attractions), radius_miles, hotel_id,
        )
        return attractions
