import json
import logging
from pathlib import Path

from hotel_portal.exceptions.custom import MalformedCatalog
from hotel_portal.schemas.hotel import Hotel
from hotel_portal.services.hotel_index import HotelIndex

logger = logging.getLogger(__name__)

# catalog key -> Hotel field
_FIELDS = {
    "id": "id",
    "f": "name",
    "ad": "street",
    "ci": "city",
    "pr": "state",
}


def _parse_entry(entry: object, position: int) -> Hotel:
    if not isinstance(entry, dict):
        raise MalformedCatalog(f"Catalog entry {position} is not an object")

    values: dict[str, object] = {}
    for key, attr in _FIELDS.items():
        if entry.get(key) is None:
            raise MalformedCatalog(f"Catalog entry {position} is missing '{key}'")
        values[attr] = str(entry[key])

    location = entry.get("ll")
    if not isinstance(location, dict):
        raise MalformedCatalog(f"Catalog entry {position} is missing 'll'")
    for key, attr in (("lat", "latitude"), ("lng", "longitude")):
        try:
            values[attr] = float(location[key])
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedCatalog(
                f"Catalog entry {position} has no usable 'll.{key}'"
            ) from exc

    return Hotel(**values)


def parse_catalog(path: str | Path) -> list[Hotel]:
    """Read a hotel catalog (top-level ``sr`` array) into Hotel records."""
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as fh:
            document = json.load(fh)
    except OSError as exc:
        raise MalformedCatalog(f"Unable to read catalog: {exc}", str(path)) from exc
    except json.JSONDecodeError as exc:
        raise MalformedCatalog(f"Catalog is not valid JSON: {exc}", str(path)) from exc

    entries = document.get("sr") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise MalformedCatalog("Catalog has no 'sr' array", str(path))

    hotels = []
    for position, entry in enumerate(entries):
        try:
            hotels.append(_parse_entry(entry, position))
        except MalformedCatalog as exc:
            exc.path = str(path)
            raise
    return hotels


def load_catalog(path: str | Path, index: HotelIndex) -> int:
    hotels = parse_catalog(path)
    for hotel in hotels:
        index.add_hotel(hotel)
    logger.info("Loaded %d hotels from %s", len(hotels), path)
    return len(hotels)
