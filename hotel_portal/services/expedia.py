import asyncio
import logging
import re

from bs4 import BeautifulSoup

from hotel_portal.exceptions.custom import FetchFailed
from hotel_portal.schemas.hotel import DescriptionBundle
from hotel_portal.services.hotel_index import HotelIndex
from hotel_portal.services.page_fetcher import PageFetcher

logger = logging.getLogger(__name__)

EXPEDIA_URL = "https://www.expedia.com/h{hotel_id}.Hotel-Information"

_SECTION = r"{anchor}.*?<h4[^>]*>(.*?)</h4>.*?<p[^>]*>(.*?)</p>"
_AREA_RE = re.compile(_SECTION.format(anchor="About this area"), re.DOTALL)
_PROPERTY_RE = re.compile(_SECTION.format(anchor="About this property"), re.DOTALL)


def _text(fragment: str) -> str:
    """Decode entities (``&#x27;`` and friends) and drop inline markup."""
    return BeautifulSoup(fragment, "html.parser").get_text().strip()


def _extract(pattern: re.Pattern, html: str) -> str:
    match = pattern.search(html)
    if not match:
        return ""
    heading, paragraph = match.group(1), match.group(2)
    return f"{_text(heading)}\n\n{_text(paragraph)}"


def parse_descriptions(hotel_id: str, html: str) -> DescriptionBundle:
    return DescriptionBundle(
        hotel_id=hotel_id,
        area_description=_extract(_AREA_RE, html),
        property_description=_extract(_PROPERTY_RE, html),
    )


class DescriptionScraper:
    def __init__(self, fetcher: PageFetcher, index: HotelIndex):
        self._fetcher = fetcher
        self._index = index

    async def fetch_descriptions(self, hotel_id: str) -> DescriptionBundle:
        """Scrape the Expedia page of a hotel. Best-effort: a page without the
        expected sections yields an empty bundle and leaves the index alone."""
        if await asyncio.to_thread(self._index.find_hotel, hotel_id) is None:
            raise FetchFailed(f"Unknown hotel {hotel_id}")

        html = await self._fetcher.get(EXPEDIA_URL.format(hotel_id=hotel_id))
        bundle = parse_descriptions(hotel_id, html)
        if bundle.is_empty:
            logger.info("No descriptions found on Expedia page of hotel %s", hotel_id)
            return bundle

        await asyncio.to_thread(self._index.set_descriptions, hotel_id, bundle)
        return bundle
