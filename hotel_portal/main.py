import asyncio
import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from hotel_portal.config import Settings
from hotel_portal.db.database import Database, DatabaseConfigError
from hotel_portal.db.hotels import HotelStore
from hotel_portal.db.mirror import mirror_index
from hotel_portal.db.reviews import ReviewStore
from hotel_portal.db.saved_hotels import SavedHotelStore
from hotel_portal.db.users import UserStore
from hotel_portal.db.visited_links import VisitedLinkStore
from hotel_portal.exceptions.custom import FetchFailed, LoginRequired, MissingApiKey
from hotel_portal.exceptions.handlers import (
    fetch_failed_handler,
    login_required_handler,
    missing_api_key_handler,
)
from hotel_portal.routers.auth import router as auth_router
from hotel_portal.routers.hotels import router as hotels_router
from hotel_portal.routers.profile import router as profile_router
from hotel_portal.routers.reviews import router as reviews_router
from hotel_portal.services.catalog import load_catalog
from hotel_portal.services.expedia import DescriptionScraper
from hotel_portal.services.hotel_index import HotelIndex
from hotel_portal.services.ingestion import ReviewIngestor
from hotel_portal.services.page_fetcher import PageFetcher
from hotel_portal.services.places import AttractionFinder
from hotel_portal.status import Status

logger = logging.getLogger(__name__)


async def bootstrap(settings: Settings, index: HotelIndex) -> None:
    """Load the hotel catalog and the review tree named in the settings."""
    if settings.hotels_path:
        load_catalog(settings.hotels_path, index)
    if settings.reviews_path:
        ingestor = ReviewIngestor(
            index,
            workers=settings.ingest_workers,
            grace_period=settings.ingest_grace_seconds,
        )
        await asyncio.to_thread(ingestor.ingest, settings.reviews_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    try:
        db = Database.from_properties(settings.database_properties)
    except DatabaseConfigError as exc:
        logger.error("%s %s", exc.status.message, exc.message)
        raise
    status = db.setup_tables()
    if status is not Status.OK:
        db.dispose()
        raise RuntimeError(status.message)

    index = HotelIndex()
    await bootstrap(settings, index)

    hotel_store = HotelStore(db)
    review_store = ReviewStore(db)
    await asyncio.to_thread(mirror_index, index, hotel_store, review_store)

    async with httpx.AsyncClient(timeout=settings.fetch_timeout) as client:
        fetcher = PageFetcher(client)

        app.state.settings = settings
        app.state.index = index
        app.state.hotel_store = hotel_store
        app.state.review_store = review_store
        app.state.user_store = UserStore(db)
        app.state.saved_hotel_store = SavedHotelStore(db)
        app.state.visited_link_store = VisitedLinkStore(db)
        app.state.attraction_finder = AttractionFinder(fetcher, index, settings.places_config)
        app.state.description_scraper = DescriptionScraper(fetcher, index)

        try:
            yield
        finally:
            db.dispose()


app = FastAPI(title="Hotel Portal", lifespan=lifespan)

app.add_middleware(SessionMiddleware, secret_key=Settings().session_secret)

app.add_exception_handler(FetchFailed, fetch_failed_handler)
app.add_exception_handler(MissingApiKey, missing_api_key_handler)
app.add_exception_handler(LoginRequired, login_required_handler)

app.include_router(hotels_router)
app.include_router(reviews_router)
app.include_router(profile_router)
# auth carries the catch-all redirect, so it goes last
app.include_router(auth_router)
