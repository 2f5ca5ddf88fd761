import logging

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from .custom import FetchFailed, LoginRequired, MissingApiKey

logger = logging.getLogger(__name__)


async def fetch_failed_handler(_request: Request, exc: FetchFailed) -> JSONResponse:
    logger.error("External fetch failed: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": f"External fetch failed: {exc.message}"},
    )


async def missing_api_key_handler(_request: Request, exc: MissingApiKey) -> JSONResponse:
    logger.error("Places API key unavailable: %s", exc.message)
    return JSONResponse(
        status_code=503,
        content={"detail": "Attractions are unavailable: API key is not configured"},
    )


async def login_required_handler(_request: Request, exc: LoginRequired) -> RedirectResponse:
    logger.debug("Anonymous request to %s, redirecting to /login", exc.path)
    return RedirectResponse(url="/login", status_code=302)
