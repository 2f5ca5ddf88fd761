import logging

import httpx

from hotel_portal.exceptions.custom import FetchFailed

logger = logging.getLogger(__name__)

_USER_AGENT = "HotelPortal/1.0"


def strip_headers(raw: str) -> str:
    """Drop everything before the first ``{``.

    Accepts either a bare JSON body or a raw HTTP response that still
    carries its status line and (possibly multi-line) headers.
    """
    start = raw.find("{")
    if start < 0:
        raise FetchFailed("Response does not contain a JSON document")
    return raw[start:]


class PageFetcher:
    """One HTTP/1.1 GET per call; the server is asked to close the connection."""

    def __init__(self, client: httpx.AsyncClient, timeout: float | None = None):
        self._client = client
        self._timeout = timeout

    async def get(self, url: str) -> str:
        host = httpx.URL(url).host
        headers = {
            "Host": host,
            "Connection": "close",
            "User-Agent": _USER_AGENT,
        }
        try:
            resp = await self._client.get(
                url,
                headers=headers,
                follow_redirects=True,
                timeout=self._timeout if self._timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as exc:
            raise FetchFailed(f"Request to {host} failed: {exc}") from exc

        if resp.status_code >= 400:
            raise FetchFailed(
                f"{host} answered {resp.status_code}", status_code=resp.status_code
            )

        logger.debug("Fetched %d bytes from %s", len(resp.content), host)
        return resp.text
