import httpx
import pytest
import respx
from httpx import Response

from hotel_portal.exceptions.custom import FetchFailed
from hotel_portal.services.page_fetcher import PageFetcher, strip_headers

URL = "https://example.com/page"


def test_strip_headers_bare_json():
    assert strip_headers('{"a": 1}') == '{"a": 1}'


def test_strip_headers_multiline_headers():
    raw = (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: application/json;\r\n"
        "    charset=UTF-8\r\n"
        "Connection: close\r\n"
        "\r\n"
        '{"results": []}'
    )
    assert strip_headers(raw) == '{"results": []}'


def test_strip_headers_without_json():
    with pytest.raises(FetchFailed):
        strip_headers("HTTP/1.1 500 Internal Server Error\r\n\r\n")


@respx.mock
async def test_get_sends_close_and_host_headers():
    route = respx.get(URL).mock(return_value=Response(200, text="<html></html>"))

    async with httpx.AsyncClient() as client:
        body = await PageFetcher(client).get(URL)

    assert body == "<html></html>"
    request = route.calls.last.request
    assert request.headers["Host"] == "example.com"
    assert request.headers["Connection"] == "close"


@respx.mock
async def test_error_status_raises():
    respx.get(URL).mock(return_value=Response(503, text="down"))

    async with httpx.AsyncClient() as client:
        with pytest.raises(FetchFailed) as exc_info:
            await PageFetcher(client).get(URL)
    assert exc_info.value.status_code == 503


@respx.mock
async def test_transport_error_raises():
    respx.get(URL).mock(side_effect=httpx.ConnectError("refused"))

    async with httpx.AsyncClient() as client:
        with pytest.raises(FetchFailed):
            await PageFetcher(client).get(URL)
