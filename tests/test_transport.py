"""AiohttpTransport against a local aiohttp server."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import pytest
from aiohttp import test_utils, web

from pyetagfetch._transport import AiohttpTransport
from pyetagfetch.auth import BearerTokenAuth
from pyetagfetch.config import FetcherConfig
from pyetagfetch.contracts import structural_equal
from pyetagfetch.exceptions import FetcherError, FetcherTransportError
from pyetagfetch.fetcher import EtagFetcher

ETAG = '"v1"'
SEEN_HEADERS = web.AppKey("seen_headers", list)


async def _items(request: web.Request) -> web.Response:
    request.app[SEEN_HEADERS].append(request.headers.copy())
    if request.headers.get("If-None-Match") == ETAG:
        return web.Response(status=304, headers={"ETag": ETAG})
    return web.json_response({"etag": "v1", "items": [{"id": 1}]}, headers={"ETag": ETAG})


async def _broken(_request: web.Request) -> web.Response:
    return web.Response(status=500, text="boom", headers={"Retry-After": "5"})


async def _not_json(_request: web.Request) -> web.Response:
    return web.Response(status=200, text="<html>", content_type="text/html")


async def _empty(_request: web.Request) -> web.Response:
    return web.Response(status=200)


@asynccontextmanager
async def _server() -> AsyncIterator[test_utils.TestServer]:
    app = web.Application()
    app[SEEN_HEADERS] = []
    app.router.add_get("/items", _items)
    app.router.add_get("/broken", _broken)
    app.router.add_get("/not-json", _not_json)
    app.router.add_get("/empty", _empty)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_get_decodes_json_and_headers() -> None:
    async with _server() as server, AiohttpTransport() as transport:
        response = await transport.get(str(server.make_url("/items")), {})

    assert response.status == 200
    assert response.headers["etag"] == ETAG
    assert response.body == {"etag": "v1", "items": [{"id": 1}]}


@pytest.mark.asyncio
async def test_sends_defaults_and_caller_headers() -> None:
    config = FetcherConfig(user_agent="probe/1")
    async with _server() as server, AiohttpTransport(config) as transport:
        await transport.get(str(server.make_url("/items")), {"X-Tenant": "t1"})
        seen = server.app[SEEN_HEADERS][0]

    assert seen["User-Agent"] == "probe/1"
    assert seen["Accept"] == "application/json"
    assert seen["X-Tenant"] == "t1"


@pytest.mark.asyncio
async def test_not_modified_has_no_body() -> None:
    async with _server() as server, AiohttpTransport() as transport:
        response = await transport.get(str(server.make_url("/items")), {"If-None-Match": ETAG})

    assert response.status == 304
    assert response.body is None
    assert response.headers["ETag"] == ETAG


@pytest.mark.asyncio
async def test_empty_body_is_none() -> None:
    async with _server() as server, AiohttpTransport() as transport:
        response = await transport.get(str(server.make_url("/empty")), {})

    assert response.status == 200
    assert response.body is None


@pytest.mark.asyncio
async def test_error_status_carries_status_and_headers() -> None:
    async with _server() as server, AiohttpTransport() as transport:
        with pytest.raises(FetcherTransportError) as excinfo:
            await transport.get(str(server.make_url("/broken")), {})

    assert excinfo.value.status_code == 500
    assert excinfo.value.headers["retry-after"] == "5"


@pytest.mark.asyncio
async def test_invalid_json_is_unclassified() -> None:
    async with _server() as server, AiohttpTransport() as transport:
        with pytest.raises(FetcherTransportError) as excinfo:
            await transport.get(str(server.make_url("/not-json")), {})

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_connection_failure_is_unclassified() -> None:
    async with _server() as server:
        url = str(server.make_url("/items"))

    async with AiohttpTransport(FetcherConfig(request_timeout=2.0)) as transport:
        with pytest.raises(FetcherTransportError) as excinfo:
            await transport.get(url, {})

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_requires_context_manager() -> None:
    transport = AiohttpTransport()
    with pytest.raises(FetcherError, match="not initialized"):
        await transport.get("http://127.0.0.1/", {})


@pytest.mark.asyncio
async def test_fetcher_revalidates_against_real_server() -> None:
    async with _server() as server, AiohttpTransport() as transport:
        fetcher: EtagFetcher[dict, dict] = EtagFetcher(
            transport,
            BearerTokenAuth("secret"),
            str(server.make_url("/items")),
            dict,
            structural_equal,
            fetch_refreshes_without_interval=True,
        )
        first = await fetcher.fetch()
        second = await fetcher.fetch()
        seen = server.app[SEEN_HEADERS]

    assert first == {"etag": "v1", "items": [{"id": 1}]}
    assert second is first
    assert fetcher.etag == ETAG
    assert "If-None-Match" not in seen[0]
    assert seen[1]["If-None-Match"] == ETAG
    assert seen[1]["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_caller_headers_replace_defaults_case_insensitively() -> None:
    async with _server() as server, AiohttpTransport() as transport:
        await transport.get(
            str(server.make_url("/items")),
            {"accept": "application/vnd.items+json", "USER-AGENT": "custom/2"},
        )
        seen = server.app[SEEN_HEADERS][0]

    assert seen.getall("Accept") == ["application/vnd.items+json"]
    assert seen.getall("User-Agent") == ["custom/2"]
