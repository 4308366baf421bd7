from __future__ import annotations

import httpx
import pytest

from reflect.app.services.images import MoodImageClient


def _client(handler, api_key: str | None = "secret") -> MoodImageClient:
    return MoodImageClient(api_key, timeout=1.0, transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_lookup_returns_first_hit() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "hits": [
                    {"largeImageURL": "https://cdn.example/one.jpg"},
                    {"largeImageURL": "https://cdn.example/two.jpg"},
                ]
            },
        )

    url = await _client(handler).lookup("amber joy")

    assert url == "https://cdn.example/one.jpg"
    params = seen[0].url.params
    assert params["q"] == "amber joy"
    assert params["key"] == "secret"
    assert params["image_type"] == "illustration"
    assert params["category"] == "feelings"


@pytest.mark.anyio
async def test_lookup_without_hits_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"hits": []})

    assert await _client(handler).lookup("anything") is None


@pytest.mark.anyio
async def test_lookup_swallows_upstream_errors(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    assert await _client(handler).lookup("anything") is None
    assert any("Mood image lookup failed" in record.message for record in caplog.records)


@pytest.mark.anyio
async def test_lookup_handles_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    assert await _client(handler).lookup("anything") is None


@pytest.mark.anyio
async def test_lookup_skipped_without_key() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"hits": []})

    client = _client(handler, api_key=None)

    assert client.available is False
    assert await client.lookup("anything") is None
    assert calls == []
