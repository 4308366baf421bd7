from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

PIXABAY_URL = "https://pixabay.com/api/"


class MoodImageClient:
    """Look up a mood illustration on Pixabay; degrades to ``None`` offline."""

    def __init__(
        self,
        api_key: str | None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    async def lookup(self, query: str | None) -> str | None:
        if not self._api_key or not query:
            return None

        params = {
            "q": query,
            "key": self._api_key,
            "min_width": "1280",
            "min_height": "720",
            "image_type": "illustration",
            "category": "feelings",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(PIXABAY_URL, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Mood image lookup failed: %s", exc)
            return None

        hits = data.get("hits") or []
        if not hits:
            return None
        return hits[0].get("largeImageURL")


__all__ = ["MoodImageClient"]
