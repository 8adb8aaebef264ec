"""
Scryfall REST client.

Thin async wrapper over the three endpoints the resolver needs:
- /cards/search  (exact-name searches, all printings, newest first)
- /cards/named   (fuzzy typo-tolerant single-card lookup)
- /sets          (set name -> set code mapping)

Remote failures never raise out of this module: a network error, a
non-success response or a body that is not JSON is logged and reported as
"no results". HTTP 429 is
retried with exponential backoff and counted so callers can throttle down.

API docs: https://scryfall.com/docs/api
"""

import asyncio
import logging
from types import TracebackType
from typing import Any

import httpx

from cardbinder.config import settings

logger = logging.getLogger(__name__)


class ScryfallClient:
    """
    Async Scryfall client.

    Use as an async context manager to own the underlying httpx client,
    or pass an existing httpx.AsyncClient to share one.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self._base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self._max_retries = settings.scryfall_max_retries if max_retries is None else max_retries
        self._backoff = (
            settings.scryfall_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": settings.scryfall_user_agent, "Accept": "application/json"},
            timeout=settings.scryfall_timeout,
            follow_redirects=True,
        )
        self.rate_limited_count = 0
        """Number of 429 responses seen. Monotonic; read it to detect throttling."""

    async def __aenter__(self) -> "ScryfallClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str, params: dict[str, str]) -> httpx.Response | None:
        """
        GET with retry on 429.

        Returns:
            The response (any status other than 429), or None if the request
            failed at the transport level or stayed rate limited.
        """
        url = f"{self._base_url}{path}"
        for attempt in range(self._max_retries + 1):
            try:
                response = await self._client.get(url, params=params)
            except httpx.HTTPError as e:
                logger.warning("Scryfall request failed for %s: %s", path, e)
                return None

            if response.status_code != 429:
                return response

            self.rate_limited_count += 1
            if attempt == self._max_retries:
                break
            wait = self._backoff * (2**attempt)
            logger.warning("Scryfall rate limited, retrying in %.1fs...", wait)
            await asyncio.sleep(wait)

        logger.warning("Scryfall still rate limited after %d retries: %s", self._max_retries, path)
        return None

    def _json(self, response: httpx.Response) -> dict[str, Any] | None:
        try:
            data = response.json()
        except ValueError as e:
            logger.warning("Scryfall returned a non-JSON body for %s: %s", response.url.path, e)
            return None
        return data if isinstance(data, dict) else None

    async def search_cards(self, query: str) -> list[dict[str, Any]]:
        """
        Run a Scryfall search and return the first page of printings.

        Results are all printings (unique=prints), newest release first.
        A 404 means the query matched nothing.
        """
        response = await self._get(
            "/cards/search",
            {"q": query, "unique": "prints", "order": "released", "dir": "desc"},
        )
        if response is None or response.status_code == 404:
            return []
        if not response.is_success:
            logger.warning("Scryfall search error %d for %r", response.status_code, query)
            return []

        data = self._json(response)
        if data is None or data.get("object") != "list":
            return []
        cards: list[dict[str, Any]] = data.get("data", [])
        return cards

    async def named_fuzzy(self, name: str) -> dict[str, Any] | None:
        """Typo-tolerant lookup of a single card by name."""
        response = await self._get("/cards/named", {"fuzzy": name})
        if response is None or not response.is_success:
            return None

        card = self._json(response)
        if card is None or card.get("object") != "card":
            return None
        return card

    async def list_sets(self) -> list[dict[str, Any]]:
        """Fetch every set Scryfall knows about."""
        response = await self._get("/sets", {})
        if response is None or not response.is_success:
            return []

        data = self._json(response)
        if data is None:
            return []
        sets: list[dict[str, Any]] = data.get("data", [])
        return sets
