"""
Remote reads against the Hacker News Firebase API.

One attempt per call, bounded by a timeout. No caching here: the
CacheCoordinator decides when a read is needed.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import orjson

from hncache.config import Settings
from hncache.exceptions import ConfigurationError, DataFetchError, FetchTimeoutError
from hncache.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://hacker-news.firebaseio.com/v0"
DEFAULT_TIMEOUT = 8.0


class EntityFetcher:
    """Client for the listing and entity endpoints.

    Responses decode to plain JSON values; a JSON null means the listing
    is empty or the entity does not exist, and is returned as None.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "hn-cache/0.1",
        listing_path: str = "topstories.json",
        entity_path: str = "item/{id}.json",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            base_url: API base URL without trailing slash.
            timeout: Seconds allowed for one whole request.
            user_agent: User-Agent header value.
            listing_path: Listing endpoint path relative to base_url.
            entity_path: Entity path template with an {id} placeholder.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        if timeout <= 0:
            raise ConfigurationError(
                "Fetch timeout must be positive", context={"timeout": timeout}
            )
        if "{id}" not in entity_path:
            raise ConfigurationError(
                "Entity path needs an {id} placeholder",
                context={"entity_path": entity_path},
            )
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.listing_path = listing_path.lstrip("/")
        self.entity_path = entity_path.lstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> EntityFetcher:
        return cls(
            base_url=settings.HN_API_BASE_URL,
            timeout=settings.FETCH_TIMEOUT_SECONDS,
            user_agent=settings.USER_AGENT,
            listing_path=settings.HN_LISTING_PATH,
            entity_path=settings.HN_ENTITY_PATH,
            transport=transport,
        )

    @property
    def listing_url(self) -> str:
        return f"{self.base_url}/{self.listing_path}"

    def entity_url(self, entity_id: int | str) -> str:
        return f"{self.base_url}/{self.entity_path.format(id=entity_id)}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with proper headers."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_json(self, url: str) -> Any:
        """GET url once and decode the JSON body.

        Raises:
            FetchTimeoutError: If the request exceeds the timeout.
            DataFetchError: On transport errors, non-2xx statuses or bad JSON.
        """
        client = await self._get_client()

        try:
            response = await asyncio.wait_for(client.get(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise FetchTimeoutError(
                f"Timed out fetching {url}",
                context={"timeout_seconds": self.timeout},
                url=url,
            ) from e
        except httpx.HTTPError as e:
            raise DataFetchError(
                f"Failed to fetch {url}",
                context={"error": str(e)},
                url=url,
                reason="network",
            ) from e

        if not response.is_success:
            raise DataFetchError(
                f"Unexpected status {response.status_code} from {url}",
                url=url,
                reason="status",
                status_code=response.status_code,
            )

        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise DataFetchError(
                f"Malformed JSON from {url}",
                context={"error": str(e)},
                url=url,
                reason="malformed",
            ) from e

    async def fetch_listing(self) -> list[int] | None:
        """Fetch the ordered top listing (freshest first).

        Returns:
            Entity IDs, or None if the endpoint returned null.
        """
        url = self.listing_url
        data = await self.fetch_json(url)
        if data is None:
            logger.warning("Listing endpoint returned null", url=url)
            return None
        if not isinstance(data, list) or not all(
            isinstance(i, int) and not isinstance(i, bool) for i in data
        ):
            raise DataFetchError(
                "Listing is not a list of integer IDs",
                context={"payload_type": type(data).__name__},
                url=url,
                reason="malformed",
            )
        logger.debug("Fetched listing", count=len(data))
        return data

    async def fetch_entity(self, entity_id: int) -> dict[str, Any] | None:
        """Fetch one entity record.

        Returns:
            The decoded record, or None if the entity does not exist.
        """
        url = self.entity_url(entity_id)
        data = await self.fetch_json(url)
        if data is None:
            logger.debug("Entity not found", entity_id=entity_id)
            return None
        if not isinstance(data, dict):
            raise DataFetchError(
                "Entity payload is not an object",
                context={"entity_id": entity_id, "payload_type": type(data).__name__},
                url=url,
                reason="malformed",
            )
        return data
