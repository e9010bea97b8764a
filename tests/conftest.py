"""
Pytest configuration and fixtures for hn-cache tests.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Generator
from unittest.mock import patch

import httpx
import orjson
import pytest

from hncache.config import Settings, clear_settings_cache
from hncache.data.fetcher import EntityFetcher

BASE_URL = "https://hn.test/v0"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "HN_API_BASE_URL": BASE_URL,
        "LISTING_TTL_SECONDS": "120",
        "ENTITY_TTL_SECONDS": "600",
        "SWEEP_INTERVAL_SECONDS": "60",
        "BATCH_CONCURRENCY": "4",
        "FETCH_TIMEOUT_SECONDS": "2.5",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def settings() -> Settings:
    """Provide settings pointing at the fake API, ignoring any .env file."""
    return Settings(
        _env_file=None,
        HN_API_BASE_URL=BASE_URL,
        BATCH_CONCURRENCY=12,
        FETCH_TIMEOUT_SECONDS=1.0,
    )


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=orjson.dumps(payload))


@pytest.fixture
def fake_api() -> dict[str, Any]:
    """Upstream data served by make_transport: listing plus items by id."""
    return {
        "listing": [101, 102, 103, 104, 105],
        "items": {
            101: {"id": 101, "type": "story", "title": "First", "kids": [201, 202]},
            102: {"id": 102, "type": "story", "title": "Second", "url": "https://a.example"},
            103: {"id": 103, "type": "story", "title": "Third"},
            104: {"id": 104, "type": "story", "title": "Fourth"},
            105: {"id": 105, "type": "story", "title": "Fifth"},
            201: {"id": 201, "type": "comment", "parent": 101, "kids": [301]},
            202: {"id": 202, "type": "comment", "parent": 101, "deleted": True},
            301: {"id": 301, "type": "comment", "parent": 201},
        },
    }


@pytest.fixture
def make_transport(
    fake_api: dict[str, Any],
) -> Callable[..., tuple[httpx.MockTransport, list[str]]]:
    """Build a MockTransport over fake_api that records requested paths."""

    def factory(
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> tuple[httpx.MockTransport, list[str]]:
        requested: list[str] = []

        def default_handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path == "/v0/topstories.json":
                return json_response(fake_api["listing"])
            if path.startswith("/v0/item/"):
                item_id = int(path.rsplit("/", 1)[-1].removesuffix(".json"))
                return json_response(fake_api["items"].get(item_id))
            return httpx.Response(404)

        def record(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            return (handler or default_handler)(request)

        return httpx.MockTransport(record), requested

    return factory


@pytest.fixture
def fetcher_factory(
    settings: Settings,
) -> Callable[[httpx.AsyncBaseTransport], EntityFetcher]:
    def factory(transport: httpx.AsyncBaseTransport) -> EntityFetcher:
        return EntityFetcher.from_settings(settings, transport=transport)

    return factory


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
