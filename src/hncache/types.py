"""
Core types for the HN cache layer.

This module defines the data structures shared by the cache, the batch
executor and the client facade:
- Cache keys for the listing and for entities
- Frozen dataclasses for immutable values (CacheEntry, BatchResult, Item)
- CacheStats snapshot for observability
- Helper functions for ID generation
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from uuid6 import uuid7

CacheKey = str
CacheState = Literal["hit", "miss", "wait"]

LISTING_KEY: CacheKey = "top-listing"
ENTITY_KEY_PREFIX = "entity:"


def entity_key(entity_id: int | str) -> CacheKey:
    """Cache key of one entity."""
    return f"{ENTITY_KEY_PREFIX}{entity_id}"


def is_entity_key(key: CacheKey) -> bool:
    return key.startswith(ENTITY_KEY_PREFIX)


def generate_id(prefix: str = "") -> str:
    """Generate a time-ordered unique ID using UUID7.

    Args:
        prefix: Optional prefix for the ID (e.g., "batch")

    Returns:
        A unique ID string, optionally prefixed.
    """
    uid = str(uuid7())
    return f"{prefix}_{uid}" if prefix else uid


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the monotonic time it stops being fresh."""

    value: Any
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one position in a batch.

    A value of None with no error means the entity does not exist upstream.
    """

    key: Any
    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def found(self) -> bool:
        return self.error is None and self.value is not None


@dataclass
class CacheStats:
    """Snapshot of cache state. Observability only.

    Attributes:
        cached_entity_count: Entity entries currently stored, including
            expired ones not yet dropped by a read or a sweep
        listing_served_from_cache: Whether the last listing read was a cache hit
        hits: Reads served from a fresh entry
        misses: Reads that led a remote fetch
        coalesced: Reads that waited on another caller's fetch
        failures: Remote fetches that failed
        in_flight: Remote fetches currently outstanding
        sweeps: Sweeper passes run
        swept_entries: Entries removed by the sweeper
    """

    cached_entity_count: int = 0
    listing_served_from_cache: bool = False
    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    failures: int = 0
    in_flight: int = 0
    sweeps: int = 0
    swept_entries: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Item:
    """Normalized Hacker News item.

    Stories, comments, jobs and polls share this shape; fields the upstream
    record does not carry stay None.
    """

    id: int | None = None
    type: str | None = None
    by: str | None = None
    time: int | None = None
    title: str | None = None
    url: str | None = None
    text: str | None = None
    score: int | None = None
    parent: int | None = None
    descendants: int | None = None
    kids: tuple[int, ...] = ()
    deleted: bool = False
    dead: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Item:
        """Build an Item from a decoded entity payload."""
        return cls(
            id=payload.get("id"),
            type=payload.get("type"),
            by=payload.get("by"),
            time=payload.get("time"),
            title=payload.get("title"),
            # Empty strings upstream mean "no value"
            url=payload.get("url") or None,
            text=payload.get("text") or None,
            score=payload.get("score"),
            parent=payload.get("parent"),
            descendants=payload.get("descendants"),
            kids=tuple(payload.get("kids") or ()),
            deleted=bool(payload.get("deleted", False)),
            dead=bool(payload.get("dead", False)),
        )

    @property
    def has_url(self) -> bool:
        """Self posts (Ask HN, polls) carry text instead of a link."""
        return self.url is not None

    @property
    def visible(self) -> bool:
        return not (self.deleted or self.dead)


@dataclass
class CommentNode:
    """One item in a loaded comment tree."""

    item: Item
    children: list[CommentNode] = field(default_factory=list)

    def walk(self):
        """Yield this node and all descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    @property
    def size(self) -> int:
        return sum(1 for _ in self.walk())
