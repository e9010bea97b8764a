"""
Custom exception hierarchy for the HN cache layer.

All exceptions inherit from HNCacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class HNCacheError(Exception):
    """Base exception for all HN cache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(HNCacheError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Entity path template without an {id} placeholder
        - Non-positive batch concurrency limit
    """

    pass


class DataFetchError(HNCacheError):
    """Raised when a remote read fails.

    Covers network errors, non-success statuses and malformed payloads.
    Never cached; the next request for the same key fetches again.

    Context should include:
        - url: The URL that was being fetched
        - reason: "network", "status", "malformed" or "timeout"
        - status_code: HTTP status code if applicable
    """

    reason = "network"

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        *,
        url: str | None = None,
        reason: str | None = None,
        status_code: int | None = None,
    ) -> None:
        context = dict(context or {})
        if reason is not None:
            self.reason = reason
        context.setdefault("reason", self.reason)
        if url is not None:
            context.setdefault("url", url)
        if status_code is not None:
            context.setdefault("status_code", status_code)
        super().__init__(message, context)
        self.url = url
        self.status_code = status_code


class FetchTimeoutError(DataFetchError):
    """Raised when a remote read exceeds its time bound.

    Context should include:
        - url: The URL that timed out
        - timeout_seconds: The configured bound
    """

    reason = "timeout"
