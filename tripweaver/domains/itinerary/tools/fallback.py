"""
TripWeaver - Fallback Support
Error classification, provider health tracking and the guaranteed
placeholder photo used as the last waterfall tier.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from urllib.parse import quote

from tripweaver.core.config import settings
from tripweaver.domains.itinerary.models import PhotoSource
from tripweaver.domains.itinerary.schemas import PhotoResult
from tripweaver.domains.itinerary.tools.base import (
    AuthenticationError,
    ProviderTimeoutError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


# ============ Error Classification ============


class ToolErrorType:
    """Classification of provider errors for diagnostics."""

    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    AUTHENTICATION = "authentication"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NETWORK_ERROR = "network_error"
    INVALID_RESPONSE = "invalid_response"
    UNKNOWN = "unknown"


def classify_error(error: Exception) -> str:
    """Classify an exception into a ToolErrorType."""
    if isinstance(error, RateLimitError):
        return ToolErrorType.RATE_LIMIT
    if isinstance(error, (ProviderTimeoutError, asyncio.TimeoutError)):
        return ToolErrorType.TIMEOUT
    if isinstance(error, AuthenticationError):
        return ToolErrorType.AUTHENTICATION

    error_msg = str(error).lower()
    if "rate" in error_msg or "limit" in error_msg or "429" in error_msg:
        return ToolErrorType.RATE_LIMIT
    elif "timeout" in error_msg or "timed out" in error_msg:
        return ToolErrorType.TIMEOUT
    elif "401" in error_msg or "403" in error_msg or "auth" in error_msg:
        return ToolErrorType.AUTHENTICATION
    elif "503" in error_msg or "502" in error_msg or "unavailable" in error_msg:
        return ToolErrorType.SERVICE_UNAVAILABLE
    elif "connection" in error_msg or "network" in error_msg:
        return ToolErrorType.NETWORK_ERROR
    elif "json" in error_msg or "parse" in error_msg:
        return ToolErrorType.INVALID_RESPONSE
    else:
        return ToolErrorType.UNKNOWN


# ============ Placeholder Photos ============


def placeholder_photo(seed: str) -> PhotoResult:
    """Deterministic seeded placeholder. Always succeeds, no network."""
    key = quote((seed or "").strip() or "travel", safe="")
    base = settings.PLACEHOLDER_BASE_URL.rstrip("/")
    return PhotoResult(
        url=f"{base}/{key}/800/600",
        thumb=f"{base}/{key}/400/300",
        source=PhotoSource.PLACEHOLDER,
    )


# ============ Error Status Tracking ============


class ToolHealthStatus:
    """Track health status of external providers."""

    def __init__(
        self,
        threshold: int | None = None,
        cooldown_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.threshold = threshold or settings.PROVIDER_FAILURE_THRESHOLD
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._status: dict[str, dict] = {}

    def _entry(self, tool_name: str) -> dict:
        if tool_name not in self._status:
            self._status[tool_name] = {"failures": 0, "successes": 0, "last_error": None}
        return self._status[tool_name]

    def record_success(self, tool_name: str) -> None:
        """Record successful provider call."""
        entry = self._entry(tool_name)
        entry["successes"] += 1
        entry["failures"] = 0  # Reset consecutive failures

    def record_failure(self, tool_name: str, error: Exception) -> None:
        """Record failed provider call."""
        entry = self._entry(tool_name)
        entry["failures"] += 1
        entry["failed_at"] = self._clock()
        entry["last_error"] = {
            "type": classify_error(error),
            "message": str(error),
            "timestamp": datetime.now(UTC).isoformat(),
        }

    def should_skip(self, tool_name: str) -> bool:
        """
        Check if a provider has failed too many times in a row.

        After the cooldown one call is let through again; its outcome
        either closes the breaker or restarts the cooldown.
        """
        entry = self._status.get(tool_name)
        if not entry or entry["failures"] < self.threshold:
            return False
        return self._clock() - entry.get("failed_at", 0.0) < self.cooldown_seconds

    def get_status(self, tool_name: str) -> dict:
        """Get current status for a provider."""
        return self._status.get(tool_name, {"failures": 0, "successes": 0, "last_error": None})

    def reset(self) -> None:
        self._status.clear()


# Global health tracker
tool_health = ToolHealthStatus()
