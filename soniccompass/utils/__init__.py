"""Utility modules for SonicCompass.

- **errors** -- Domain exception hierarchy rooted at SonicCompassError;
  each flow raises its own subclass and declares its HTTP status.
- **retry** -- The one bounded-retry-with-linear-backoff policy.
- **http_caller** -- A single HTTP request run under that policy.
- **concurrency** -- asyncio semaphore throttling for fan-out lookups.
- **logging** -- structlog setup with a dual console/JSON renderer.
- **timefmt** -- Whole-second UTC timestamps for provider query strings.
"""

from soniccompass.utils.concurrency import throttled_gather
from soniccompass.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    EventSearchError,
    GeocodingError,
    LLMResponseError,
    NotFoundError,
    PartialBatchError,
    PlaylistCreateError,
    ProviderResponseError,
    ProviderUnavailableError,
    SessionNotFoundError,
    SonicCompassError,
    TransientNetworkError,
    UserInputError,
)
from soniccompass.utils.http_caller import RequestSpec, RetryingHttpCaller
from soniccompass.utils.logging import configure_logging, get_logger
from soniccompass.utils.retry import RetryPolicy

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "EventSearchError",
    "GeocodingError",
    "LLMResponseError",
    "NotFoundError",
    "PartialBatchError",
    "PlaylistCreateError",
    "ProviderResponseError",
    "ProviderUnavailableError",
    "RequestSpec",
    "RetryPolicy",
    "RetryingHttpCaller",
    "SessionNotFoundError",
    "SonicCompassError",
    "TransientNetworkError",
    "UserInputError",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]
