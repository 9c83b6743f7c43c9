"""Custom exception hierarchy for SonicCompass.

All application exceptions inherit from :class:`SonicCompassError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "opencage", "ticketmaster", "youtube") caused the
failure.

The hierarchy is organized by flow:

    SonicCompassError  (base -- catch-all for any SonicCompass error)
    +-- ConfigurationError        (missing API key / credential setting)
    +-- UserInputError            (nothing to act on: no artists, no selection)
    +-- NotFoundError             (place / session / concert unresolved)
    |   +-- SessionNotFoundError
    +-- TransientNetworkError     (retried; surfaced after exhaustion)
    +-- GeocodingError            (geocoder gave up after retries)
    +-- EventSearchError          (event search gave up after retries)
    +-- ProviderResponseError     (malformed / unexpected provider JSON)
    |   +-- LLMResponseError
    +-- PlaylistCreateError       (remote playlist could not be created)
    +-- AuthenticationError       (no bearer token, or the token was rejected)
    +-- ProviderUnavailableError  (external service down / unreachable)

:class:`PartialBatchError` is the odd one out: it is never raised.  The
playlist publisher returns it as a warning value describing the items that
could not be added while the playlist itself was created.

Each class declares the HTTP status the API layer maps it to, so the
middleware does not need its own lookup table.
"""

from __future__ import annotations


class SonicCompassError(Exception):
    """Base exception for all SonicCompass errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[opencage] HTTP 403``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Caller-side errors
# ---------------------------------------------------------------------------

class ConfigurationError(SonicCompassError):
    """Raised at first use when a required key or setting is missing."""

    status_code = 503

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UserInputError(SonicCompassError):
    """Raised when an action has nothing to work on (fail fast, no network)."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(SonicCompassError):
    """Raised when a place, video, song, or in-memory record cannot be resolved."""

    status_code = 404

    def __init__(
        self,
        message: str = "Not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SessionNotFoundError(NotFoundError):
    """Raised when a session id is unknown to the in-memory session store."""

    def __init__(self, session_id: str) -> None:
        super().__init__(message=f"Session not found: {session_id}")


class AuthenticationError(SonicCompassError):
    """Raised when a bearer credential is missing or rejected by the provider."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class TransientNetworkError(SonicCompassError):
    """Raised for network failures and non-success HTTP statuses.

    :class:`~soniccompass.utils.retry.RetryPolicy` retries only this error;
    once attempts are exhausted it re-raises it with the last failure's
    message.
    """

    status_code = 502

    def __init__(
        self,
        message: str = "Network request failed",
        provider_name: str | None = None,
        status: int | None = None,
    ) -> None:
        self._status = status
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status(self) -> int | None:
        """HTTP status of the failed response, or ``None`` for transport errors."""
        return self._status


class GeocodingError(SonicCompassError):
    """Raised when the geocoder exhausts its retries."""

    status_code = 502

    def __init__(
        self,
        message: str = "Geocoding failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EventSearchError(SonicCompassError):
    """Raised when the event search exhausts its retries."""

    status_code = 502

    def __init__(
        self,
        message: str = "Event search failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderResponseError(SonicCompassError):
    """Raised when a provider answers with malformed or unexpected JSON."""

    status_code = 502

    def __init__(
        self,
        message: str = "Unexpected provider response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMResponseError(ProviderResponseError):
    """Raised when the generative provider's song list cannot be used."""

    def __init__(
        self,
        message: str = "LLM response was not as expected",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PlaylistCreateError(SonicCompassError):
    """Raised when the remote playlist resource cannot be created."""

    status_code = 502

    def __init__(
        self,
        message: str = "Failed to create playlist",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(SonicCompassError):
    """Raised when an external service is unreachable."""

    status_code = 503

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Partial success
# ---------------------------------------------------------------------------

class PartialBatchError(SonicCompassError):
    """Describes playlist items that could not be added.

    Returned (not raised) by ``PublishResult.warning()``; the batch as a
    whole still succeeded because the playlist exists.
    """

    status_code = 207

    def __init__(
        self,
        failed_count: int,
        total_count: int,
        provider_name: str | None = None,
    ) -> None:
        self._failed_count = failed_count
        self._total_count = total_count
        super().__init__(
            message=f"{failed_count} of {total_count} songs could not be added",
            provider_name=provider_name,
        )

    @property
    def failed_count(self) -> int:
        return self._failed_count

    @property
    def total_count(self) -> int:
        return self._total_count
