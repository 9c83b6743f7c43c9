"""One HTTP request, retried under a :class:`RetryPolicy`.

Providers describe the request they want as a :class:`RequestSpec` and hand
it to :meth:`RetryingHttpCaller.call`.  The caller owns no per-call state,
so any number of calls may be in flight on the shared ``httpx.AsyncClient``.

Failure classification:

* ``httpx.HTTPError`` (connect/read timeouts, resets) and any non-2xx
  status become :class:`TransientNetworkError` and are retried.
* A 2xx body that is not JSON raises :class:`ProviderResponseError`
  immediately; a retry would return the same body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from soniccompass.utils.errors import ProviderResponseError, TransientNetworkError
from soniccompass.utils.logging import get_logger
from soniccompass.utils.retry import RetryPolicy

_ERROR_BODY_PREVIEW = 300


@dataclass(frozen=True)
class RequestSpec:
    """A fully-formed request: method, URL, query, headers and JSON body."""

    url: str
    method: str = "GET"
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    json_body: Any | None = None


class RetryingHttpCaller:
    """Issue a request and retry transient failures.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    policy:
        Retry bounds and backoff; defaults to 2 retries with 1 s / 2 s waits.
    provider_name:
        Label stamped onto raised errors and log events.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        policy: RetryPolicy | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._http = http_client
        self._policy = policy or RetryPolicy()
        self._provider_name = provider_name
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def call(self, spec: RequestSpec, label: str = "request") -> Any:
        """Perform *spec* with retries and return the parsed JSON body."""
        return await self._policy.run(lambda: self._attempt(spec), label=label)

    async def _attempt(self, spec: RequestSpec) -> Any:
        try:
            response = await self._http.request(
                spec.method,
                spec.url,
                params=spec.params or None,
                headers=spec.headers or None,
                json=spec.json_body,
            )
        except httpx.HTTPError as exc:
            raise TransientNetworkError(
                message=f"{type(exc).__name__}: {exc}",
                provider_name=self._provider_name,
            ) from exc

        if not response.is_success:
            raise TransientNetworkError(
                message=(
                    f"HTTP {response.status_code}: "
                    f"{response.text[:_ERROR_BODY_PREVIEW]}"
                ),
                provider_name=self._provider_name,
                status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderResponseError(
                message="Response body is not valid JSON",
                provider_name=self._provider_name,
            ) from exc
