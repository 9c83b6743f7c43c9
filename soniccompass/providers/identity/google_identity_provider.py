"""Google identity lookup for OAuth access tokens.

The browser completes the Google sign-in (with the YouTube scope) and hands
the access token to the API.  The userinfo endpoint tells us who it belongs
to and, as a side effect, whether it is still valid.
"""

from __future__ import annotations

import httpx
import structlog

from soniccompass.interfaces.identity_provider import IIdentityProvider
from soniccompass.models.session import Credential
from soniccompass.utils.errors import (
    AuthenticationError,
    ProviderResponseError,
    ProviderUnavailableError,
    TransientNetworkError,
)
from soniccompass.utils.http_caller import RequestSpec, RetryingHttpCaller
from soniccompass.utils.logging import get_logger
from soniccompass.utils.retry import RetryPolicy

_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
_PROVIDER_NAME = "google"


class GoogleIdentityProvider(IIdentityProvider):
    """Resolves a Google OAuth access token into a :class:`Credential`."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._caller = RetryingHttpCaller(
            http_client,
            policy or RetryPolicy(max_retries=0),
            provider_name=_PROVIDER_NAME,
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def resolve(self, access_token: str) -> Credential:
        token = (access_token or "").strip()
        if not token:
            raise AuthenticationError(
                message="An access token is required to sign in",
                provider_name=_PROVIDER_NAME,
            )

        spec = RequestSpec(
            url=_USERINFO_URL,
            headers={"Authorization": f"Bearer {token}"},
        )
        try:
            profile = await self._caller.call(spec, label="google_userinfo")
        except TransientNetworkError as exc:
            if exc.status in (400, 401, 403):
                raise AuthenticationError(
                    message="Google rejected the access token",
                    provider_name=_PROVIDER_NAME,
                ) from exc
            raise ProviderUnavailableError(
                message=f"Could not reach Google to verify sign-in: {exc.message}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except ProviderResponseError as exc:
            raise ProviderUnavailableError(
                message=exc.message,
                provider_name=_PROVIDER_NAME,
            ) from exc

        if not isinstance(profile, dict):
            profile = {}
        credential = Credential(
            display_name=profile.get("name") or profile.get("email") or "",
            email=profile.get("email") or "",
            bearer_token=token,
        )
        self._logger.info("identity_resolved", email=credential.email)
        return credential

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
