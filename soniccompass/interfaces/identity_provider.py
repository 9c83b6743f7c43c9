"""Abstract base class for identity providers.

The sign-in flow itself happens in the browser (Google OAuth with the
YouTube scope).  The backend receives the resulting access token and asks
the identity provider who it belongs to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from soniccompass.models.session import Credential


# Concrete implementation: GoogleIdentityProvider (soniccompass/providers/identity/)
class IIdentityProvider(ABC):
    """Contract for turning an OAuth access token into a :class:`Credential`."""

    @abstractmethod
    async def resolve(self, access_token: str) -> Credential:
        """Look up the user behind *access_token*.

        Raises
        ------
        soniccompass.utils.errors.AuthenticationError
            If the token is empty, invalid or expired.
        soniccompass.utils.errors.ProviderUnavailableError
            If the identity service cannot be reached.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"google"``."""
