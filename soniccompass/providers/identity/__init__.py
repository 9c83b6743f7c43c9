from soniccompass.providers.identity.google_identity_provider import GoogleIdentityProvider

__all__ = ["GoogleIdentityProvider"]
