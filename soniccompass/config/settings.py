"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# This class reads configuration from TWO sources (in priority order):
#
#   1. **Environment variables**: e.g., TICKETMASTER_API_KEY=abc123
#   2. **.env file**: key=value lines in the project root .env file
#
# Field name `ticketmaster_api_key` maps to env var `TICKETMASTER_API_KEY`.
#
# Empty-string keys mean "not configured".  Nothing is validated at
# startup: each provider raises ConfigurationError the first time it is
# asked to do work without its key.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SonicCompass application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # === Concert discovery ===
    ticketmaster_api_key: str = ""
    opencage_api_key: str = ""

    # === Song generation ===
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_text_model: str = ""

    # === YouTube (public search key; playlist writes use the user's OAuth token) ===
    youtube_api_key: str = ""

    # === HTTP behaviour ===
    http_timeout_seconds: float = 20.0
    http_max_retries: int = 2
    http_backoff_seconds: float = 1.0
    max_concurrent_video_lookups: int = 5

    # === Sessions (in memory; idle ones expire) ===
    session_max_count: int = 1000
    session_ttl_seconds: int = 21600

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = ""

    def get_available_song_generators(self) -> list[str]:
        """Return generative providers that have non-empty API keys, in priority order."""
        providers: list[str] = []
        if self.gemini_api_key:
            providers.append("gemini")
        if self.openai_api_key:
            providers.append("openai")
        return providers

    def get_cors_origins(self) -> list[str]:
        """Split the comma-separated ``CORS_ORIGINS`` value; empty means allow all."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
