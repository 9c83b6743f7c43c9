"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. soniccompass/config/config.yaml: static defaults shipped inside the
                          package (genre dropdown, default city and
                          radius, allowed date windows)
  2. .env file / env vars: read through :class:`Settings`

``load_config()`` reads the YAML file first, then deep-merges the
environment-derived values on top.  The packaged YAML is read through
``importlib.resources``, so it is found from any working directory and
from an installed wheel.
"""

from importlib.resources import files
from pathlib import Path

import yaml

from soniccompass.config.settings import Settings

_PACKAGED_CONFIG = "config.yaml"


def load_config(path: str | Path | None = None, settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to a YAML configuration file. Defaults to the
              ``config.yaml`` packaged with :mod:`soniccompass.config`.
        settings: Settings instance to merge; a fresh one is built when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    yaml_config = _read_yaml(path)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "http": {
            "timeout_seconds": settings.http_timeout_seconds,
            "max_retries": settings.http_max_retries,
            "backoff_seconds": settings.http_backoff_seconds,
        },
        "providers": {
            "geocoding": bool(settings.opencage_api_key),
            "events": bool(settings.ticketmaster_api_key),
            "video_search": bool(settings.youtube_api_key),
            "song_generators": settings.get_available_song_generators(),
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _read_yaml(path: str | Path | None) -> dict:
    """Parse *path*, or the packaged config when no path is given.

    An explicit path that does not exist yields an empty dict.
    """
    if not path:
        text = files("soniccompass.config").joinpath(_PACKAGED_CONFIG).read_text(encoding="utf-8")
        return yaml.safe_load(text) or {}

    config_path = Path(path)
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        return yaml.safe_load(f) or {}
