"""Configuration module: exports Settings and load_config."""

from soniccompass.config.loader import load_config
from soniccompass.config.settings import Settings

__all__ = ["Settings", "load_config"]
