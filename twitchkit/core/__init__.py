"""Core modules for twitchkit."""

from .config import (
    EMOTE_IMAGE_URL,
    EMOTE_REGISTRY_URL,
    BotSettings,
    get_settings,
)
from .logging import setup_logging

__all__ = [
    # Settings
    "BotSettings",
    "get_settings",
    # Constants
    "EMOTE_IMAGE_URL",
    "EMOTE_REGISTRY_URL",
    # Setup functions
    "setup_logging",
]
