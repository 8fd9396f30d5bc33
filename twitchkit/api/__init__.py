"""Twitch OAuth / Helix client."""

from .errors import (
    EmoteTableNotLoadedError,
    MalformedResponseError,
    MissingCredentialError,
    TwitchKitError,
)
from .twitch_api import HELIX_BASE, OAUTH_BASE, TwitchAPIClient

__all__ = [
    "HELIX_BASE",
    "OAUTH_BASE",
    "TwitchAPIClient",
    # Errors
    "TwitchKitError",
    "MissingCredentialError",
    "MalformedResponseError",
    "EmoteTableNotLoadedError",
]
