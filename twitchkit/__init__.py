"""twitchkit: command dispatch and Helix API helpers for Twitch chat bots."""

from .api import TwitchAPIClient
from .chat import ChatDispatcher, EmoteTable, EventRegistry
from .core.bot import ChatBot
from .core.config import BotSettings, get_settings
from .models import AccessToken, TokenPair, UserState

__version__ = "0.3.0"

__all__ = [
    "AccessToken",
    "BotSettings",
    "ChatBot",
    "ChatDispatcher",
    "EmoteTable",
    "EventRegistry",
    "TokenPair",
    "TwitchAPIClient",
    "UserState",
    "get_settings",
]
