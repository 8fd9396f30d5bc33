"""Shared data models for twitchkit."""

from .chat import UserState
from .token import AccessToken, TokenPair

__all__ = [
    "AccessToken",
    "TokenPair",
    "UserState",
]
