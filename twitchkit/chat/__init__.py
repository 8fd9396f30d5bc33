"""Chat connection, dispatcher and emote table."""

from .connection import ChatConnection, TwitchIOConnection
from .dispatcher import ChatDispatcher, ParsedCommand, parse_command, tokenize
from .emotes import EmoteTable
from .events import CHAT_PARSED, EventRegistry, chat_command_event, whisper_command_event

__all__ = [
    "ChatConnection",
    "TwitchIOConnection",
    "ChatDispatcher",
    "ParsedCommand",
    "parse_command",
    "tokenize",
    "EmoteTable",
    "EventRegistry",
    "CHAT_PARSED",
    "chat_command_event",
    "whisper_command_event",
]
