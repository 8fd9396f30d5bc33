"""Chat message classification and event dispatch.

Each inbound message takes exactly one path:

1. dropped, when it is the bot's own message and ``ignore_self`` is set;
2. a basic command: the canned reply is sent back (channel or whisper);
3. any other command: ``chat_cmd_<name>`` / ``whisper_cmd_<name>`` is emitted;
4. plain chat: word triggers reply, emotes are inlined and ``chat_parsed``
   is emitted. Plain whispers are ignored.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple

from ..api.errors import EmoteTableNotLoadedError
from ..core.config import BotSettings
from ..models.chat import UserState
from .connection import ChatConnection
from .emotes import EmoteTable
from .events import (
    CHAT_PARSED,
    EventRegistry,
    chat_command_event,
    whisper_command_event,
)

LOGGER: logging.Logger = logging.getLogger("Bot")

_NON_WORD_CHARS = re.compile(r"[^\w\s]")
_WORD_BOUNDARY = re.compile(r"\W+")

USER_PLACEHOLDER = "@user"


class ParsedCommand(NamedTuple):
    name: str
    message: str  # text after the command token, stripped


def parse_command(text: str, prefix: str) -> ParsedCommand | None:
    """Split ``<prefix><name> [message]``; None when *text* is not a command."""
    stripped = text.strip()
    if not stripped.startswith(prefix):
        return None

    rest = stripped[len(prefix) :]
    if not rest or rest[0].isspace():
        return None

    parts = rest.split(maxsplit=1)
    return ParsedCommand(parts[0], parts[1].strip() if len(parts) > 1 else "")


def tokenize(message: str) -> list[str]:
    """Words of *message* with punctuation removed."""
    cleaned = _NON_WORD_CHARS.sub("", message)
    return [token for token in _WORD_BOUNDARY.split(cleaned) if token]


def render_reply(template: str, user_state: UserState) -> str:
    return template.replace(USER_PLACEHOLDER, f"@{user_state.name}")


class ChatDispatcher:
    def __init__(
        self,
        connection: ChatConnection,
        settings: BotSettings,
        emotes: EmoteTable,
        *,
        events: EventRegistry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.connection = connection
        self.settings = settings
        self.emotes = emotes
        self.events = events or EventRegistry()
        self.logger = logger or LOGGER
        self._attached = False

    def attach(self) -> None:
        """Subscribe to the connection's raw chat and whisper notifications."""
        if self._attached:
            return
        self.connection.subscribe("chat", self.handle_chat)
        self.connection.subscribe("whisper", self.handle_whisper)
        self._attached = True

        for command in self.unhandled_event_commands():
            self.logger.warning(f"Event command '{command}' has no registered handler")

    def unhandled_event_commands(self) -> list[str]:
        """Configured event commands with neither a chat nor a whisper handler."""
        return [
            command
            for command in self.settings.event_commands
            if not self.events.has_handlers(chat_command_event(command))
            and not self.events.has_handlers(whisper_command_event(command))
        ]

    def is_own_message(self, user_state: UserState, is_self: bool) -> bool:
        return (
            self.settings.ignore_self
            and is_self
            and user_state.username.lower() == self.settings.bot_username.lower()
        )

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def handle_chat(
        self, channel: str, user_state: UserState, message: str, is_self: bool
    ) -> None:
        if self.is_own_message(user_state, is_self):
            return

        command = parse_command(message, self.settings.chat_prefix)
        if command:
            reply = self.settings.basic_commands.get(command.name.lower())
            if reply is not None:
                self.logger.debug(f"Basic command: !{command.name} in {channel}")
                await self.connection.say(channel, render_reply(reply, user_state))
                return

            await self.events.emit(
                chat_command_event(command.name),
                channel,
                user_state.username,
                command.name,
                is_self,
            )
            return

        parsed = await self._scan_words(channel, user_state, message)
        await self.events.emit(CHAT_PARSED, channel, user_state, parsed, is_self)

    async def _scan_words(self, channel: str, user_state: UserState, message: str) -> str:
        """Send word-trigger replies and return *message* with emotes inlined."""
        if not self.emotes.loaded:
            raise EmoteTableNotLoadedError("Emote table must be loaded before handling chat")

        parsed = message
        for token in tokenize(message):
            reply = self.settings.basic_triggers.get(token.lower())
            if reply is not None:
                self.logger.debug(f"Word trigger: '{token}' in {channel}")
                await self.connection.say(channel, render_reply(reply, user_state))

            emote_id = self.emotes.get(token)
            if emote_id is not None:
                # First literal occurrence only
                parsed = parsed.replace(token, self.emotes.image(emote_id), 1)
        return parsed

    # ------------------------------------------------------------------
    # Whispers
    # ------------------------------------------------------------------

    async def handle_whisper(
        self, sender: str, user_state: UserState, message: str, is_self: bool
    ) -> None:
        if self.is_own_message(user_state, is_self):
            return

        command = parse_command(message, self.settings.whisper_prefix)
        if not command:
            return

        reply = self.settings.basic_commands.get(command.name.lower())
        if reply is not None:
            self.logger.debug(f"Basic command: !{command.name} whispered by {sender}")
            await self.connection.whisper(sender, render_reply(reply, user_state))
            return

        await self.events.emit(
            whisper_command_event(command.name),
            user_state,
            command.name,
            command.message,
            is_self,
        )
