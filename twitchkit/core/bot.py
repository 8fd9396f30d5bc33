"""ChatBot: wires settings, the Twitch API client, the chat connection and the dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

import httpx

from ..api.twitch_api import TwitchAPIClient
from ..chat.connection import ChatConnection, TwitchIOConnection
from ..chat.dispatcher import ChatDispatcher
from ..chat.emotes import EmoteTable
from ..chat.events import EventRegistry, Handler
from .config import BotSettings

LOGGER: logging.Logger = logging.getLogger("Bot")

H = TypeVar("H", bound=Handler)


class ChatBot:
    """Chat bot built by composition.

    ``connect()`` loads the emote table before the chat connection is opened,
    so no message is ever dispatched without it.
    """

    def __init__(
        self,
        settings: BotSettings,
        *,
        connection: ChatConnection | None = None,
        api: TwitchAPIClient | None = None,
        http: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or LOGGER

        # Shared HTTP client for the API and the emote registry
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=10.0)

        self.api = api or TwitchAPIClient(
            settings.client_id,
            settings.client_secret or None,
            logger=self.logger,
            http=self._http,
        )
        self.connection: ChatConnection = connection or TwitchIOConnection(settings)
        self.emotes = EmoteTable(
            self._http, url=settings.emote_url, image_url=settings.emote_image_url
        )
        self.events = EventRegistry()
        self.dispatcher = ChatDispatcher(
            self.connection,
            settings,
            self.emotes,
            events=self.events,
            logger=self.logger,
        )

    # ------------------------------------------------------------------
    # Handler registration
    # ------------------------------------------------------------------

    def on(self, event: str) -> Callable[[H], H]:
        return self.events.on(event)

    def chat_command(self, command: str) -> Callable[[H], H]:
        return self.events.chat_command(command)

    def whisper_command(self, command: str) -> Callable[[H], H]:
        return self.events.whisper_command(command)

    def chat_parsed(self, func: H) -> H:
        return self.events.chat_parsed(func)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        await self.emotes.load()
        self.dispatcher.attach()
        await self.connection.connect()
        self.logger.info(f"Bot ready: {len(self.emotes)} emotes, channels={self.settings.channels}")

    async def reconnect(self) -> None:
        """Drop the chat connection and the emote table, then connect again."""
        await self.connection.disconnect()
        self.emotes.clear()
        await self.connect()

    async def disconnect(self) -> None:
        await self.connection.disconnect()

    async def close(self) -> None:
        await self.disconnect()
        await self.api.close()
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> ChatBot:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Outbound shortcuts
    # ------------------------------------------------------------------

    async def say(self, channel: str, text: str) -> None:
        await self.connection.say(channel, text)

    async def whisper(self, username: str, text: str) -> None:
        await self.connection.whisper(username, text)
