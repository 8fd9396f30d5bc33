"""Chat connection seam and its twitchio-backed implementation.

The dispatcher only needs four capabilities from a chat client:
connect/disconnect, say, whisper, and raw ``chat`` / ``whisper``
notifications carrying ``(channel_or_sender, user_state, text, is_self)``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import twitchio

from ..core.config import BotSettings
from ..core.subscriptions import get_chat_subscriptions
from ..models.chat import UserState

LOGGER: logging.Logger = logging.getLogger("Bot")

RawHandler = Callable[[str, UserState, str, bool], Awaitable[Any]]

RAW_EVENTS = ("chat", "whisper")


class ChatConnection(Protocol):
    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def say(self, channel: str, text: str) -> None: ...

    async def whisper(self, username: str, text: str) -> None: ...

    def subscribe(self, event: str, handler: RawHandler) -> None: ...


def user_state_from_chatter(chatter: Any, message_type: str = "chat") -> UserState:
    """Build a UserState from a twitchio Chatter / PartialUser."""
    badges: dict[str, str] = {}
    for badge in getattr(chatter, "badges", None) or []:
        set_id = getattr(badge, "set_id", None)
        if set_id:
            badges[set_id] = str(getattr(badge, "id", ""))

    return UserState(
        username=(getattr(chatter, "name", None) or "").lower(),
        display_name=getattr(chatter, "display_name", None),
        user_id=getattr(chatter, "id", None),
        message_type=message_type,
        moderator=bool(getattr(chatter, "moderator", False)),
        subscriber=bool(getattr(chatter, "subscriber", False)),
        vip=bool(getattr(chatter, "vip", False)),
        broadcaster=bool(getattr(chatter, "broadcaster", False)),
        badges=badges,
        raw=chatter,
    )


class TwitchIOConnection:
    """ChatConnection over a ``twitchio.Client`` using EventSub websockets.

    The client is held, not subclassed; its listeners translate twitchio
    payloads into raw ``chat`` / ``whisper`` notifications.
    """

    def __init__(self, settings: BotSettings, client: twitchio.Client | None = None) -> None:
        if not settings.bot_id:
            raise ValueError("bot_id is required for the twitchio chat connection")

        self.settings = settings
        self._owns_client = client is None
        self.client = client or self._new_client()
        self._handlers: dict[str, list[RawHandler]] = {event: [] for event in RAW_EVENTS}
        # login -> PartialUser, for channels joined and users who whispered us
        self._users: dict[str, twitchio.PartialUser] = {}
        self._listening = False
        self._connected = False

    def _new_client(self) -> twitchio.Client:
        return twitchio.Client(
            client_id=self.settings.client_id,
            client_secret=self.settings.client_secret,
            bot_id=self.settings.bot_id,
        )

    @property
    def bot_id(self) -> str:
        return self.settings.bot_id

    def subscribe(self, event: str, handler: RawHandler) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown chat event '{event}', expected one of {RAW_EVENTS}")
        self._handlers[event].append(handler)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        if self._connected:
            return

        if not self._listening:
            self.client.add_listener(self._on_message, event="event_message")
            self.client.add_listener(self._on_whisper, event="event_message_whisper")
            self._listening = True

        await self.client.login()
        if self.settings.bot_token:
            await self.client.add_token(self.settings.bot_token, self.settings.bot_refresh_token)

        channel_ids: list[str] = []
        if self.settings.channels:
            users = await self.client.fetch_users(logins=self.settings.channels)
            for user in users:
                if user.name:
                    self._users[user.name.lower()] = user
                channel_ids.append(user.id)

        for sub in get_chat_subscriptions(channel_ids, self.bot_id):
            await self.client.subscribe_websocket(sub, token_for=self.bot_id)

        self._connected = True
        LOGGER.info(f"Connected to chat as {self.settings.bot_username or self.bot_id}")

    async def disconnect(self) -> None:
        if not self._connected:
            return
        await self.client.close()
        self._connected = False
        if self._owns_client:
            # A closed twitchio client cannot log in again
            self.client = self._new_client()
            self._listening = False
        LOGGER.info("Disconnected from chat")

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def _resolve(self, login: str) -> twitchio.PartialUser:
        key = login.lstrip("#").lower()
        user = self._users.get(key)
        if user is None:
            users = await self.client.fetch_users(logins=[key])
            if not users:
                raise LookupError(f"Unknown Twitch user: {login}")
            user = users[0]
            self._users[key] = user
        return user

    async def say(self, channel: str, text: str) -> None:
        broadcaster = await self._resolve(channel)
        await broadcaster.send_message(message=text, sender=self.bot_id, token_for=self.bot_id)

    async def whisper(self, username: str, text: str) -> None:
        recipient = await self._resolve(username)
        bot = self.client.create_partialuser(user_id=self.bot_id)
        await bot.send_whisper(to_user=recipient, message=text)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    async def _emit(
        self, event: str, source: str, state: UserState, text: str, is_self: bool
    ) -> None:
        for handler in list(self._handlers[event]):
            await handler(source, state, text, is_self)

    async def _on_message(self, payload: twitchio.ChatMessage) -> None:
        broadcaster = payload.broadcaster
        channel = (broadcaster.name or "").lower()
        if channel:
            self._users.setdefault(channel, broadcaster)

        state = user_state_from_chatter(payload.chatter, "chat")
        is_self = state.user_id == self.bot_id
        LOGGER.debug(f"[{state.username}#{channel}]: {payload.text}")
        await self._emit("chat", channel, state, payload.text, is_self)

    async def _on_whisper(self, payload: Any) -> None:
        sender = payload.sender
        state = user_state_from_chatter(sender, "whisper")
        if state.username:
            self._users.setdefault(state.username, sender)

        is_self = state.user_id == self.bot_id
        LOGGER.debug(f"[whisper {state.username}]: {payload.text}")
        await self._emit("whisper", state.username, state, payload.text, is_self)
