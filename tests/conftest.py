"""
Pytest configuration
Provides common fixtures: settings, a recording chat connection, an emote table
"""
import json
from collections.abc import Callable

import httpx
import pytest

from twitchkit.chat.dispatcher import ChatDispatcher
from twitchkit.chat.emotes import EmoteTable
from twitchkit.chat.events import EventRegistry
from twitchkit.core.config import BotSettings
from twitchkit.models.chat import UserState


class FakeConnection:
    """In-memory ChatConnection that records what the bot sends."""

    def __init__(self):
        self.handlers = {"chat": [], "whisper": []}
        self.said: list[tuple[str, str]] = []
        self.whispered: list[tuple[str, str]] = []
        self.connected = False
        self.connect_calls = 0
        self.on_connect: Callable[[], None] | None = None

    def subscribe(self, event, handler):
        self.handlers[event].append(handler)

    async def connect(self):
        self.connect_calls += 1
        if self.on_connect:
            self.on_connect()
        self.connected = True

    async def disconnect(self):
        self.connected = False

    async def say(self, channel, text):
        self.said.append((channel, text))

    async def whisper(self, username, text):
        self.whispered.append((username, text))

    async def receive(self, event, source, user_state, text, is_self=False):
        for handler in self.handlers[event]:
            await handler(source, user_state, text, is_self)


def make_settings(**overrides) -> BotSettings:
    values = {
        "client_id": "test_client_id",
        "client_secret": "test_client_secret",
        "bot_username": "TestBot",
        "basic_commands": {"hello": "Hi @user!"},
        "basic_triggers": {"gg": "Well played!"},
        "ignore_self": True,
    }
    values.update(overrides)
    return BotSettings(_env_file=None, **values)


def json_response(payload, status_code=200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(), headers={
        "Content-Type": "application/json"
    })


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def emotes():
    table = EmoteTable(http=None)  # type: ignore[arg-type]
    table.set({"Kappa": {"id": "25"}, "PogChamp": {"id": 88}})
    return table


@pytest.fixture
def events():
    return EventRegistry()


@pytest.fixture
def dispatcher(connection, settings, emotes, events):
    return ChatDispatcher(connection, settings, emotes, events=events)


@pytest.fixture
def bob():
    return UserState(username="bob", display_name="bob", user_id="1001")


@pytest.fixture
def recorder():
    """Async handler that records the arguments of every call."""

    class Recorder:
        def __init__(self):
            self.calls = []

        async def __call__(self, *args):
            self.calls.append(args)

    return Recorder
