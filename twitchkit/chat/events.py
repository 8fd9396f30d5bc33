"""Explicit event name -> handler mapping used by the dispatcher.

Event names:
    chat_parsed                (channel, user_state, message, is_self)
    chat_cmd_<command>         (channel, username, command, is_self)
    whisper_cmd_<command>      (user_state, command, command_message, is_self)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

LOGGER = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[Any]]
H = TypeVar("H", bound=Handler)

CHAT_PARSED = "chat_parsed"


def chat_command_event(command: str) -> str:
    return f"chat_cmd_{command.lower()}"


def whisper_command_event(command: str) -> str:
    return f"whisper_cmd_{command.lower()}"


class EventRegistry:
    """Per-bot registry of async event handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def add(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)
        LOGGER.debug(f"Registered handler {getattr(handler, '__name__', handler)!r} for {event}")

    def remove(self, event: str, handler: Handler) -> bool:
        handlers = self._handlers.get(event, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event]
        return True

    def handlers(self, event: str) -> list[Handler]:
        return list(self._handlers.get(event, []))

    def has_handlers(self, event: str) -> bool:
        return bool(self._handlers.get(event))

    @property
    def events(self) -> list[str]:
        return sorted(self._handlers)

    # ------------------------------------------------------------------
    # Decorators
    # ------------------------------------------------------------------

    def on(self, event: str) -> Callable[[H], H]:
        """Register the decorated coroutine function for *event*."""

        def decorator(func: H) -> H:
            self.add(event, func)
            return func

        return decorator

    def chat_command(self, command: str) -> Callable[[H], H]:
        return self.on(chat_command_event(command))

    def whisper_command(self, command: str) -> Callable[[H], H]:
        return self.on(whisper_command_event(command))

    def chat_parsed(self, func: H) -> H:
        self.add(CHAT_PARSED, func)
        return func

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    async def emit(self, event: str, *args: Any) -> int:
        """Await every handler of *event* in registration order.

        Returns the number of handlers invoked. Handler exceptions propagate.
        """
        handlers = self.handlers(event)
        if not handlers:
            LOGGER.debug(f"No handlers for {event}, dropping")
            return 0

        for handler in handlers:
            await handler(*args)
        return len(handlers)
