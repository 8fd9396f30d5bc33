"""Data models for inbound chat messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class UserState:
    """Sender information attached to every chat or whisper message."""

    username: str
    display_name: str | None = None
    user_id: str | None = None
    message_type: str = "chat"  # 'chat' | 'whisper'
    moderator: bool = False
    subscriber: bool = False
    vip: bool = False
    broadcaster: bool = False
    badges: dict[str, str] = field(default_factory=dict)
    raw: Any = field(default=None, repr=False, compare=False)

    @property
    def name(self) -> str:
        """Display name when Twitch sent one, login otherwise."""
        return self.display_name or self.username
