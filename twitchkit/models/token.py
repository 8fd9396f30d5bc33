"""Data models for OAuth tokens."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class AccessToken:
    """App access token with its expiry on the monotonic clock."""

    token: str
    expires_at: float | None = None  # None = Twitch did not report a lifetime
    obtained_at: float = field(default_factory=time.monotonic)

    def is_fresh(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return True
        return (time.monotonic() if now is None else now) < self.expires_at


@dataclass
class TokenPair:
    """Result of a user token refresh."""

    access_token: str
    refresh_token: str | None = None
