"""Emote table fetched once per connection from the emote registry."""

from __future__ import annotations

import html
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..api.errors import EmoteTableNotLoadedError, MalformedResponseError
from ..core.config import EMOTE_IMAGE_URL, EMOTE_REGISTRY_URL

LOGGER = logging.getLogger(__name__)


def _emote_id(entry: Any) -> str | None:
    """Registry entries are either ``{"id": ...}`` objects or bare ids."""
    if isinstance(entry, Mapping):
        value = entry.get("id")
    else:
        value = entry
    if value is None or isinstance(value, (Mapping, list)):
        return None
    return str(value)


class EmoteTable:
    """Name -> emote id mapping plus the inline image template.

    ``load()`` performs a single GET; the result is kept until ``clear()``.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        url: str = EMOTE_REGISTRY_URL,
        image_url: str = EMOTE_IMAGE_URL,
    ) -> None:
        self._http = http
        self.url = url
        self.image_url = image_url
        self._emotes: dict[str, str] | None = None

    @property
    def loaded(self) -> bool:
        return self._emotes is not None

    def __len__(self) -> int:
        return len(self._emotes or {})

    async def load(self) -> dict[str, str]:
        """Fetch the registry unless it is already loaded."""
        if self._emotes is not None:
            return self._emotes

        LOGGER.debug(f"Fetching emote table from {self.url}")
        response = await self._http.get(self.url)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, Mapping):
            raise MalformedResponseError(
                f"Emote registry returned {type(payload).__name__}, expected an object"
            )

        emotes: dict[str, str] = {}
        for name, entry in payload.items():
            emote_id = _emote_id(entry)
            if emote_id is None:
                LOGGER.debug(f"Skipping emote {name!r} without an id")
                continue
            emotes[name] = emote_id

        self._emotes = emotes
        LOGGER.info(f"Loaded {len(emotes)} emotes")
        return emotes

    def set(self, emotes: Mapping[str, Any]) -> None:
        """Install an already-known table without touching the network."""
        self._emotes = {
            name: emote_id
            for name, entry in emotes.items()
            if (emote_id := _emote_id(entry)) is not None
        }

    def clear(self) -> None:
        self._emotes = None

    def get(self, name: str) -> str | None:
        if self._emotes is None:
            raise EmoteTableNotLoadedError("Emote table must be loaded before handling chat")
        return self._emotes.get(name)

    def image(self, emote_id: str) -> str:
        """Inline image reference for an emote id."""
        src = html.escape(self.image_url.format(id=emote_id), quote=True)
        return f'<img class="emote" src="{src}">'
