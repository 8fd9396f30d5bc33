"""Twitch API client.

Token types:
- App Access Token: fetched with the client-credentials grant and cached until
  it expires or is invalidated. Sent as the bearer token on Helix calls.
- User Access Token: owned by the caller. Only passed through (stream markers)
  or refreshed on request; never cached here.

Every public operation performs exactly one HTTP request (none for a cached
app token). There is no retry: ``httpx`` errors, non-2xx statuses and
non-JSON bodies propagate to the caller unchanged.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any, cast

import httpx

from ..models.token import AccessToken, TokenPair
from .errors import MalformedResponseError, MissingCredentialError

LOGGER = logging.getLogger(__name__)

HELIX_BASE = "https://api.twitch.tv/helix"
OAUTH_BASE = "https://id.twitch.tv/oauth2"

DEFAULT_SCOPES = ("user:edit", "user:read:email")

# Treat the app token as expired this many seconds before Twitch does
TOKEN_EXPIRY_MARGIN = 300


class TwitchAPIClient:
    """Thin authenticated wrapper over the Twitch OAuth and Helix endpoints.

    Owns an ``httpx.AsyncClient`` unless one is passed in, in which case the
    caller stays responsible for closing it.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str | None = None,
        *,
        logger: logging.Logger | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.logger = logger or LOGGER

        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=10.0)

        self._access_token: AccessToken | None = None

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> TwitchAPIClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def access_token(self) -> str | None:
        """The cached app token, or None when absent or expired."""
        if self._access_token and self._access_token.is_fresh():
            return self._access_token.token
        return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _helix_headers(self, token: str | None = None) -> dict[str, str]:
        headers = {"Client-ID": self.client_id}
        bearer = token or self.access_token
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    async def _perform_get(self, path: str, params: Mapping[str, Any] | None) -> list[dict]:
        url = f"{HELIX_BASE}/{path}"
        self.logger.debug(
            f"Performing GET request to Twitch API to URL: {url} "
            f"with query string: {json.dumps(params, default=str)}"
        )
        response = await self._http.get(
            url,
            params=dict(params) if params else None,
            headers=self._helix_headers(),
        )
        payload = self._decode(response)
        if payload is not None and not isinstance(payload, dict):
            raise MalformedResponseError(f"Expected a JSON object from {path}")
        if not payload or not payload.get("data"):
            return []
        return cast(list[dict], payload["data"])

    async def _perform_write(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any],
        *,
        token: str | None = None,
    ) -> Any:
        url = f"{HELIX_BASE}/{path}"
        self.logger.debug(
            f"Performing {method} request to Twitch API to URL: {url} "
            f"with body: {json.dumps(body, default=str)}"
        )
        response = await self._http.request(
            method,
            url,
            json=dict(body),
            headers=self._helix_headers(token),
        )
        return self._decode(response)

    async def _post_token_form(self, form: dict[str, str]) -> dict[str, Any]:
        url = f"{OAUTH_BASE}/token"
        self.logger.debug(
            f"Performing POST request to Twitch API to URL: {url} "
            f"with grant_type: {form.get('grant_type')}"
        )
        response = await self._http.post(url, data=form)
        payload = self._decode(response)
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise MalformedResponseError(f"No access_token in {form.get('grant_type')} response")
        return payload

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    async def get_access_token(self, scopes: Iterable[str] = DEFAULT_SCOPES) -> str:
        """Return the cached app access token, fetching one only when needed."""
        self.logger.debug("Getting access token from twitch API.")
        cached = self.access_token
        if cached:
            return cached

        if not self.client_secret:
            raise MissingCredentialError("Client secret is required to request an access token.")

        now = time.monotonic()
        data = await self._post_token_form(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "client_credentials",
                "scope": " ".join(scopes),
            }
        )

        expires_in = data.get("expires_in")
        expires_at = (
            now + max(int(expires_in) - TOKEN_EXPIRY_MARGIN, 0) if expires_in is not None else None
        )
        self._access_token = AccessToken(token=data["access_token"], expires_at=expires_at)
        return self._access_token.token

    def invalidate_access_token(self) -> None:
        """Forget the cached app token; the next call fetches a new one."""
        self._access_token = None

    async def refresh_user_access_token(self, refresh_token: str | None) -> TokenPair:
        """Exchange a refresh token for a new user access/refresh token pair.

        Twitch may rotate the refresh token, so callers should store both.
        """
        self.logger.debug("Refreshing access token via twitch API")
        if not refresh_token:
            raise MissingCredentialError("Refresh token is not specified.")

        data = await self._post_token_form(
            {
                "refresh_token": refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret or "",
                "grant_type": "refresh_token",
            }
        )
        return TokenPair(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
        )

    async def validate_access_token(self, token: str) -> dict[str, Any]:
        """Validate a token and return Twitch's payload (client_id, login, scopes, expires_in)."""
        url = f"{OAUTH_BASE}/validate"
        self.logger.debug(f"Performing GET request to Twitch API to URL: {url}")
        response = await self._http.get(url, headers={"Authorization": f"OAuth {token}"})
        return cast(dict[str, Any], self._decode(response))

    # ------------------------------------------------------------------
    # Helix reads
    # ------------------------------------------------------------------

    async def get_games(self, options: Mapping[str, Any] | None = None) -> list[dict]:
        """Get games by ``id`` and/or ``name``."""
        return await self._perform_get("games", options)

    async def get_streams(self, options: Mapping[str, Any] | None = None) -> list[dict]:
        """Get active streams, sorted by viewer count."""
        return await self._perform_get("streams", options)

    async def get_streams_metadata(self, options: Mapping[str, Any] | None = None) -> list[dict]:
        return await self._perform_get("streams/metadata", options)

    async def get_users(self, options: Mapping[str, Any] | None = None) -> list[dict]:
        """Get users by ``id`` and/or ``login``; the bearer user when neither is given."""
        return await self._perform_get("users", options)

    async def get_users_follows(self, options: Mapping[str, Any] | None = None) -> list[dict]:
        return await self._perform_get("users/follows", options)

    async def get_videos(self, options: Mapping[str, Any] | None = None) -> list[dict]:
        """Get videos by ``id``, ``user_id`` or ``game_id``."""
        return await self._perform_get("videos", options)

    async def is_live(self, channel: str) -> bool:
        """Return True if *channel* (a login name) is currently streaming."""
        streams = await self.get_streams({"user_login": channel})
        return len(streams) > 0

    # ------------------------------------------------------------------
    # Helix writes
    # ------------------------------------------------------------------

    async def update_user(self, description: str) -> Any:
        """Update the channel description of the user owning the cached token."""
        return await self._perform_write("PUT", "users", {"description": description})

    async def create_stream_marker(
        self,
        user_access_token: str,
        user_id: str | int,
        description: str | None = None,
    ) -> Any:
        """Create a stream marker. Needs a user token with ``channel:manage:broadcast``."""
        self.logger.debug("Creating stream marker")
        body: dict[str, Any] = {"user_id": str(user_id)}
        if description is not None:
            body["description"] = description
        return await self._perform_write("POST", "streams/markers", body, token=user_access_token)
