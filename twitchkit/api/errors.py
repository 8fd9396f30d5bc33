"""Exceptions raised by twitchkit.

Transport and HTTP status failures are not wrapped: they surface as the
``httpx`` exceptions raised by the underlying client.
"""


class TwitchKitError(Exception):
    """Base class for errors raised by twitchkit itself."""


class MissingCredentialError(TwitchKitError, ValueError):
    """A call needs a credential (client secret, refresh token) that was not supplied."""


class MalformedResponseError(TwitchKitError):
    """Twitch answered, but the payload lacks a field the call depends on."""


class EmoteTableNotLoadedError(TwitchKitError, RuntimeError):
    """A chat message was processed before the emote table was fetched."""
