"""Bot configuration"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# === Emote registry ===
EMOTE_REGISTRY_URL = "https://twitchemotes.com/api_cache/v3/global.json"
EMOTE_IMAGE_URL = "https://static-cdn.jtvnw.net/emoticons/v1/{id}/1.0"


class BotSettings(BaseSettings):
    """Chat bot settings.

    Table fields (``channels``, ``basic_commands``, ``event_commands``,
    ``basic_triggers``) are read from the environment as JSON, e.g.
    ``BASIC_COMMANDS='{"hello": "Hi @user!"}'``.
    """

    model_config = SettingsConfigDict(
        env_file=Path.cwd() / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Twitch OAuth
    client_id: str = Field(..., description="Twitch OAuth Client ID")
    client_secret: str = Field(default="", description="Twitch OAuth Client Secret")

    # Bot account
    bot_id: str = Field(default="", description="Bot User ID")
    bot_username: str = Field(default="", description="Bot login name")
    bot_token: str = Field(default="", description="Bot user access token")
    bot_refresh_token: str = Field(default="", description="Bot user refresh token")
    channels: list[str] = Field(default_factory=list, description="Channel logins to join")

    # Dispatch
    chat_prefix: str = Field(default="!", description="Command prefix in channel chat")
    whisper_prefix: str = Field(default="!", description="Command prefix in whispers")
    basic_commands: dict[str, str] = Field(
        default_factory=dict, description="Command -> canned reply ('@user' is substituted)"
    )
    event_commands: list[str] = Field(
        default_factory=list, description="Commands handled by registered event handlers"
    )
    basic_triggers: dict[str, str] = Field(
        default_factory=dict, description="Word -> canned reply for non-command chat"
    )
    ignore_self: bool = Field(default=True, description="Drop messages sent by the bot itself")

    # Emotes
    emote_url: str = Field(default=EMOTE_REGISTRY_URL, description="Emote registry JSON URL")
    emote_image_url: str = Field(
        default=EMOTE_IMAGE_URL, description="Emote image URL template with an {id} field"
    )

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("basic_commands", "basic_triggers")
    @classmethod
    def lowercase_keys(cls, v: dict[str, str]) -> dict[str, str]:
        """Lookups are case-insensitive, so keys are stored case-folded"""
        return {key.lower(): reply for key, reply in v.items()}

    @field_validator("event_commands", "channels")
    @classmethod
    def lowercase_items(cls, v: list[str]) -> list[str]:
        return [item.lower() for item in v]

    @field_validator("chat_prefix", "whisper_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if not v or v != v.strip():
            raise ValueError("Command prefix must be non-empty and contain no surrounding spaces")
        return v

    @field_validator("emote_image_url")
    @classmethod
    def validate_emote_image_url(cls, v: str) -> str:
        if "{id}" not in v:
            raise ValueError("emote_image_url must contain an '{id}' placeholder")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @model_validator(mode="after")
    def require_bot_username(self) -> "BotSettings":
        """The self filter matches on bot_username, so it cannot be empty while enabled"""
        if self.ignore_self and not self.bot_username.strip():
            raise ValueError("bot_username is required when ignore_self is enabled")
        return self


@lru_cache
def get_settings() -> BotSettings:
    """Get cached settings instance"""
    return BotSettings()  # type: ignore[call-arg]
