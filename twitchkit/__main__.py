import asyncio
import logging
import sys

from pydantic import ValidationError

from twitchkit.core.bot import ChatBot
from twitchkit.core.config import get_settings
from twitchkit.core.logging import setup_logging
from twitchkit.models.chat import UserState

LOGGER: logging.Logger = logging.getLogger("Bot")


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        LOGGER.error(f"Environment validation failed: {e}")
        sys.exit(1)

    setup_logging(settings.log_level)

    async def runner() -> None:
        bot = ChatBot(settings)

        @bot.chat_parsed
        async def log_chat(channel: str, user_state: UserState, message: str, is_self: bool):
            LOGGER.info(f"[{user_state.name}#{channel}]: {message}")

        async with bot:
            LOGGER.info("Bot running, press Ctrl+C to stop")
            await asyncio.Event().wait()

    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        LOGGER.warning("Shutting down due to KeyboardInterrupt...")


if __name__ == "__main__":
    main()
