import logging

from rich.console import Console
from rich.logging import RichHandler

# Library logger -> (level when debugging, level otherwise)
LIBRARY_LEVELS: dict[str, tuple[int, int]] = {
    "twitchio": (logging.DEBUG, logging.INFO),
    "twitchio.websockets": (logging.DEBUG, logging.WARNING),
    "httpx": (logging.INFO, logging.WARNING),
    "httpcore": (logging.WARNING, logging.WARNING),
    "asyncio": (logging.ERROR, logging.ERROR),
}


def setup_logging(level_name: str = "INFO") -> RichHandler:
    """Route every record through one RichHandler and quiet chatty libraries."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    debugging = level == logging.DEBUG

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=debugging,
        markup=True,
        rich_tracebacks=True,
        log_time_format="[%Y-%m-%d %H:%M:%S]",
    )
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)

    for name, (debug_level, normal_level) in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(debug_level if debugging else normal_level)

    logging.getLogger("Bot").debug("Rich logging enabled")
    return handler
