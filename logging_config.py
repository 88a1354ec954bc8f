"""Logging configuration for the reaction role bot."""

import logging
import logging.handlers
from pathlib import Path
import os

# Log directory. Use LOGS_DIRECTORY env var if available, otherwise ./logs.
LOGS_DIR = Path(os.environ.get("LOGS_DIRECTORY", "logs")).expanduser()

try:
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
except OSError:
    pass

_configured = False


def _rotating_handler(filename: str, formatter: logging.Formatter, level: int):
    handler = logging.handlers.RotatingFileHandler(
        LOGS_DIR / filename, maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logging():
    """Set up logging configuration for the reaction role bot."""
    global _configured
    root_logger = logging.getLogger()
    if _configured:
        return root_logger

    # Create formatters
    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger.setLevel(logging.INFO)

    # Bot and reaction role logs
    bot_handler = _rotating_handler("bot.log", detailed_formatter, logging.INFO)

    # discord.py gateway/client logs
    sdk_handler = _rotating_handler("discord.log", detailed_formatter, logging.INFO)

    # Error logs
    error_handler = _rotating_handler("errors.log", detailed_formatter, logging.ERROR)

    # Configure specific loggers
    for name in ("discord_bot", "reaction_roles", "commands.reaction_roles"):
        bot_logger = logging.getLogger(name)
        bot_logger.addHandler(bot_handler)
        bot_logger.setLevel(logging.INFO)

    sdk_logger = logging.getLogger("discord")
    sdk_logger.addHandler(sdk_handler)
    sdk_logger.setLevel(logging.INFO)

    # Console handler for development
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(detailed_formatter)
    console_handler.setLevel(logging.INFO)

    # Add console handler to root logger
    root_logger.addHandler(console_handler)
    root_logger.addHandler(error_handler)

    _configured = True
    return root_logger
