"""
Central logging configuration for lukkari_backend.

Installs a colorized console handler, tags every record with the current
request correlation ID and quiets verbose third-party loggers.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

_CONSOLE_FORMAT = (
    "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s [%(request_id)s] %(name)s: %(message)s"
)
_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to all log records for request tracing."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported lazily, middleware pulls in aiohttp
        from lukkari_backend.api.middleware.correlation_id import get_request_id

        record.request_id = get_request_id()
        return True


def init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Honors LUKKARI_DEBUG (truthy values: "1", "true", "yes", "on"), which
    forces DEBUG verbosity regardless of ``level_name``.
    """
    debug_env = os.environ.get("LUKKARI_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler once to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(
            ColoredFormatter(_CONSOLE_FORMAT, datefmt="%H:%M:%S", log_colors=_LOG_COLORS)
        )
        handler.addFilter(CorrelationIdFilter())
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def configure_logging(debug_mode: bool = False) -> None:
    """Configure logger levels for lukkari_backend and its third-party stack.

    Args:
        debug_mode: Whether to enable debug logging for lukkari_backend modules

    Environment Variables:
        LUKKARI_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        LUKKARI_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("LUKKARI_DEBUG", "").lower() in ("1", "true", "yes", "on")
    env_log_level = os.getenv("LUKKARI_LOG_LEVEL", "").upper()

    final_debug = debug_mode or env_debug

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    correlation_filter = CorrelationIdFilter()
    if not root_logger.handlers:
        init_logging(logging.getLevelName(root_level))
    else:
        for existing_handler in root_logger.handlers:
            if not any(isinstance(f, CorrelationIdFilter) for f in existing_handler.filters):
                existing_handler.addFilter(correlation_filter)

    logger_config: dict[str, int] = {
        "aiohttp.access": logging.WARNING,
        "aiohttp.server": logging.WARNING,
        "aiohttp.web": logging.INFO,
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "asyncio": logging.WARNING,
        "lukkari_backend": logging.DEBUG if final_debug else logging.INFO,
    }

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.info("Debug logging enabled for lukkari_backend modules")
    else:
        root_logger.info("Production logging configuration applied")

