"""
Logging setup for the weather aggregation API.

Everything logs through loguru. Standard-library loggers (uvicorn, httpx,
fastapi) are routed into loguru by ``InterceptHandler`` so a single sink
configuration covers the whole process.
"""

import logging
import sys
from pathlib import Path

from loguru import logger

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx")


class InterceptHandler(logging.Handler):
    """Forward standard logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the caller that issued the logging call
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | None = "logs",
    json_logs: bool = False,
) -> None:
    """
    Configure loguru sinks.

    Args:
        log_level: Minimum level for every sink
        log_dir: Directory for the rotating file sink (None disables it)
        json_logs: Emit serialized JSON records instead of coloured text
    """
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, level=log_level, serialize=True)
    else:
        logger.add(
            sys.stdout, level=log_level, format=TEXT_FORMAT, colorize=True
        )

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        logger.add(
            Path(log_dir) / "weather_api.log",
            level=log_level,
            rotation="10 MB",
            retention="7 days",
            serialize=json_logs,
            enqueue=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.debug(
        f"Logging configured (level={log_level}, json={json_logs}, "
        f"dir={log_dir})"
    )


def get_logger(name: str | None = None):
    """Return the shared loguru logger, bound to ``name`` when given."""
    if name:
        return logger.bind(name=name)
    return logger
