"""Loguru sinks for the CLI; the openai and httpx clients log through the same sinks."""

import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# Standard-library loggers of the remote clients
CLIENT_LOGGERS = ("openai", "httpx", "httpcore")


class ClientLogHandler(logging.Handler):
    """Forwards a standard ``logging`` record to loguru under the record's own level."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).bind(client=record.name).log(
            level, record.getMessage()
        )


def route_client_logs(level: str = "WARNING") -> None:
    handler = ClientLogHandler()
    for name in CLIENT_LOGGERS:
        client_logger = logging.getLogger(name)
        client_logger.handlers = [handler]
        client_logger.setLevel(level)
        client_logger.propagate = False


def setup_logger(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    client_level: str = "WARNING",
):
    """
    Replace every loguru sink with a stderr sink and, optionally, a rotating file.

    The file sink keeps DEBUG records (every remote call) regardless of
    ``log_level``. Calling again reconfigures from scratch.
    """
    handlers = [
        {"sink": sys.stderr, "format": CONSOLE_FORMAT, "level": log_level, "colorize": True},
    ]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append({
            "sink": log_file,
            "format": FILE_FORMAT,
            "level": "DEBUG",
            "rotation": "5 MB",
            "retention": "14 days",
            "enqueue": True,
        })
    logger.configure(handlers=handlers)
    route_client_logs(client_level)
    return logger
