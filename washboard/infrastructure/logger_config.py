"""Loguru setup shared by the API process."""

import sys

from loguru import logger

log_format = " | ".join(
    (
        "<lk>{time:YYYY-MM-DD HH:mm:ss.SSS}</>",
        "<lvl>{level:<8}</>",
        "<c>{file}::{function}:{line}</>",
        "{message}",
    )
)


def configure_logging(level: str = "INFO") -> None:
    # Drop loguru's default handler so records are not emitted twice
    logger.remove()
    logger.add(sys.stderr, format=log_format, level=level.upper())
