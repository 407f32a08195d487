"""
Centralized logging configuration using loguru.
"""
from __future__ import annotations

import sys
from typing import Any

from loguru import logger

from relay.config import get_config

# Single stderr sink; the level comes from RELAY_LOG_LEVEL
logger.remove()

logger.add(
    sys.stderr,
    format=(
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    ),
    level=get_config().relay_log_level.upper(),
    colorize=True,
)


def get_logger(name: str = __name__) -> Any:
    """
    Get a logger bound to a specific module name.

    Usage:
        from relay.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Relaying request")
    """
    return logger.bind(name=name)
