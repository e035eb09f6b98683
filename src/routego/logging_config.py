import logging
from typing import Optional

from . import config


def configure_logging(level: Optional[str] = None) -> int:
    """Simple logging setup for the CLI and scripts.

    Library modules only call ``logging.getLogger(__name__)``; nothing is
    configured until an entry point calls this.
    """
    level_name = level or config.LOG_LEVEL
    if not level_name:
        level_name = "DEBUG" if (config.DEBUG or config.VERBOSE) else "INFO"
    log_level = getattr(logging, level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    logger = logging.getLogger("routego")
    logger.setLevel(log_level)
    logger.info("Logging configured, level=%s", level_name.upper())
    return log_level
