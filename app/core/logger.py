import logging
import sys

from app.core.config import settings

LOGGER_NAME = "tsmwa"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: str = None) -> None:
    """
    Configures the application logger once; reloads do not duplicate handlers.
    """
    level = (level or settings.LOG_LEVEL).upper()
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S"
        )
    )
    logger.addHandler(handler)
    logger.propagate = False

    logger.info(f"LOGGING READY | level={level} | env={settings.ENV}")
