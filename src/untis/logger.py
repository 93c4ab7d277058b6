import logging
import sys

__all__ = ["setup_logger"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(level: int = logging.INFO) -> logging.Logger:
    """
    Configures the package logger with a single stream handler.

    Calling it again only adjusts the level, so scripts can safely call it after
    the package has been imported.
    """
    logger = logging.getLogger("untis")
    logger.setLevel(level)

    if not any(getattr(handler, "_untis_handler", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._untis_handler = True
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
