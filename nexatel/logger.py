"""JSON logger setup shared by the codec, scripts and API."""

import logging

from pythonjsonlogger import jsonlogger

from nexatel.config import settings


def get_logger(name: str) -> logging.Logger:
    """
    Configure a JSON logger once and reuse it.

    Level comes from settings.LOG_LEVEL so the API and scripts agree.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(levelname)s %(name)s %(message)s %(asctime)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(settings.LOG_LEVEL.upper())
    logger.propagate = False
    return logger
