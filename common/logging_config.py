## common/logging_config.py

import logging

from utils.logger import get_logger

LOGGER_NAME = "trades-matching"


def configure_logging(level=logging.INFO):
    logger = get_logger(LOGGER_NAME)
    logger.setLevel(level)
    for h in logger.handlers:
        if type(h) is logging.StreamHandler:
            h.setLevel(level)
    # httpx logs every oracle request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logger
