import logging
from typing import Union

from pythonjsonlogger import jsonlogger

from . import config


def setup_logger(level: Union[int, str, None] = None) -> logging.Logger:
    logHandler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s',
                                         rename_fields={'levelname': 'level', 'asctime': 'timestamp'})
    logHandler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.addHandler(logHandler)
    logger.setLevel(level if level is not None else config.LOG_LEVEL)
    return logger
