# smartbrain/utils/logger.py
import logging
import os
from ..config.settings import Config

LOGGER_NAME = 'SmartBrain_Backend'


def setup_logger(logs_path=None):
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    # Every service calls this; attach handlers only on the first call
    if logger.handlers:
        return logger

    logs_path = logs_path or Config.LOGS_PATH
    os.makedirs(logs_path, exist_ok=True)

    fh = logging.FileHandler(os.path.join(logs_path, 'backend.log'))
    fh.setLevel(logging.INFO)

    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    fh.setFormatter(formatter)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger
