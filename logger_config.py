import logging
import os
from datetime import datetime

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def setup_logger(session_id, logs_dir="logs", level=logging.INFO, capture_all=False):
    """Sets up a logger to write to a unique, timestamped file.

    With capture_all the file also receives records from every module logger.
    """
    os.makedirs(logs_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    log_filename = f"agency_session_{timestamp}_{session_id}.log"
    log_filepath = os.path.join(logs_dir, log_filename)

    logger = logging.getLogger(f"agency_session_{session_id}")
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.FileHandler(log_filepath, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    if capture_all:
        logger.propagate = False
        logging.getLogger().addHandler(handler)

    return logger, log_filepath


def configure_console_logging(level="INFO"):
    """Route module loggers (store, api client, session) to stderr."""
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
