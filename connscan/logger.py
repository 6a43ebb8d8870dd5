import logging

LOGGER_NAME = "connscan"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def level_for(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbosity: int = 0) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_for(verbosity))

    # Prevent duplicate handlers if called again
    if logger.handlers:
        return logger

    sh = logging.StreamHandler()
    sh.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(sh)
    return logger
