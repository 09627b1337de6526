from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from tasktrack.config import PROJECT_ROOT, SETTINGS

LOG_FILE = "tasktrack.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# application packages plus the server, which runs with log_config=None
LOGGER_NAMES = ("tasktrack", "uvicorn")


def _handlers() -> list[logging.Handler]:
    log_dir = PROJECT_ROOT / SETTINGS.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(log_dir / LOG_FILE, maxBytes=2_000_000, backupCount=3)
    file_handler.set_name("tasktrack.file")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.set_name("tasktrack.console")
    console_handler.setFormatter(formatter)
    return [file_handler, console_handler]


def setup_logging() -> None:
    """Attach the file and console handlers to the tasktrack and uvicorn loggers.

    Calling it again replaces the handlers instead of stacking duplicates.
    """
    handlers = _handlers()
    names = {handler.get_name() for handler in handlers}
    level = SETTINGS.log_level.upper()

    for logger_name in LOGGER_NAMES:
        logger = logging.getLogger(logger_name)
        for handler in list(logger.handlers):
            if handler.get_name() in names:
                logger.removeHandler(handler)
                handler.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
