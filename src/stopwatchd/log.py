"""Logging configuration for stopwatchd."""

import logging
from logging.handlers import RotatingFileHandler

from stopwatchd.config import Config

_FORMAT = "%(asctime)s %(levelname)-8s %(process)d %(name)s: %(message)s"
_MAX_BYTES = 1_000_000
_BACKUP_COUNT = 3


def setup_logging(cfg: Config) -> None:
    """Send the ``stopwatchd`` logger to a rotating file in the data directory.

    Level and timestamp format come from ``cfg``. Only the first call in a
    process attaches a handler.
    """
    logger = logging.getLogger("stopwatchd")
    if logger.handlers:
        return

    handler = RotatingFileHandler(cfg.log_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=cfg.datetime_format))
    logger.setLevel(cfg.log_level)
    logger.addHandler(handler)
