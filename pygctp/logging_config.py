"""Logging for pygctp.

Modules log through ``get_logger(__name__)``, children of the ``pygctp``
logger. Nothing is printed until an application calls `setup_logging`.
"""

import logging
import sys
from pathlib import Path

ROOT_LOGGER = 'pygctp'
DEFAULT_FORMAT = '%(asctime)s %(name)s %(levelname)s: %(message)s'


def _as_level(level):
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


def setup_logging(level=logging.INFO, log_file=None, format_string=DEFAULT_FORMAT):
    """Send pygctp log messages to stdout and optionally a file.

    Parameters
    ----------
    level : int or str
        Level name such as ``'DEBUG'`` or a `logging` level number.
    log_file : str or pathlib.Path, optional
        Also write messages here. Parent directories are created.
    format_string : str
        `logging.Formatter` format for both handlers.

    Returns
    -------
    logger : logging.Logger
        The ``pygctp`` logger, with any earlier handlers replaced.
    """
    level = _as_level(level)
    formatter = logging.Formatter(format_string, datefmt='%Y-%m-%dT%H:%M:%S')

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    if log_file is not None:
        logger.debug('Logging to %s', log_file)
    return logger


def get_logger(name):
    return logging.getLogger(name)


def set_log_level(level):
    """Change the level of the pygctp logger and its handlers."""
    level = _as_level(level)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def disable_logging():
    logging.getLogger(ROOT_LOGGER).disabled = True


def enable_logging():
    logging.getLogger(ROOT_LOGGER).disabled = False
