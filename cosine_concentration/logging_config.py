"""Logging setup for the scripts and notebooks that drive simulations.

Modules of the package only ask for loggers (``logging.getLogger(__name__)``).
Where their records go is up to the caller; `setup_logging` covers the usual case
of watching a sweep on the console, and optionally keeping a log file.
"""
import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER_NAME = "cosine_concentration"
DFLT_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DFLT_DATE_FORMAT = "%H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    *,
    name: str = PACKAGE_LOGGER_NAME,
    fmt: str = DFLT_LOG_FORMAT,
    datefmt: str = DFLT_DATE_FORMAT,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Points the ``name`` logger (the package's, by default) at a stream and
    optionally a file, replacing whatever handlers it had before.

    :param level: Level of the logger, e.g. ``logging.DEBUG``
    :param log_file: If given, records are also appended to this file
    :param name: Name of the logger to configure
    :param fmt: Record format, in ``logging.Formatter`` syntax
    :param datefmt: Format of ``%(asctime)s``
    :param stream: Where console records go (``sys.stdout`` if None)
    :return: The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(stream if stream is not None else sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(fmt, datefmt=datefmt)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to %d handler(s) at level %s", len(handlers), logging.getLevelName(level))
    return logger
