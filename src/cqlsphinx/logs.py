"""Logging set-up for the command line exporter."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def configure_logging(debug_file: Optional[str] = None) -> logging.Handler:
    """
    Attach a handler to the ``cqlsphinx`` logger.

    stdout carries the XML document, so logs never go there. With a debug
    file, everything from DEBUG up is written to it (overwritten on each run);
    otherwise warnings and errors go to stderr.

    Returns:
        The installed handler
    """
    logger = logging.getLogger("cqlsphinx")
    for old in list(logger.handlers):
        if getattr(old, "_cqlsphinx_handler", False):
            logger.removeHandler(old)
            old.close()

    if debug_file:
        handler: logging.Handler = logging.FileHandler(debug_file, mode="w", encoding="utf-8")
        level = logging.DEBUG
    else:
        handler = logging.StreamHandler(sys.stderr)
        level = logging.WARNING

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler._cqlsphinx_handler = True
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
