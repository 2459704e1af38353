"""Logging utilities for the collection store and mail relay.

Handlers, level and format are configured once by the entry point
(:mod:`jsondb_mail.cli` or :mod:`jsondb_mail.server`) through
:func:`configure_logging`; modules only ask for named loggers.

Example:
    Typical usage in a module::

        from jsondb_mail.logger import get_logger

        logger = get_logger("CollectionStore")
        logger.info("Collection saved")
"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "JsonDbMail") -> logging.Logger:
    """Retrieve a logger instance bound to ``name``.

    No handler is attached here; that responsibility lies with the
    application entry point.
    """
    return logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger for the running process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True,  # Force reconfiguration to avoid duplicate handlers
    )
