"""Logging setup for the planner.

Modules log through ``logging.getLogger(__name__)``; the Streamlit entry point
calls :func:`setup_logging` once per process.
"""

import logging
from typing import Optional

from config.defaults import LOG_DATE_FORMAT, LOG_FORMAT, LOG_LEVEL

ROOT_LOGGERS = ("engine", "data", "tabs", "components")

_LOGGING_CONFIGURED = False


def setup_logging(level: Optional[str] = None) -> None:
    """Attach a console handler to the planner loggers.

    Streamlit re-executes the script on every interaction, so repeated calls
    are ignored.
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    resolved = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    for name in ROOT_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(resolved)
        logger.addHandler(handler)
        logger.propagate = False

    _LOGGING_CONFIGURED = True
