"""Verbosity handling.

odo follows klog conventions: ``ODO_LOG_LEVEL`` is an integer where ``0``
shows only warnings and anything from ``4`` up shows debug records. Records
are rendered by rich on stderr so stdout carries nothing but the wizard's
own output, starting with the welcome message.
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "ODO_LOG_LEVEL"

_HANDLER_NAME = "odo-rich"


def level_from_env(environ: Optional[dict] = None) -> int:
    """Return the klog verbosity from the environment, ``0`` when unset or garbage."""
    raw = (environ if environ is not None else os.environ).get(LOG_LEVEL_ENV, "").strip()
    try:
        return max(int(raw), 0)
    except ValueError:
        return 0


def to_logging_level(verbosity: int) -> int:
    if verbosity >= 4:
        return logging.DEBUG
    if verbosity >= 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbosity: Optional[int] = None) -> logging.Logger:
    """Attach a stderr RichHandler to the ``odo_cli`` logger (idempotent)."""
    if verbosity is None:
        verbosity = level_from_env()
    logger = logging.getLogger("odo_cli")
    logger.setLevel(to_logging_level(verbosity))
    logger.propagate = False
    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=verbosity >= 4,
            show_path=verbosity >= 4,
            markup=False,
        )
        handler.set_name(_HANDLER_NAME)
        logger.addHandler(handler)
    return logger
