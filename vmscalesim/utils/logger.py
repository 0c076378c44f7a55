"""Logging setup shared by all simulator components."""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str, level: Optional[str] = None,
                 fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Create or fetch a named logger.

    Handlers are attached only once per logger name, so components can call
    this in their constructors without duplicating output.

    Args:
        name: Logger name (usually the class name)
        level: Optional level name such as "DEBUG" or "INFO"
        fmt: Log record format

    Returns:
        Configured logger
    """
    logger = logging.getLogger(f"vmscalesim.{name}")

    if level is not None:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        logging.getLogger("vmscalesim").setLevel(logger.level)

    root = logging.getLogger("vmscalesim")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
        if root.level == logging.NOTSET:
            root.setLevel(logging.INFO)
        root.propagate = False

    return logger
