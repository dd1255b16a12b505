# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import logging
import os
import sys

ROOT_LOGGER_NAME = "lanecam"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(os.getenv("LANECAM_LOG_LEVEL", "INFO").upper())
    return root


def Logger(name: str, level: int | str | None = None) -> logging.Logger:
    """Return a named logger under the ``lanecam`` hierarchy.

    All loggers share a single stream handler attached to the root ``lanecam`` logger.
    The level of the root logger can be set with the LANECAM_LOG_LEVEL environment variable.

    Args:
        name (str): Component name, used as the logger suffix (e.g. "Camera").
        level (int | str, optional): Level override for this logger only.

    Returns:
        logging.Logger: The configured logger.
    """
    _configure_root()
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    if level is not None:
        logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
