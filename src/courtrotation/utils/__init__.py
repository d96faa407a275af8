"""Shared helpers: logging setup and identifier generation."""

# Court Rotation
# Copyright (C) 2025  Court Rotation developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import logging
import sys
import uuid

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a module logger with a single stream handler attached.

    Calling this repeatedly for the same name reuses the existing handler, so
    importing a module twice never duplicates output.

    Args:
        name: Logger name, normally the caller's ``__name__``
        level: Level applied the first time the logger is configured

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
    return logger


def set_global_level(level: int) -> None:
    """Apply a level to every logger created through setup_logger."""
    logging.getLogger().setLevel(level)
    for name, candidate in logging.Logger.manager.loggerDict.items():
        if name.startswith("courtrotation") and isinstance(candidate, logging.Logger):
            candidate.setLevel(level)


def generate_id(prefix: str) -> str:
    """Generate a unique identifier such as ``HistoryRecord-1f3a9c2e``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


__all__ = ["setup_logger", "set_global_level", "generate_id"]
