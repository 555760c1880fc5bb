"""Logging for ``finance_tracker``.

Modules obtain loggers with ``get_logger("finance_tracker.<module>")`` and
never install handlers. Until an entry point calls :func:`configure_logging`
the package logger only carries a ``NullHandler``, so embedding the library
stays silent. The CLI configures logging once in its root callback.

The level comes from the ``level`` argument, else ``FINANCE_TRACKER_LOG_LEVEL``,
else ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "finance_tracker"
_LEVEL_ENV_VAR = "FINANCE_TRACKER_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Handler installed by configure_logging(); None while unconfigured.
_handler: logging.Handler | None = None


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(_LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
    force: bool = False,
) -> None:
    """Attach one ``StreamHandler`` to the package logger.

    Parameters
    ----------
    level:
        ``int`` or level name such as ``"DEBUG"``; see the module docstring
        for the fallback order.
    fmt:
        Format string (``"%(asctime)s %(name)s %(levelname)s %(message)s"``
        when omitted).
    stream:
        Destination; ``sys.stderr`` as seen at call time by default.
    force:
        Replace a handler installed by an earlier call instead of keeping it.
    """

    global _handler
    if _handler is not None and not force:
        return

    pkg = logging.getLogger(_PKG_LOGGER_NAME)
    reset_logging()
    for h in list(pkg.handlers):
        if isinstance(h, logging.NullHandler):
            pkg.removeHandler(h)

    resolved = _resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    pkg.addHandler(handler)
    pkg.setLevel(resolved)
    # Records stop at the package logger; the root logger never sees them twice.
    pkg.propagate = False
    _handler = handler


def reset_logging() -> None:
    """Remove the handler installed by :func:`configure_logging` (if any)."""

    global _handler
    if _handler is None:
        return
    pkg = logging.getLogger(_PKG_LOGGER_NAME)
    pkg.removeHandler(_handler)
    pkg.propagate = True
    pkg.setLevel(logging.NOTSET)
    _handler = None


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)``, silencing the package until configured."""

    pkg = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging"]
