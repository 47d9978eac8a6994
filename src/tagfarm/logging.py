"""Diagnostics on standard error for tagfarm."""

from __future__ import annotations

import logging
import sys


class DiagnosticFormatter(logging.Formatter):
    """Bare messages for progress and ``-v`` diagnostics, prefixed warnings and errors.

    ``no tags for song.mp3`` reads as-is; ``warning: cannot link ...`` and
    ``error: Music directory not found ...`` stand out.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname.lower()}: {message}"
        return message


def configure_logging(verbose: bool = False, quiet: bool = False, stream=None) -> logging.Logger:
    """Send tagfarm diagnostics to *stream* (standard error by default).

    ``verbose`` adds the per-file debug diagnostics; ``quiet`` keeps only
    warnings and errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(DiagnosticFormatter("%(message)s"))

    logger = logging.getLogger("tagfarm")
    logger.handlers.clear()
    logger.setLevel(level)
    logger.addHandler(handler)
    return logger
