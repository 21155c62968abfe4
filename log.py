"""Cayley logging.

Every module logs under the ``cayley`` hierarchy through :func:`get_logger`.
Table builds, operation compilation and translations are reported at DEBUG,
so a normal run is silent apart from explicit ``describe()`` calls.

Environment variables:
    CAYLEY_LOG_LEVEL  — DEBUG / INFO (default) / WARNING / ERROR
    CAYLEY_LOG_FILE   — optional path; appends plain-text log lines
"""

import logging
import os
import sys
import time
from contextlib import contextmanager

_CONFIGURED = False

# ANSI colour codes (used only when stderr is a TTY)
_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
_RESET = "\033[0m"


class _LevelColorFormatter(logging.Formatter):
    """Colours the level name of console records."""

    def __init__(self, fmt: str, use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)
        # Work on a copy so file handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{_COLORS.get(record.levelno, '')}{record.levelname}{_RESET}"
        return super().format(record)


def _configure_once() -> None:
    """Attach handlers to the ``cayley`` root logger on first use."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger("cayley")
    level_name = os.environ.get("CAYLEY_LOG_LEVEL", "INFO").upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    use_color = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_LevelColorFormatter("%(levelname)s %(name)s: %(message)s",
                                              use_color=use_color))
    root.addHandler(console)

    log_file = os.environ.get("CAYLEY_LOG_FILE")
    if log_file:
        fh = logging.FileHandler(log_file, mode="a")
        fh.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
        root.addHandler(fh)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``cayley`` hierarchy.

    Args:
        name: Typically ``__name__`` of the calling module.

    Returns:
        A :class:`logging.Logger` instance.
    """
    _configure_once()
    return logging.getLogger(f"cayley.{name}")


@contextmanager
def timed(logger: logging.Logger, what: str):
    """Log the wall time of the enclosed block at DEBUG level."""
    start = time.perf_counter()
    yield
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"{what} in {(time.perf_counter() - start) * 1e3:.1f} ms")
