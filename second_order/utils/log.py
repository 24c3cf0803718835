"""
Logging for the crawler.

Console output goes to standard error.  Known ``[CATEGORY]`` tags
(``[GET]``, ``[NON-200]``, ``[INTERRUPT]`` ...) are highlighted, through
``colorlog`` when it is installed.  Under GitHub Actions warnings and
errors are emitted as workflow annotations instead.
"""

import logging
import os
from pathlib import Path

try:
    import colorlog
    _COLORLOG_AVAILABLE = True
except ImportError:
    _COLORLOG_AVAILABLE = False

log = logging.getLogger("second-order")

_CONSOLE_FMT = "%(asctime)s [%(levelname)s] %(message)s"
_CONSOLE_DATEFMT = "%H:%M:%S"
_FILE_FMT = "%(asctime)s [%(levelname)s] %(threadName)s %(message)s"

_ANSI_RESET = "\033[0m"
_TAG_STYLES: dict[str, str] = {
    "[QUEUE]":     "\033[37m",
    "[GET]":       "\033[36m",
    "[PROBE]":     "\033[90m",
    "[NON-200]":   "\033[1;35m",
    "[429]":       "\033[33m",
    "[SKIP]":      "\033[90m",
    "[ERR]":       "\033[1;31m",
    "[SAVE]":      "\033[1;32m",
    "[INTERRUPT]": "\033[1;33m",
}

_ANNOTATIONS: dict[int, str] = {
    logging.WARNING:  "::warning::",
    logging.ERROR:    "::error::",
    logging.CRITICAL: "::error::",
}


def highlight_tags(text: str) -> str:
    """Wrap every known ``[CATEGORY]`` tag in *text* in its ANSI style."""
    for tag, style in _TAG_STYLES.items():
        if tag in text:
            text = text.replace(tag, f"{style}{tag}{_ANSI_RESET}")
    return text


class _TagHighlightMixin:
    def format(self, record: logging.LogRecord) -> str:
        return highlight_tags(super().format(record))


class _PlainFormatter(_TagHighlightMixin, logging.Formatter):
    pass


if _COLORLOG_AVAILABLE:
    class _ColourFormatter(_TagHighlightMixin, colorlog.ColoredFormatter):
        pass


class AnnotationFormatter(logging.Formatter):
    """Prefix warnings and errors with GitHub Actions workflow commands."""

    def format(self, record: logging.LogRecord) -> str:
        return _ANNOTATIONS.get(record.levelno, "") + super().format(record)


def _in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def _console_handler() -> logging.Handler:
    if _in_github_actions():
        handler = logging.StreamHandler()
        handler.setFormatter(AnnotationFormatter(_CONSOLE_FMT, datefmt=_CONSOLE_DATEFMT))
    elif _COLORLOG_AVAILABLE:
        handler = colorlog.StreamHandler()
        handler.setFormatter(_ColourFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s %(message)s",
            datefmt=_CONSOLE_DATEFMT,
            log_colors={
                "DEBUG":    "cyan",
                "INFO":     "green",
                "WARNING":  "yellow",
                "ERROR":    "red",
                "CRITICAL": "bold_red",
            },
        ))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(_PlainFormatter(_CONSOLE_FMT, datefmt=_CONSOLE_DATEFMT))
    return handler


def setup_logging(debug: bool = False, log_file: str | None = None) -> None:
    """Configure the ``second-order`` logger.

    The console logs at INFO, or DEBUG with *debug*.  *log_file*, when
    given, receives every record at DEBUG level with the worker thread
    name, without colour codes.
    """
    log.setLevel(logging.DEBUG if debug or log_file else logging.INFO)
    log.handlers.clear()
    log.propagate = False

    console = _console_handler()
    console.setLevel(logging.DEBUG if debug else logging.INFO)
    log.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FMT, datefmt="%Y-%m-%d %H:%M:%S"))
        log.addHandler(file_handler)
        log.info("Logging to file: %s", path.resolve())
