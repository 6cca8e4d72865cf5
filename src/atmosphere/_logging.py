"""Call logging for the fetch and resolver layers.

Call records go to the ``atmosphere.api`` logger and propagate like any
library logger. Setting ``ATMOSPHERE_LOG_DIR`` additionally writes them to
``api_calls.log`` in that directory. A log directory that cannot be written
disables the file with one warning; it never fails the call being logged.
"""

from __future__ import annotations

import functools
import logging
import os
import threading
import time
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

LOG_DIR_ENV = "ATMOSPHERE_LOG_DIR"
LOG_FILE_NAME = "api_calls.log"
API_LOGGER_NAME = "atmosphere.api"

logging.getLogger("atmosphere").addHandler(logging.NullHandler())
logger = logging.getLogger(__name__)

_api_logger: logging.Logger | None = None
_api_logger_lock = threading.Lock()


def _open_log_file(log_dir: str) -> logging.Handler | None:
    """Return a file handler in ``log_dir``, or None if the directory is unusable."""
    try:
        os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(os.path.join(log_dir, LOG_FILE_NAME), encoding="utf-8")
    except OSError as exc:
        logger.warning("API call log disabled; cannot write to %s: %s", log_dir, exc)
        return None
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    return handler


def _get_api_logger() -> logging.Logger:
    """Return the call logger, attaching the opt-in file handler on first use."""
    global _api_logger
    if _api_logger is not None:
        return _api_logger

    with _api_logger_lock:
        if _api_logger is not None:
            return _api_logger

        api_logger = logging.getLogger(API_LOGGER_NAME)
        log_dir = os.environ.get(LOG_DIR_ENV)
        if log_dir:
            handler = _open_log_file(log_dir)
            if handler is not None:
                api_logger.addHandler(handler)
                api_logger.setLevel(logging.INFO)
        _api_logger = api_logger

    return _api_logger


def _summarize(result: Any) -> str:
    """Short description of a resolver result for the call log."""
    if result is None:
        return "none"
    source = getattr(result, "source", None)
    if source is not None:
        return f"source={getattr(source, 'value', source)}"
    if isinstance(result, (list, tuple, dict)):
        return f"size={len(result)}"
    return type(result).__name__


def log_fetch_call(fn: F) -> F:
    """Log each fetch with its URL, outcome and duration.

    Failures returned as values (anything with a non-None ``error``) are
    logged as ``FAIL`` just like raised exceptions.
    """

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        api_logger = _get_api_logger()
        url = args[1] if len(args) > 1 else kwargs.get("url")
        api_logger.info("CALL: %s(%s)", fn.__qualname__, url)

        start = time.monotonic()
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            api_logger.error(
                "FAIL: %s(%s) -> %s: %s (%.3fs)",
                fn.__qualname__, url, type(exc).__name__, exc, time.monotonic() - start,
            )
            raise

        elapsed = time.monotonic() - start
        error = getattr(result, "error", None)
        if error is not None:
            api_logger.error(
                "FAIL: %s(%s) -> %s: %s (%.3fs)",
                fn.__qualname__, url, type(error).__name__, error, elapsed,
            )
        else:
            api_logger.info(
                "OK: %s(%s) -> %d bytes (%.3fs)",
                fn.__qualname__, url, len(getattr(result, "content", b"")), elapsed,
            )
        return result

    return wrapper  # type: ignore[return-value]


def log_resolver_call(fn: F) -> F:
    """Log a resolver entry point with its arguments and a summary of what it produced."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        api_logger = _get_api_logger()
        arg_str = ", ".join(
            [repr(a) for a in args[1:]] + [f"{k}={v!r}" for k, v in kwargs.items()],
        )
        api_logger.info("RESOLVE: %s(%s)", fn.__qualname__, arg_str)

        start = time.monotonic()
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            api_logger.error(
                "RESOLVE FAIL: %s -> %s: %s (%.3fs)",
                fn.__qualname__, type(exc).__name__, exc, time.monotonic() - start,
            )
            raise
        api_logger.info(
            "RESOLVED: %s -> %s (%.3fs)",
            fn.__qualname__, _summarize(result), time.monotonic() - start,
        )
        return result

    return wrapper  # type: ignore[return-value]
