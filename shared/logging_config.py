"""Central logging configuration for the command-line entry points.

Library modules only ever obtain a module-level logger; this module is the one
place that attaches handlers. Diagnostics go to stderr so they never mix with
the human-readable results printed on stdout. A log file can be added through
two environment variables:

``FLYTECTL_LOG_FILE``
    Absolute path to the log file that should be created.

``FLYTECTL_LOG_DIR``
    Directory where the default log file name will be created.  Ignored when
    ``FLYTECTL_LOG_FILE`` is present.

Access tokens passed through to the release source are redacted from every
formatted record.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from enum import Enum
from pathlib import Path

_LOG_FILE_ENV = "FLYTECTL_LOG_FILE"
_LOG_DIR_ENV = "FLYTECTL_LOG_DIR"
_TOKEN_ENV = "GITHUB_TOKEN"
_DEFAULT_LOGNAME = "releases.log"
_HANDLER_TAG = "_releases_logging_handler"
_CONFIGURED = False
_STREAM_HANDLER: logging.Handler | None = None
_FILE_HANDLER: logging.FileHandler | None = None

TOKEN_PLACEHOLDER = "<token>"


class LogVerbosity(str, Enum):
    """Verbosity levels accepted on the command line."""

    QUIET = "quiet"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    VERBOSE = "verbose"


_VERBOSITY_LEVELS: dict[LogVerbosity, int] = {
    LogVerbosity.QUIET: logging.CRITICAL + 1,
    LogVerbosity.ERROR: logging.ERROR,
    LogVerbosity.WARNING: logging.WARNING,
    LogVerbosity.INFO: logging.INFO,
    LogVerbosity.VERBOSE: logging.DEBUG,
}

_DEFAULT_VERBOSITY = LogVerbosity.WARNING
_CURRENT_VERBOSITY = _DEFAULT_VERBOSITY

_BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9_\-\.]+")


def _sanitize_text(message: str) -> str:
    if not message:
        return message
    redacted = _BEARER_PATTERN.sub(rf"\g<1>{TOKEN_PLACEHOLDER}", message)
    token = os.environ.get(_TOKEN_ENV, "").strip()
    if token:
        redacted = redacted.replace(token, TOKEN_PLACEHOLDER)
    return redacted


class _RedactingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        return _sanitize_text(formatted)


def ensure_cli_logging(verbosity: LogVerbosity | str | None = None) -> Path | None:
    """Configure the root logger once and return the log file path, if any.

    Repeated calls only adjust the verbosity of the already installed
    handlers.
    """

    global _CONFIGURED, _STREAM_HANDLER, _FILE_HANDLER

    if verbosity is not None:
        _set_verbosity(verbosity)

    if _CONFIGURED:
        _apply_levels()
        return Path(_FILE_HANDLER.baseFilename) if _FILE_HANDLER is not None else None

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    formatter = _RedactingFormatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    setattr(stream_handler, _HANDLER_TAG, True)
    root.addHandler(stream_handler)
    _STREAM_HANDLER = stream_handler

    log_path = _resolve_log_path()
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_TAG, True)
        root.addHandler(file_handler)
        _FILE_HANDLER = file_handler

    _CONFIGURED = True
    _apply_levels()

    logging.getLogger(__name__).debug(
        "Logging configured (verbosity=%s, file=%s)", _CURRENT_VERBOSITY.value, log_path
    )
    return log_path


def get_log_verbosity() -> LogVerbosity:
    return _CURRENT_VERBOSITY


def _set_verbosity(verbosity: LogVerbosity | str) -> None:
    global _CURRENT_VERBOSITY

    if isinstance(verbosity, str) and not isinstance(verbosity, LogVerbosity):
        try:
            verbosity = LogVerbosity(verbosity.lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported log verbosity: {verbosity}") from exc
    _CURRENT_VERBOSITY = verbosity


def _apply_levels() -> None:
    if _STREAM_HANDLER is not None:
        _STREAM_HANDLER.setLevel(_VERBOSITY_LEVELS[_CURRENT_VERBOSITY])
    if _FILE_HANDLER is not None:
        # The file always records everything down to DEBUG.
        _FILE_HANDLER.setLevel(logging.DEBUG)


def _resolve_log_path() -> Path | None:
    env_file = os.environ.get(_LOG_FILE_ENV)
    if env_file:
        return Path(env_file).expanduser()

    env_dir = os.environ.get(_LOG_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser() / _DEFAULT_LOGNAME
    return None


def _reset_for_tests() -> None:
    """Remove handlers installed by :func:`ensure_cli_logging`."""

    global _CONFIGURED, _STREAM_HANDLER, _FILE_HANDLER, _CURRENT_VERBOSITY

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            try:
                handler.close()
            except Exception:  # pragma: no cover - close should rarely fail
                pass

    _CONFIGURED = False
    _STREAM_HANDLER = None
    _FILE_HANDLER = None
    _CURRENT_VERBOSITY = _DEFAULT_VERBOSITY


__all__ = ["LogVerbosity", "TOKEN_PLACEHOLDER", "ensure_cli_logging", "get_log_verbosity"]
