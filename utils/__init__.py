"""Utility-Module für TapScribe.

Gemeinsame Hilfsfunktionen für Logging, Zeitmessung, Fehler und Einstellungen.

Usage:
    from utils import setup_logging, log, error, timed_operation

    setup_logging(debug=True)
    with timed_operation("Transcode"):
        do_something()
"""

# utils.settings importiert config und wird deshalb nicht re-exportiert

from .errors import (
    ConfigError,
    NoActiveSession,
    PipelineError,
    StatsUnavailable,
    TapScribeError,
    TranscodeError,
    UploadError,
    UserError,
)
from .logging import setup_logging, log, error, get_logger, get_session_id
from .timing import timed_operation, format_duration, log_preview, Stopwatch

__all__ = [
    "setup_logging",
    "log",
    "error",
    "get_logger",
    "get_session_id",
    "timed_operation",
    "log_preview",
    "format_duration",
    "Stopwatch",
    "TapScribeError",
    "ConfigError",
    "UserError",
    "NoActiveSession",
    "PipelineError",
    "TranscodeError",
    "UploadError",
    "StatsUnavailable",
]
