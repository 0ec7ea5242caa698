"""Logging-Setup für TapScribe.

Konfiguriert Datei-Logging mit Rotation und optionalem stderr-Output.
Zeitstempel im Logfile sind UTC.
"""

import logging
import sys
import time
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Logger-Singleton
logger = logging.getLogger("tapscribe")

# Korrelations-ID pro Aufruf (jeder Befehl ist ein eigener Prozess)
_session_id: str = ""

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


def _generate_session_id() -> str:
    """Erzeugt kurze, lesbare Korrelations-ID (8 Zeichen)."""
    return uuid.uuid4().hex[:8]


def get_session_id() -> str:
    """Gibt die aktuelle Korrelations-ID zurück."""
    global _session_id
    if not _session_id:
        _session_id = _generate_session_id()
    return _session_id


def get_logger() -> logging.Logger:
    """Gibt den tapscribe Logger zurück."""
    return logger


def _utc_formatter() -> logging.Formatter:
    formatter = logging.Formatter(LOG_FORMAT, LOG_DATEFMT)
    formatter.converter = time.gmtime
    return formatter


def setup_logging(debug: bool = False, log_file: Path | None = None) -> None:
    """Konfiguriert Logging: Datei mit Rotation + optional stderr.

    Args:
        debug: Wenn True, wird auch auf stderr geloggt
        log_file: Ziel-Logdatei (default: config.LOG_FILE)
    """
    if log_file is None:
        # Lazy import: bricht circular import (config → utils → logging → config)
        from config import LOG_FILE

        log_file = LOG_FILE

    get_session_id()

    # Verhindere doppelte Handler bei mehrfachem Aufruf
    if logger.handlers:
        logger.setLevel(logging.DEBUG if debug else logging.INFO)
        return

    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    handler_added = False

    # Datei-Handler mit Rotation (max 1MB, 3 Backups)
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_utc_formatter())
        logger.addHandler(file_handler)
        handler_added = True
    except OSError as e:
        # Keine harten Fehler, Logging darf App-Start nicht blockieren
        print(f"Logdatei nicht beschreibbar ({log_file}): {e}", file=sys.stderr)

    if not handler_added or debug:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        stderr_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(stderr_handler)


def log(message: str) -> None:
    """Status-Meldung auf stderr.

    Warum stderr? Hält stdout sauber für Pipes.
    """
    print(message, file=sys.stderr)


def error(message: str) -> None:
    """Fehlermeldung auf stderr."""
    print(f"Fehler: {message}", file=sys.stderr)
