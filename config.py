"""Zentrale Konfiguration für TapScribe.

Gemeinsame Konstanten für Audio, Session-Handling und Dateipfade.
Vermeidet Duplikation zwischen Modulen.
"""

import os
from dataclasses import dataclass
from pathlib import Path

# =============================================================================
# Audio-Konfiguration
# =============================================================================

# Sprach-APIs arbeiten intern mit 16 kHz mono, höhere Raten vergrößern nur den Upload
SAMPLE_RATE = 16000
CHANNELS = 1
BLOCKSIZE = 1024

# Komprimiertes Format für den Upload (libsndfile >= 1.1 kann MP3 schreiben)
UPLOAD_FORMAT = "MP3"
UPLOAD_SUBTYPE = "MPEG_LAYER_III"

# =============================================================================
# Session-Defaults
# =============================================================================

WATCHDOG_TIMEOUT_SECONDS = 3600  # Sicherheitsgrenze, kein UX-Feature
STOP_SETTLE_SECONDS = 0.2  # Encoder/Puffer nach SIGTERM ausschreiben lassen
RECORDER_EXIT_TIMEOUT = 5.0  # Danach SIGKILL
DISMISS_DELAY_SECONDS = 2.0
UPLOAD_TIMEOUT_SECONDS = 120.0
UPLOAD_MAX_RETRIES = 1

# Session-ID: UTC, Sekundenauflösung, zugleich Basisname der Artefakte
SESSION_ID_FORMAT = "%Y%m%d-%H%M%S"

# =============================================================================
# Statistik
# =============================================================================

STATS_HEADER = (
    "Microsec_Since_1970",
    "UTC_Time",
    "Local_Time",
    "Duration_Sec",
    "Word_Count",
    "WPS",
    "WPM",
    "Processing_Sec",
)
STATS_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# =============================================================================
# Lokale Pfade
# =============================================================================

APP_NAME = "tapscribe"

# User-Verzeichnis für Konfiguration, Aufnahmen und Logs
USER_CONFIG_DIR = Path(
    os.getenv("TAPSCRIBE_HOME") or Path.home() / f".{APP_NAME}"
).expanduser()


@dataclass(frozen=True)
class AppPaths:
    """Dateisystem-Layout unterhalb des User-Verzeichnisses."""

    base: Path

    @property
    def recordings_dir(self) -> Path:
        return self.base / "recordings"

    @property
    def state_dir(self) -> Path:
        # Transienter Zustand: Lock-Marker und Session-Deskriptor
        return self.base / "state"

    @property
    def lock_file(self) -> Path:
        return self.state_dir / "recording.lock"

    @property
    def session_file(self) -> Path:
        return self.state_dir / "session.json"

    @property
    def stats_file(self) -> Path:
        return self.base / "statistics.tsv"

    @property
    def log_file(self) -> Path:
        return self.base / f"{APP_NAME}.log"

    @property
    def env_file(self) -> Path:
        return self.base / ".env"

    def recording(self, session_id: str, suffix: str) -> Path:
        """Artefakt-Pfad einer Session, z.B. recording(id, ".wav")."""
        return self.recordings_dir / f"{session_id}{suffix}"

    def ensure(self) -> None:
        """Legt alle Verzeichnisse an (idempotent)."""
        for directory in (self.base, self.recordings_dir, self.state_dir):
            directory.mkdir(parents=True, exist_ok=True)


DEFAULT_PATHS = AppPaths(USER_CONFIG_DIR)
LOG_FILE = DEFAULT_PATHS.log_file


__all__ = [
    # Audio
    "SAMPLE_RATE",
    "CHANNELS",
    "BLOCKSIZE",
    "UPLOAD_FORMAT",
    "UPLOAD_SUBTYPE",
    # Session
    "WATCHDOG_TIMEOUT_SECONDS",
    "STOP_SETTLE_SECONDS",
    "RECORDER_EXIT_TIMEOUT",
    "DISMISS_DELAY_SECONDS",
    "UPLOAD_TIMEOUT_SECONDS",
    "UPLOAD_MAX_RETRIES",
    "SESSION_ID_FORMAT",
    # Statistik
    "STATS_HEADER",
    "STATS_TIME_FORMAT",
    # Paths
    "APP_NAME",
    "USER_CONFIG_DIR",
    "AppPaths",
    "DEFAULT_PATHS",
    "LOG_FILE",
]
