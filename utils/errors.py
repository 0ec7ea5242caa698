"""Fehler-Taxonomie für TapScribe.

ConfigError und UserError beenden den Aufruf mit Exit-Code 1,
PipelineError ebenso (Artefakte bleiben zur Diagnose liegen).
Benachrichtigungs- und Zustell-Fehler sind keine Exceptions,
sie werden nur als Warnung geloggt (siehe session.pipeline.best_effort).
"""


class TapScribeError(Exception):
    """Basisklasse aller TapScribe-Fehler."""

    exit_code = 1


class ConfigError(TapScribeError):
    """Konfiguration fehlt oder ist unvollständig."""


class UserError(TapScribeError):
    """Bedienfehler, z.B. `stop` ohne laufende Aufnahme."""


class NoActiveSession(UserError):
    def __init__(self, message: str = "Keine aktive Aufnahme") -> None:
        super().__init__(message)


class RecorderError(TapScribeError):
    """Aufnahme-Prozess konnte nicht gestartet werden."""


class PipelineError(TapScribeError):
    """Fataler Fehler in der Verarbeitung nach dem Stoppen."""

    stage = "pipeline"


class TranscodeError(PipelineError):
    stage = "transcode"


class UploadError(PipelineError):
    stage = "upload"


class StatsUnavailable(TapScribeError):
    """Statistik nicht berechenbar (Audiodauer 0 oder unbekannt)."""


__all__ = [
    "TapScribeError",
    "ConfigError",
    "UserError",
    "NoActiveSession",
    "RecorderError",
    "PipelineError",
    "TranscodeError",
    "UploadError",
    "StatsUnavailable",
]
