from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any


class SessionState(Enum):
    IDLE = "idle"
    RECORDING = "recording"  # Lock gehalten, Recorder läuft
    PROCESSING = "processing"  # Lock freigegeben, Pipeline läuft


@dataclass
class SessionDescriptor:
    """Persistierter Zustand der aktuellen Session.

    Wird als JSON im State-Verzeichnis abgelegt, damit kurzlebige
    Aufrufe (start/stop/toggle) ohne gemeinsamen Speicher auskommen.
    """

    session_id: str
    audio_path: str
    state: SessionState = SessionState.RECORDING
    recorder_pid: int | None = None
    watchdog_pid: int | None = None
    notification_id: str | None = None
    # Prozess, der gerade die Pipeline ausführt (nur in PROCESSING gesetzt)
    owner_pid: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["state"] = self.state.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionDescriptor":
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        values["state"] = SessionState(values.get("state", SessionState.RECORDING.value))
        return cls(**values)
