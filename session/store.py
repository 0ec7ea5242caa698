"""Persistenter Session-Zustand im Dateisystem.

Zwei Dateien im State-Verzeichnis:
- `recording.lock`: Lock-Marker. Existenz = Aufnahme läuft.
- `session.json`: Deskriptor der aktuellen Session (Handles, Zustand).

Der Lock wird mit O_CREAT|O_EXCL angelegt – das Betriebssystem garantiert,
dass von zwei gleichzeitigen `start`-Aufrufen nur einer gewinnt.
Der Deskriptor wird per Temp-Datei + os.replace() geschrieben, ein Leser
sieht also nie eine halb geschriebene Datei.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from pathlib import Path

from config import AppPaths
from utils.errors import NoActiveSession

from .state import SessionDescriptor, SessionState

logger = logging.getLogger("tapscribe.session.store")


def atomic_write_text(path: Path, text: str) -> None:
    """Schreibt Text atomar (Temp-Datei im selben Verzeichnis, dann rename)."""
    tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


class StateStore:
    """Lock-Marker und Session-Deskriptor.

    Einschränkung: zwei `stop`-Aufrufe im selben Moment können beide den
    Lock sehen. Der Lock selbst ist atomar, der Übergang Recording →
    Processing nicht.
    """

    def __init__(self, paths: AppPaths) -> None:
        self.paths = paths

    # -------------------------------------------------------------------------
    # Lock
    # -------------------------------------------------------------------------

    def try_acquire(self) -> bool:
        """Legt den Lock-Marker an. False, wenn bereits vorhanden."""
        self.paths.state_dir.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(
                self.paths.lock_file, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644
            )
        except FileExistsError:
            return False
        with os.fdopen(fd, "w") as f:
            f.write(str(os.getpid()))
        logger.debug(f"Lock gesetzt: {self.paths.lock_file}")
        return True

    def release(self) -> None:
        """Entfernt den Lock-Marker (idempotent)."""
        self.paths.lock_file.unlink(missing_ok=True)
        logger.debug("Lock freigegeben")

    def is_held(self) -> bool:
        return self.paths.lock_file.exists()

    def lock_owner(self) -> int | None:
        """PID des Prozesses, der den Lock angelegt hat (der `start`-Aufruf)."""
        try:
            return int(self.paths.lock_file.read_text().strip())
        except (FileNotFoundError, ValueError):
            return None

    # -------------------------------------------------------------------------
    # Deskriptor
    # -------------------------------------------------------------------------

    def load(self) -> SessionDescriptor | None:
        """Liest den Deskriptor. None, wenn keiner existiert oder er kaputt ist."""
        try:
            raw = self.paths.session_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return SessionDescriptor.from_dict(json.loads(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"Session-Deskriptor unlesbar, ignoriere: {e}")
            return None

    def save(self, descriptor: SessionDescriptor) -> None:
        self.paths.state_dir.mkdir(parents=True, exist_ok=True)
        atomic_write_text(self.paths.session_file, json.dumps(descriptor.to_dict()))

    def update(self, **changes) -> SessionDescriptor:
        """Ändert Felder des aktuellen Deskriptors.

        Raises:
            NoActiveSession: Wenn kein Deskriptor existiert
        """
        descriptor = self.load()
        if descriptor is None:
            raise NoActiveSession()
        descriptor = dataclasses.replace(descriptor, **changes)
        self.save(descriptor)
        return descriptor

    def clear(self, session_id: str | None = None) -> None:
        """Löscht den Deskriptor.

        Mit session_id nur dann, wenn er noch zu dieser Session gehört –
        ein inzwischen gestarteter Nachfolger bleibt unangetastet.
        """
        if session_id is not None:
            current = self.load()
            if current is not None and current.session_id != session_id:
                return
        self.paths.session_file.unlink(missing_ok=True)

    @property
    def state(self) -> SessionState:
        descriptor = self.load()
        return descriptor.state if descriptor else SessionState.IDLE

    # -------------------------------------------------------------------------
    # Typisierte Accessoren der aktuellen Session
    # -------------------------------------------------------------------------

    @property
    def audio_path(self) -> Path | None:
        descriptor = self.load()
        return Path(descriptor.audio_path) if descriptor else None

    @audio_path.setter
    def audio_path(self, value: Path) -> None:
        self.update(audio_path=str(value))

    @property
    def recorder_pid(self) -> int | None:
        descriptor = self.load()
        return descriptor.recorder_pid if descriptor else None

    @recorder_pid.setter
    def recorder_pid(self, value: int | None) -> None:
        self.update(recorder_pid=value)

    @property
    def watchdog_pid(self) -> int | None:
        descriptor = self.load()
        return descriptor.watchdog_pid if descriptor else None

    @watchdog_pid.setter
    def watchdog_pid(self, value: int | None) -> None:
        self.update(watchdog_pid=value)

    @property
    def notification_id(self) -> str | None:
        descriptor = self.load()
        return descriptor.notification_id if descriptor else None

    @notification_id.setter
    def notification_id(self, value: str | None) -> None:
        self.update(notification_id=value)


__all__ = ["StateStore", "atomic_write_text"]
