"""Session-Steuerung: start / stop / toggle.

Jeder Befehl ist ein eigener, kurzlebiger Prozess. Gemeinsamer Zustand
liegt ausschließlich im StateStore (Lock-Marker + Deskriptor).

Reihenfolge in `stop`: Watchdog entschärfen → Recorder beenden und abwarten
→ Zustand PROCESSING → Lock freigeben → Pipeline. Der Lock fällt also erst,
wenn der Recorder wirklich weg ist; ein neues `start` bekommt nie die
Ressourcen eines noch laufenden Recorders.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from config import SESSION_ID_FORMAT, AppPaths
from utils.errors import NoActiveSession, PipelineError, RecorderError
from utils.logging import get_session_id

from .pipeline import PipelineResult, TranscriptionPipeline
from .state import SessionDescriptor, SessionState
from .store import StateStore

if TYPE_CHECKING:
    from audio.recording import RecorderProcess
    from desktop import ProcessController

    from .watchdog import Watchdog

logger = logging.getLogger("tapscribe")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    def __init__(
        self,
        paths: AppPaths,
        store: StateStore,
        recorder: "RecorderProcess",
        watchdog: "Watchdog",
        pipeline: TranscriptionPipeline,
        controller: "ProcessController",
        *,
        watchdog_seconds: float,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.paths = paths
        self.store = store
        self.recorder = recorder
        self.watchdog = watchdog
        self.pipeline = pipeline
        self.controller = controller
        self.watchdog_seconds = watchdog_seconds
        self._now = now

    # -------------------------------------------------------------------------
    # start
    # -------------------------------------------------------------------------

    def start(self) -> bool:
        """Startet eine Aufnahme.

        Returns:
            False, wenn bereits eine (lebende) Aufnahme läuft – dann passiert nichts

        Raises:
            RecorderError: Aufnahme-Prozess ließ sich nicht starten
        """
        self.paths.ensure()

        if not self.store.try_acquire():
            if not self._recover_stale_lock() or not self.store.try_acquire():
                logger.info(f"[{get_session_id()}] Aufnahme läuft bereits, ignoriere start")
                return False
        else:
            self._report_orphaned_session()

        session_id = self._new_session_id()
        audio_path = self.paths.recording(session_id, ".wav")
        self.store.save(SessionDescriptor(session_id, str(audio_path)))

        recorder_pid: int | None = None
        try:
            recorder_pid = self.recorder.start_capture(audio_path)
            self.store.recorder_pid = recorder_pid
            self.store.watchdog_pid = self.watchdog.arm(session_id, self.watchdog_seconds)
        except OSError as e:
            if recorder_pid is not None:
                self.recorder.stop_capture(recorder_pid)
            self.store.clear()
            self.store.release()
            raise RecorderError(f"Aufnahme konnte nicht gestartet werden: {e}") from e

        notification_id = self.pipeline.notify(
            "Aufnahme läuft", "Erneut drücken zum Beenden"
        )
        if notification_id:
            self.store.notification_id = notification_id

        logger.info(f"[{get_session_id()}] Session {session_id} gestartet")
        return True

    def _new_session_id(self) -> str:
        base = self._now().astimezone(timezone.utc).strftime(SESSION_ID_FORMAT)
        session_id, n = base, 1
        # Zwei Sessions in derselben Sekunde dürfen sich nicht überschreiben
        while any(
            self.paths.recording(session_id, suffix).exists()
            for suffix in (".wav", ".mp3", ".txt")
        ):
            session_id = f"{base}-{n}"
            n += 1
        return session_id

    def _recover_stale_lock(self) -> bool:
        """Räumt einen Lock ab, dessen Recorder nicht mehr lebt.

        Returns:
            True wenn der Lock verwaist war und entfernt wurde
        """
        descriptor = self.store.load()
        if descriptor is not None and descriptor.recorder_pid is not None:
            if self.controller.owns(descriptor.recorder_pid):
                return False
        else:
            # Zwischen Lock und Recorder-Start: der start-Prozess lebt noch
            owner = self.store.lock_owner()
            if owner is not None and self.controller.is_running(owner):
                return False

        session = descriptor.session_id if descriptor else "?"
        logger.warning(
            f"[{get_session_id()}] Verwaister Lock (Session {session}), räume auf"
        )
        if descriptor is not None:
            self.watchdog.disarm(descriptor.watchdog_pid)
        self.store.clear()
        self.store.release()
        return True

    def _report_orphaned_session(self) -> None:
        descriptor = self.store.load()
        if descriptor is None or descriptor.state is not SessionState.PROCESSING:
            return
        if descriptor.owner_pid and self.controller.is_running(descriptor.owner_pid):
            logger.info(
                f"[{get_session_id()}] Session {descriptor.session_id} wird noch verarbeitet"
            )
            return
        logger.warning(
            f"[{get_session_id()}] Session {descriptor.session_id} brach während der "
            f"Verarbeitung ab, Artefakte bleiben liegen: {descriptor.audio_path}"
        )

    # -------------------------------------------------------------------------
    # stop
    # -------------------------------------------------------------------------

    def stop(self, trigger: str = "user") -> PipelineResult:
        """Beendet die Aufnahme und führt die Pipeline synchron aus.

        Args:
            trigger: "user" oder "watchdog" (nur fürs Logging)

        Raises:
            NoActiveSession: Kein Lock gehalten oder kein Recorder zur Session
            PipelineError: Transcode oder Upload fehlgeschlagen
        """
        if not self.store.is_held():
            raise NoActiveSession()

        descriptor = self.store.load()
        if descriptor is None:
            self.store.release()
            raise NoActiveSession("Lock ohne Session-Daten gefunden und entfernt")

        sid = get_session_id()
        if descriptor.recorder_pid is None:
            # start wurde zwischen Deskriptor und Recorder-Spawn abgebrochen
            self.watchdog.disarm(descriptor.watchdog_pid)
            self.store.clear(descriptor.session_id)
            self.store.release()
            raise NoActiveSession("Session ohne Recorder gefunden und entfernt")

        logger.info(f"[{sid}] Stop ({trigger}): Session {descriptor.session_id}")

        self.watchdog.disarm(descriptor.watchdog_pid)
        self.recorder.stop_capture(descriptor.recorder_pid)

        descriptor = dataclasses.replace(
            descriptor,
            state=SessionState.PROCESSING,
            recorder_pid=None,
            watchdog_pid=None,
            owner_pid=os.getpid(),
        )
        self.store.save(descriptor)
        self.store.release()

        try:
            result = self.pipeline.run(descriptor)
        except PipelineError as e:
            logger.error(f"[{sid}] Pipeline abgebrochen ({e.stage}): {e}")
            self.pipeline.notify(
                "Transkription fehlgeschlagen",
                str(e),
                urgency="critical",
                replace_id=descriptor.notification_id,
            )
            raise
        finally:
            self.store.clear(descriptor.session_id)

        logger.info(f"[{sid}] Session {descriptor.session_id} abgeschlossen")
        return result

    # -------------------------------------------------------------------------
    # toggle
    # -------------------------------------------------------------------------

    def toggle(self) -> bool | PipelineResult:
        if self.store.is_held():
            return self.stop()
        return self.start()

    def notify_error(self, message: str) -> None:
        """Fehler-Benachrichtigung für die CLI (best effort)."""
        self.pipeline.notify("TapScribe", message, urgency="critical")


__all__ = ["SessionManager"]
