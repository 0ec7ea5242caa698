"""Watchdog: beendet vergessene Aufnahmen nach einer festen Obergrenze.

Kein eigener Code-Pfad – beim Auslösen läuft exakt derselbe `stop` wie
bei einem Hotkey-Druck, inklusive Transkription und Statistik.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable

from desktop.process import ProcessController, worker_command
from utils.logging import get_session_id

from .state import SessionState
from .store import StateStore
from .timers import run_deferred

logger = logging.getLogger("tapscribe")


class Watchdog:
    """Scharfschalten/Entschärfen des Watchdog-Workers."""

    def __init__(
        self, controller: ProcessController, log_file: Path | None = None
    ) -> None:
        self._controller = controller
        self._log_file = log_file

    def arm(self, session_id: str, timeout: float) -> int:
        """Startet den Watchdog für `session_id`.

        Returns:
            PID des Watchdog-Prozesses
        """
        pid = self._controller.spawn(
            worker_command("watchdog", session_id, "--timeout", str(timeout)),
            log_file=self._log_file,
        )
        logger.info(
            f"[{get_session_id()}] Watchdog scharf: {timeout:.0f}s (PID {pid})"
        )
        return pid

    def disarm(self, pid: int | None) -> None:
        """Beendet den Watchdog. Bereits ausgelöst oder beendet → No-op."""
        if pid is None or pid == os.getpid():
            return
        if not self._controller.owns(pid):
            logger.debug(f"Watchdog (PID {pid}) läuft nicht mehr")
            return
        self._controller.terminate(pid, timeout=1.0)
        logger.debug(f"Watchdog entschärft (PID {pid})")


def run_watchdog(
    session_id: str,
    timeout: float,
    store: StateStore,
    on_timeout: Callable[[], object],
    cancelled: threading.Event | None = None,
) -> bool:
    """Body des Watchdog-Workers.

    Stoppt nur, wenn der Lock noch von *dieser* Session gehalten wird –
    ein verspäteter Watchdog darf keine Folge-Session beenden.

    Returns:
        True wenn die Session durch den Watchdog gestoppt wurde
    """

    def _fire() -> bool:
        descriptor = store.load()
        if (
            not store.is_held()
            or descriptor is None
            or descriptor.session_id != session_id
            or descriptor.state is not SessionState.RECORDING
        ):
            logger.info(
                f"[{get_session_id()}] Watchdog: Session {session_id} bereits beendet"
            )
            return False

        logger.warning(
            f"[{get_session_id()}] Watchdog: Session {session_id} läuft seit "
            f"{timeout:.0f}s, erzwinge Stop"
        )
        # Eigene PID austragen, sonst beendet der Stop-Pfad diesen Prozess
        store.watchdog_pid = None
        on_timeout()
        return True

    fired: list[bool] = []
    run_deferred(timeout, lambda: fired.append(_fire()), cancelled)
    return bool(fired and fired[0])


__all__ = ["Watchdog", "run_watchdog"]
