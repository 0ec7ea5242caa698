"""Verzögerte, abbrechbare Auslöser.

Watchdog und das Schließen der Abschluss-Benachrichtigung laufen als
losgelöste Worker-Prozesse. Deren Body ist `run_deferred()`: warten,
dann auslösen – es sei denn, `cancelled` wurde vorher gesetzt (SIGTERM).
"""

import logging
import threading
from pathlib import Path
from typing import Callable

from desktop.process import ProcessController, worker_command

logger = logging.getLogger("tapscribe.session.timers")


def run_deferred(
    delay: float,
    action: Callable[[], object],
    cancelled: threading.Event | None = None,
) -> bool:
    """Führt `action` nach `delay` Sekunden aus.

    Returns:
        True wenn ausgelöst, False wenn vorher abgebrochen
    """
    cancelled = cancelled or threading.Event()
    if cancelled.wait(timeout=max(0.0, delay)):
        logger.debug("Timer abgebrochen")
        return False
    action()
    return True


def schedule_dismissal(
    controller: ProcessController,
    notification_id: str,
    delay: float,
    log_file: Path | None = None,
) -> int:
    """Schließt eine Benachrichtigung nach `delay` Sekunden, ohne zu blockieren."""
    return controller.spawn(
        worker_command("dismiss", notification_id, "--delay", str(delay)),
        log_file=log_file,
    )


__all__ = ["run_deferred", "schedule_dismissal"]
