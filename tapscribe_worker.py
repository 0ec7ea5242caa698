#!/usr/bin/env python3
"""
Interne Hintergrund-Prozesse von TapScribe.

Wird nicht direkt aufgerufen – `tapscribe start/stop` startet diese
Kommandos losgelöst (siehe desktop.process.worker_command):

    record <wav>                Aufnahme bis SIGTERM
    watchdog <session> --timeout N
                                Stop erzwingen, falls die Session dann noch läuft
    dismiss <id> --delay N      Benachrichtigung verzögert schließen

SIGTERM bricht watchdog/dismiss ab, bevor sie auslösen.
"""

import logging
import signal
import threading
from pathlib import Path
from typing import Annotated

import typer

from config import DEFAULT_PATHS
from utils.errors import TapScribeError
from utils.logging import get_session_id, setup_logging

app = typer.Typer(help="TapScribe Hintergrund-Prozesse (intern)", add_completion=False)

logger = logging.getLogger("tapscribe")


def _cancel_on_sigterm() -> threading.Event:
    cancelled = threading.Event()
    signal.signal(signal.SIGTERM, lambda _signum, _frame: cancelled.set())
    return cancelled


@app.command()
def record(
    output: Annotated[Path, typer.Argument(help="Ziel-WAV-Datei")],
) -> None:
    """Nimmt vom Standard-Mikrofon auf, bis SIGTERM kommt."""
    from audio.recording import record_until_signalled

    setup_logging(log_file=DEFAULT_PATHS.log_file)
    try:
        record_until_signalled(output)
    except Exception as e:
        # PortAudio-/libsndfile-Fehler: ohne Aufnahme scheitert später der Transcode
        logger.error(f"[{get_session_id()}] Aufnahme fehlgeschlagen: {e}")
        raise typer.Exit(1)


@app.command()
def watchdog(
    session_id: Annotated[str, typer.Argument(help="Überwachte Session")],
    timeout: Annotated[float, typer.Option(help="Sekunden bis zum Zwangs-Stop")],
) -> None:
    """Stoppt die Session nach `timeout` Sekunden über den normalen Stop-Pfad."""
    from session import StateStore, run_watchdog
    from tapscribe import bootstrap, build_manager

    setup_logging(log_file=DEFAULT_PATHS.log_file)
    cancelled = _cancel_on_sigterm()

    def _force_stop() -> None:
        settings = bootstrap(DEFAULT_PATHS)
        build_manager(settings, DEFAULT_PATHS).stop(trigger="watchdog")

    try:
        run_watchdog(
            session_id, timeout, StateStore(DEFAULT_PATHS), _force_stop, cancelled
        )
    except TapScribeError as e:
        logger.error(f"[{get_session_id()}] Watchdog-Stop fehlgeschlagen: {e}")
        raise typer.Exit(1)


@app.command()
def dismiss(
    notification_id: Annotated[str, typer.Argument(help="Notification-ID")],
    delay: Annotated[float, typer.Option(help="Verzögerung in Sekunden")] = 2.0,
) -> None:
    """Schließt eine Benachrichtigung nach `delay` Sekunden."""
    from desktop import get_notifier
    from session.timers import run_deferred

    cancelled = _cancel_on_sigterm()
    run_deferred(delay, lambda: get_notifier().close(notification_id), cancelled)


if __name__ == "__main__":
    app()
