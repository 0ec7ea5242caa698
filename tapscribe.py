#!/usr/bin/env python3
"""
CLI-Einstiegspunkt für TapScribe.

Gedacht für einen globalen Hotkey: `toggle` startet eine Aufnahme bzw.
beendet sie, transkribiert, kopiert das Ergebnis in die Zwischenablage und
fügt es im aktiven Fenster ein.

Transkripte werden auf stdout ausgegeben, Status auf stderr.

Usage:
    tapscribe start
    tapscribe stop
    tapscribe toggle
"""

import logging
from typing import Annotated

import typer

from cli.types import USAGE, Command
from config import DEFAULT_PATHS, AppPaths
from utils.env import load_environment
from utils.errors import ConfigError, PipelineError, TapScribeError, UserError
from utils.logging import error, get_session_id, log, setup_logging
from utils.settings import Settings, load_settings

# Typer-App
app = typer.Typer(
    help="Sprachaufnahme per Hotkey transkribieren und einfügen",
    add_completion=False,
)

logger = logging.getLogger("tapscribe")


def build_manager(settings: Settings, paths: AppPaths):
    """Verdrahtet den SessionManager mit den echten Kollaborateuren."""
    from audio.recording import RecorderProcess
    from desktop import get_clipboard, get_notifier, get_paster, get_process_controller
    from providers import get_transcriber
    from session import SessionManager, StateStore, TranscriptionPipeline, Watchdog
    from session.timers import schedule_dismissal

    controller = get_process_controller()
    pipeline = TranscriptionPipeline(
        paths,
        transcriber=get_transcriber(settings),
        notifier=get_notifier(),
        clipboard=get_clipboard(),
        paster=get_paster(),
        schedule_dismissal=lambda notification_id, delay: schedule_dismissal(
            controller, notification_id, delay, log_file=paths.log_file
        ),
        keep_compressed=settings.keep_compressed,
        auto_paste=settings.auto_paste,
        dismiss_seconds=settings.dismiss_seconds,
    )
    return SessionManager(
        paths,
        StateStore(paths),
        RecorderProcess(controller, log_file=paths.log_file),
        Watchdog(controller, log_file=paths.log_file),
        pipeline,
        controller,
        watchdog_seconds=settings.watchdog_seconds,
    )


def bootstrap(paths: AppPaths, debug: bool = False) -> Settings:
    """Verzeichnisse, Environment, Logging, Settings – in dieser Reihenfolge.

    Raises:
        ConfigError: Pflichtwerte fehlen
    """
    paths.ensure()
    load_environment(paths.env_file)
    setup_logging(debug=debug, log_file=paths.log_file)
    return load_settings(paths.env_file)


@app.command()
def main(
    command: Annotated[
        str | None,
        typer.Argument(help="start, stop oder toggle", show_default=False),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option(help="Debug-Logging aktivieren"),
    ] = False,
) -> None:
    """Aufnahme starten, stoppen oder umschalten.

    Beispiele:
        tapscribe toggle
        tapscribe stop --debug
    """
    if command is None:
        log(USAGE)
        raise typer.Exit(1)
    try:
        cmd = Command(command)
    except ValueError:
        error(f"Unbekannter Befehl: {command!r}")
        log(USAGE)
        raise typer.Exit(1)

    try:
        settings = bootstrap(DEFAULT_PATHS, debug=debug)
    except ConfigError as e:
        logger.error(f"[{get_session_id()}] {e}")
        error(str(e))
        raise typer.Exit(1)

    logger.debug(f"[{get_session_id()}] Befehl: {cmd.value}")
    manager = build_manager(settings, DEFAULT_PATHS)

    try:
        if cmd is Command.start:
            result = manager.start()
        elif cmd is Command.stop:
            result = manager.stop()
        else:
            result = manager.toggle()
    except UserError as e:
        logger.error(f"[{get_session_id()}] {e}")
        error(str(e))
        raise typer.Exit(1)
    except PipelineError as e:
        # Benachrichtigung kam bereits aus dem SessionManager
        error(str(e))
        raise typer.Exit(1)
    except TapScribeError as e:
        logger.error(f"[{get_session_id()}] {e}")
        manager.notify_error(str(e))
        error(str(e))
        raise typer.Exit(1)

    if result is True:
        log("🔴 Aufnahme läuft")
    elif result is False:
        log("Aufnahme läuft bereits")
    else:
        print(result.transcript)


if __name__ == "__main__":
    app()
