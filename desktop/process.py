"""Hintergrund-Prozesse und Prozess-Kontrolle.

Recorder, Watchdog und das verzögerte Schließen der Benachrichtigung laufen
als eigene, von der aufrufenden Shell gelöste Prozesse (neue Session via
setsid). Sie überleben damit den kurzlebigen `start`/`stop`-Aufruf.
"""

import logging
import os
import signal
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable

logger = logging.getLogger("tapscribe.desktop.process")

WORKER_SCRIPT = Path(__file__).resolve().parent.parent / "tapscribe_worker.py"


def worker_command(*args: str) -> list[str]:
    """Kommandozeile für einen internen Worker-Prozess."""
    return [sys.executable, str(WORKER_SCRIPT), *args]


def is_tapscribe_process(pid: int) -> bool:
    """Prüft ob die PID zu einem TapScribe-Worker gehört.

    Schützt vor PID-Recycling: eine PID aus dem State-Verzeichnis kann nach
    einem Crash längst einem fremden Prozess gehören.
    """
    try:
        result = subprocess.run(
            ["ps", "-p", str(pid), "-o", "command="],
            capture_output=True,
            text=True,
            timeout=1,
        )
        if result.returncode != 0:
            return False
        return WORKER_SCRIPT.name in result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        return False


class ProcessController:
    """POSIX-Prozess-Kontrolle (Linux, macOS)."""

    def __init__(
        self,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sleep = sleep
        self._clock = clock

    def spawn(self, command: list[str], log_file: Path | None = None) -> int:
        """Startet einen losgelösten Prozess und kehrt sofort zurück.

        Args:
            command: Kommando als Liste
            log_file: Optional: stderr des Kindes anhängen (Diagnose)

        Returns:
            PID des gestarteten Prozesses

        Raises:
            OSError: Wenn der Prozess nicht gestartet werden kann
        """
        stderr = subprocess.DEVNULL
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            stderr = log_file.open("ab")
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=stderr,
                start_new_session=True,
                close_fds=True,
            )
        finally:
            if log_file is not None:
                stderr.close()
        logger.debug(f"Prozess gestartet (PID {process.pid}): {command[1:]}")
        return process.pid

    def is_running(self, pid: int) -> bool:
        """Prüft ob Prozess läuft via Signal 0."""
        try:
            os.kill(pid, 0)  # Signal 0 = Existenz-Check
            return True
        except (ProcessLookupError, PermissionError):
            return False

    def owns(self, pid: int) -> bool:
        """True, wenn die PID lebt und ein TapScribe-Worker ist."""
        return self.is_running(pid) and is_tapscribe_process(pid)

    def terminate(self, pid: int, timeout: float = 5.0) -> bool:
        """Beendet einen Prozess: erst SIGTERM, nach `timeout` SIGKILL.

        Kehrt erst zurück, wenn der Prozess weg ist (oder SIGKILL gesendet
        wurde). Idempotent: ein bereits beendeter Prozess ist kein Fehler.

        Returns:
            True wenn der Prozess noch lief
        """
        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            logger.debug(f"Prozess {pid} existiert nicht mehr")
            return False
        except PermissionError:
            logger.error(f"Keine Berechtigung für PID {pid}")
            return False

        deadline = self._clock() + timeout
        while self._clock() < deadline:
            if not self.is_running(pid):
                logger.debug(f"Prozess {pid} beendet (SIGTERM)")
                return True
            self._sleep(0.05)

        try:
            os.kill(pid, signal.SIGKILL)
            logger.warning(f"Prozess {pid} reagiert nicht, SIGKILL gesendet")
        except ProcessLookupError:
            pass
        return True


def get_process_controller() -> ProcessController:
    """Gibt den Prozess-Controller für die aktuelle Plattform zurück."""
    if sys.platform == "win32":
        raise NotImplementedError("Hintergrund-Aufnahme benötigt POSIX-Signale")
    return ProcessController()


__all__ = [
    "ProcessController",
    "get_process_controller",
    "is_tapscribe_process",
    "worker_command",
    "WORKER_SCRIPT",
]
