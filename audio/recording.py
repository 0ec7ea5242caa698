"""Audio-Aufnahme für TapScribe.

Die Aufnahme läuft in einem eigenen Hintergrund-Prozess
(`tapscribe_worker.py record <pfad>`), der den `start`-Aufruf überlebt.
`stop` beendet ihn per SIGTERM; der Worker schreibt dann die restlichen
Puffer und schließt die WAV-Datei sauber ab.
"""

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Callable

# Zentrale Konfiguration importieren
from config import (
    BLOCKSIZE,
    CHANNELS,
    RECORDER_EXIT_TIMEOUT,
    SAMPLE_RATE,
    STOP_SETTLE_SECONDS,
)
from desktop.process import ProcessController, worker_command
from utils.logging import get_session_id

logger = logging.getLogger("tapscribe")


class AudioRecorder:
    """Mikrofon-Aufnahme direkt in eine Datei (mono, 16 kHz, PCM16).

    Chunks werden während der Aufnahme geschrieben, nicht erst am Ende –
    so gehen bei einem harten Abbruch nur die letzten Millisekunden verloren.

    Usage:
        recorder = AudioRecorder(Path("out.wav"))
        signal.signal(signal.SIGTERM, lambda *_: recorder.request_stop())
        seconds = recorder.run()  # blockiert bis request_stop()
    """

    def __init__(
        self,
        output_path: Path,
        sample_rate: int = SAMPLE_RATE,
        channels: int = CHANNELS,
        blocksize: int = BLOCKSIZE,
    ):
        self.output_path = output_path
        self.sample_rate = sample_rate
        self.channels = channels
        self.blocksize = blocksize

        self._chunks: queue.Queue = queue.Queue()
        self._stop_event = threading.Event()

    def _audio_callback(self, indata, _frames, _time_info, status):
        """Callback: Reicht Audio-Chunks an den Schreib-Loop weiter."""
        if status:
            logger.debug(f"Audio-Status: {status}")
        self._chunks.put(indata.copy())

    def request_stop(self) -> None:
        """Signalisiert, dass die Aufnahme beendet werden soll."""
        self._stop_event.set()

    def run(self) -> float:
        """Nimmt auf, bis request_stop() aufgerufen wird.

        Returns:
            Aufgenommene Dauer in Sekunden
        """
        import sounddevice as sd
        import soundfile as sf

        frames = 0
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        with sf.SoundFile(
            self.output_path,
            mode="w",
            samplerate=self.sample_rate,
            channels=self.channels,
            subtype="PCM_16",
        ) as out:
            with sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                blocksize=self.blocksize,
                dtype="float32",
                callback=self._audio_callback,
            ):
                logger.info(f"[{get_session_id()}] Aufnahme gestartet: {self.output_path}")
                while not self._stop_event.is_set():
                    try:
                        chunk = self._chunks.get(timeout=0.1)
                    except queue.Empty:
                        continue
                    out.write(chunk)
                    frames += len(chunk)

            # Stream ist zu – was noch in der Queue liegt, gehört zur Aufnahme
            while True:
                try:
                    chunk = self._chunks.get_nowait()
                except queue.Empty:
                    break
                out.write(chunk)
                frames += len(chunk)

        seconds = frames / self.sample_rate
        logger.info(f"[{get_session_id()}] Aufnahme beendet: {seconds:.1f}s")
        return seconds


class RecorderProcess:
    """Startet und stoppt den Aufnahme-Worker."""

    def __init__(
        self,
        controller: ProcessController,
        log_file: Path | None = None,
        settle_seconds: float = STOP_SETTLE_SECONDS,
        exit_timeout: float = RECORDER_EXIT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._controller = controller
        self._log_file = log_file
        self._settle_seconds = settle_seconds
        self._exit_timeout = exit_timeout
        self._sleep = sleep

    def start_capture(self, output_path: Path) -> int:
        """Startet die Aufnahme im Hintergrund und kehrt sofort zurück.

        Returns:
            PID des Aufnahme-Prozesses
        """
        pid = self._controller.spawn(
            worker_command("record", str(output_path)), log_file=self._log_file
        )
        logger.info(f"[{get_session_id()}] Recorder gestartet (PID {pid})")
        return pid

    def stop_capture(self, pid: int) -> None:
        """Beendet den Recorder und wartet, bis er weg ist.

        Danach eine kurze Pause, damit das letzte Wort nicht abgeschnitten wird.
        """
        if self._controller.owns(pid):
            self._controller.terminate(pid, timeout=self._exit_timeout)
            logger.info(f"[{get_session_id()}] Recorder gestoppt (PID {pid})")
        else:
            logger.warning(
                f"[{get_session_id()}] Recorder (PID {pid}) lief nicht mehr"
            )
        self._sleep(self._settle_seconds)


def record_until_signalled(output_path: Path) -> float:
    """Body des Aufnahme-Workers: nimmt auf bis SIGTERM/SIGINT."""
    import signal

    recorder = AudioRecorder(output_path)

    def _stop(_signum, _frame):
        recorder.request_stop()

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)
    return recorder.run()


__all__ = ["AudioRecorder", "RecorderProcess", "record_until_signalled"]
