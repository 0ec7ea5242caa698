"""Transkriptions-Pipeline: Rohaufnahme → zugestellter Text.

Läuft synchron im `stop`-Aufruf, nachdem der Recorder beendet und der Lock
freigegeben wurde:

    transcode → Upload (zeitgemessen) → Transkript speichern → WAV löschen
    → Statistik → Clipboard + Auto-Paste → Abschluss-Benachrichtigung

Transcode- und Upload-Fehler sind fatal (PipelineError). Benachrichtigung,
Clipboard und Paste sind best effort: Fehler werden geloggt, die Pipeline
läuft weiter – das Transkript liegt ja schon auf der Platte.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from audio.convert import probe_duration, transcode
from config import AppPaths
from utils.errors import StatsUnavailable
from utils.logging import get_session_id
from utils.timing import Stopwatch, log_preview

from .state import SessionDescriptor
from .stats import StatisticsRecord, StatisticsRecorder, compute_statistics, format_summary

if TYPE_CHECKING:
    from desktop import ClipboardHandler, Notifier, Paster
    from providers import Transcriber

logger = logging.getLogger("tapscribe")


@contextmanager
def best_effort(what: str):
    """Fehler im Block loggen und weitermachen (nur für Zustellung/Benachrichtigung)."""
    try:
        yield
    except Exception as e:
        logger.warning(f"[{get_session_id()}] {what} fehlgeschlagen: {e}")


@dataclass(frozen=True)
class PipelineResult:
    session_id: str
    transcript: str
    transcript_path: Path
    statistics: StatisticsRecord | None


class TranscriptionPipeline:
    def __init__(
        self,
        paths: AppPaths,
        transcriber: "Transcriber",
        notifier: "Notifier",
        clipboard: "ClipboardHandler",
        paster: "Paster",
        schedule_dismissal: Callable[[str, float], object],
        *,
        keep_compressed: bool = True,
        auto_paste: bool = True,
        dismiss_seconds: float = 2.0,
        transcoder: Callable[[Path, Path], Path] = transcode,
        duration_probe: Callable[[Path], float | None] = probe_duration,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.paths = paths
        self.transcriber = transcriber
        self.notifier = notifier
        self.clipboard = clipboard
        self.paster = paster
        self.schedule_dismissal = schedule_dismissal
        self.keep_compressed = keep_compressed
        self.auto_paste = auto_paste
        self.dismiss_seconds = dismiss_seconds
        self.stats = StatisticsRecorder(paths.stats_file)
        self._transcode = transcoder
        self._probe_duration = duration_probe
        self._clock = clock

    def notify(
        self,
        title: str,
        body: str = "",
        *,
        urgency: str = "normal",
        replace_id: str | None = None,
    ) -> str | None:
        """Best-effort Benachrichtigung; gibt die (ggf. neue) ID zurück."""
        notification_id = replace_id
        with best_effort("Benachrichtigung"):
            notification_id = (
                self.notifier.notify(title, body, urgency=urgency, replace_id=replace_id)
                or replace_id
            )
        return notification_id

    def run(self, session: SessionDescriptor) -> PipelineResult:
        """Verarbeitet eine gestoppte Session.

        Raises:
            TranscodeError: Rohaufnahme fehlt oder ist nicht konvertierbar
            UploadError: Transkriptions-Dienst nicht erreichbar/fehlerhaft
        """
        sid = get_session_id()
        wav_path = Path(session.audio_path)
        mp3_path = wav_path.with_suffix(".mp3")
        txt_path = wav_path.with_suffix(".txt")
        stats_path = wav_path.with_suffix(".stats")

        # 1. Komprimieren – ohne gültige Datei kein Upload
        self._transcode(wav_path, mp3_path)

        # 2. Upload (die gemessene Zeit ist die Verarbeitungsdauer)
        notification_id = self.notify(
            "Transkribiere…", mp3_path.name, replace_id=session.notification_id
        )
        with Stopwatch(self._clock) as upload:
            response = self.transcriber.transcribe(mp3_path)
        logger.info(f"[{sid}] Upload + Transkription: {upload.elapsed:.2f}s")

        # 3. Transkript speichern, Rohaufnahme verwerfen
        transcript = response.strip()
        txt_path.write_text(transcript, encoding="utf-8")
        wav_path.unlink(missing_ok=True)
        logger.info(f"[{sid}] Transkript: {log_preview(transcript)}")

        # 4. Statistik
        statistics: StatisticsRecord | None = None
        try:
            statistics = compute_statistics(
                transcript, self._probe_duration(mp3_path), upload.elapsed
            )
        except StatsUnavailable as e:
            logger.warning(f"[{sid}] Keine Statistik für {session.session_id}: {e}")
        else:
            self.stats.record(statistics, stats_path)

        if not self.keep_compressed:
            mp3_path.unlink(missing_ok=True)

        # 5. Zustellung
        self._deliver(transcript)

        # 6. Abschluss
        summary = (
            format_summary(statistics)
            if statistics
            else f"{len(transcript.split())} Wörter"
        )
        notification_id = self.notify(
            "Transkript bereit", summary, replace_id=notification_id
        )
        if notification_id:
            with best_effort("Benachrichtigung schließen"):
                self.schedule_dismissal(notification_id, self.dismiss_seconds)

        return PipelineResult(
            session_id=session.session_id,
            transcript=transcript,
            transcript_path=txt_path,
            statistics=statistics,
        )

    def _deliver(self, transcript: str) -> None:
        if not transcript:
            logger.warning(f"[{get_session_id()}] Leeres Transkript, nichts einzufügen")
            return

        copied = False
        with best_effort("Clipboard"):
            copied = self.clipboard.copy(transcript)
        if not copied:
            logger.warning(f"[{get_session_id()}] Zwischenablage nicht verfügbar")
            return

        if self.auto_paste:
            with best_effort("Auto-Paste"):
                self.paster.paste()


__all__ = ["TranscriptionPipeline", "PipelineResult", "best_effort"]
