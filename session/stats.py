"""Statistik pro Session.

Zwei Senken mit identischem Format (TSV, Header + Zeile):
- `statistics.tsv`: append-only, eine Zeile pro Session, Header genau einmal
- `<session>.stats`: Sidecar neben den Aufnahme-Artefakten, genau ein Record

In den Dateien steht volle Präzision; gerundet wird erst bei der Anzeige.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import astuple, dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from config import STATS_HEADER, STATS_TIME_FORMAT
from utils.errors import StatsUnavailable

from .store import atomic_write_text

logger = logging.getLogger("tapscribe.session.stats")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class StatisticsRecord:
    microsec_since_1970: int
    utc_time: str
    local_time: str
    duration_sec: float
    word_count: int
    wps: float
    wpm: float
    processing_sec: float

    def __post_init__(self) -> None:
        if self.duration_sec < 0 or self.processing_sec < 0:
            raise ValueError("Dauer und Verarbeitungszeit dürfen nicht negativ sein")
        if self.word_count < 0:
            raise ValueError("Wortanzahl darf nicht negativ sein")

    def row(self) -> list[str]:
        return [str(value) for value in astuple(self)]


def count_words(text: str) -> int:
    """Anzahl whitespace-getrennter Tokens."""
    return len(text.split())


def compute_statistics(
    text: str,
    duration_sec: float | None,
    processing_sec: float,
    now: datetime | None = None,
) -> StatisticsRecord:
    """Berechnet die Kennzahlen einer Session.

    Raises:
        StatsUnavailable: Audiodauer 0 oder unbekannt – kein 0, kein Infinity
    """
    if duration_sec is None or duration_sec <= 0:
        raise StatsUnavailable(f"Audiodauer nicht verwertbar: {duration_sec!r}")

    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    words = count_words(text)
    wps = words / duration_sec

    return StatisticsRecord(
        microsec_since_1970=(now - _EPOCH) // timedelta(microseconds=1),
        utc_time=now.strftime(STATS_TIME_FORMAT),
        local_time=now.astimezone().strftime(STATS_TIME_FORMAT),
        duration_sec=duration_sec,
        word_count=words,
        wps=wps,
        wpm=wps * 60,
        processing_sec=max(0.0, processing_sec),
    )


def format_summary(record: StatisticsRecord) -> str:
    """Menschenlesbare Zusammenfassung (2 Nachkommastellen)."""
    return (
        f"{record.word_count} Wörter in {record.duration_sec:.2f}s · "
        f"{record.wpm:.2f} WPM · Verarbeitung {record.processing_sec:.2f}s"
    )


def _to_tsv(*rows) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter="\t", lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


class StatisticsRecorder:
    """Schreibt StatisticsRecords in Tabelle und Sidecar."""

    def __init__(self, table_path: Path) -> None:
        self.table_path = table_path

    def append(self, record: StatisticsRecord) -> None:
        """Hängt eine Zeile an; der Header wird nur in eine leere Datei geschrieben."""
        self.table_path.parent.mkdir(parents=True, exist_ok=True)
        needs_header = (
            not self.table_path.exists() or self.table_path.stat().st_size == 0
        )
        with self.table_path.open("a", encoding="utf-8", newline="") as f:
            if needs_header:
                f.write(_to_tsv(STATS_HEADER))
            f.write(_to_tsv(record.row()))

    def write_sidecar(self, path: Path, record: StatisticsRecord) -> None:
        atomic_write_text(path, _to_tsv(STATS_HEADER, record.row()))

    def record(self, record: StatisticsRecord, sidecar_path: Path) -> None:
        self.append(record)
        self.write_sidecar(sidecar_path, record)
        logger.debug(f"Statistik gespeichert: {sidecar_path.name}")


def read_table(path: Path) -> list[dict[str, str]]:
    """Liest eine Statistik-Datei (Tabelle oder Sidecar) als Liste von Dicts."""
    with path.open(encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f, delimiter="\t"))


__all__ = [
    "StatisticsRecord",
    "StatisticsRecorder",
    "compute_statistics",
    "count_words",
    "format_summary",
    "read_table",
]
