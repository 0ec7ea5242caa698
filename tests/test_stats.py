"""Tests für Statistik-Berechnung und -Persistenz."""

from datetime import datetime, timezone

import pytest

from config import STATS_HEADER
from session.stats import (
    StatisticsRecord,
    StatisticsRecorder,
    compute_statistics,
    count_words,
    format_summary,
    read_table,
)
from utils.errors import StatsUnavailable

NOW = datetime(2026, 10, 19, 9, 30, 0, 123456, tzinfo=timezone.utc)


def _record(**overrides) -> StatisticsRecord:
    return compute_statistics(
        overrides.pop("text", "eins zwei drei"),
        overrides.pop("duration", 3.0),
        overrides.pop("processing", 0.5),
        now=NOW,
    )


class TestComputeStatistics:
    def test_rates(self):
        """120 Wörter in 60s → 2 WPS, 120 WPM."""
        record = compute_statistics(" ".join(["wort"] * 120), 60.0, 1.5, now=NOW)

        assert record.word_count == 120
        assert round(record.wps, 2) == 2.00
        assert round(record.wpm, 2) == 120.00
        assert record.processing_sec == 1.5

    @pytest.mark.parametrize("duration", [0, 0.0, None, -1.0])
    def test_unusable_duration_raises(self, duration):
        """Dauer 0/unbekannt → StatsUnavailable statt Infinity oder ZeroDivisionError."""
        with pytest.raises(StatsUnavailable):
            compute_statistics("hallo welt", duration, 1.0)

    def test_timestamps(self):
        record = _record()

        assert record.microsec_since_1970 == 1_792_402_200_123_456
        assert record.utc_time == "2026-10-19 09:30:00"

    def test_empty_transcript(self):
        record = compute_statistics("", 5.0, 0.2, now=NOW)
        assert record.word_count == 0
        assert record.wps == 0.0

    def test_negative_values_rejected(self):
        with pytest.raises(ValueError):
            StatisticsRecord(0, "", "", -1.0, 0, 0.0, 0.0, 0.0)
        with pytest.raises(ValueError):
            StatisticsRecord(0, "", "", 1.0, -1, 0.0, 0.0, 0.0)


def test_count_words_splits_on_any_whitespace():
    assert count_words("  hallo\twelt\n  wie geht's ") == 4


def test_format_summary_rounds_to_two_decimals():
    record = compute_statistics("a b c", 7.0, 1.23456, now=NOW)
    summary = format_summary(record)

    assert "3 Wörter" in summary
    assert "7.00s" in summary
    assert "25.71 WPM" in summary
    assert "1.23s" in summary


class TestStatisticsRecorder:
    def test_header_written_once(self, tmp_path):
        """Header steht genau einmal in der Tabelle, egal wie viele Sessions."""
        table = tmp_path / "statistics.tsv"
        recorder = StatisticsRecorder(table)

        for _ in range(3):
            recorder.append(_record())

        lines = table.read_text().splitlines()
        assert lines[0] == "\t".join(STATS_HEADER)
        assert sum(1 for line in lines if line.startswith("Microsec_Since_1970")) == 1
        assert len(lines) == 4

    def test_full_precision_in_table(self, tmp_path):
        table = tmp_path / "statistics.tsv"
        StatisticsRecorder(table).append(
            compute_statistics("a b", 3.0, 0.123456789, now=NOW)
        )

        row = read_table(table)[0]
        assert row["Processing_Sec"] == "0.123456789"
        assert float(row["WPS"]) == pytest.approx(2 / 3)

    def test_sidecar_holds_one_record(self, tmp_path):
        recorder = StatisticsRecorder(tmp_path / "statistics.tsv")
        sidecar = tmp_path / "20261019-093000.stats"

        recorder.record(_record(), sidecar)

        rows = read_table(sidecar)
        assert len(rows) == 1
        assert rows[0]["Word_Count"] == "3"
        assert list(rows[0].keys()) == list(STATS_HEADER)

    def test_sidecar_matches_table_row(self, tmp_path):
        table = tmp_path / "statistics.tsv"
        sidecar = tmp_path / "s.stats"
        StatisticsRecorder(table).record(_record(), sidecar)

        assert read_table(sidecar) == read_table(table)
