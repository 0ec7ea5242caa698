"""Zeitmessung für TapScribe.

Context Manager und Hilfsfunktionen für Performance-Tracking.
"""

import time
from contextlib import contextmanager
from typing import Callable

from .logging import get_logger, get_session_id


def format_duration(milliseconds: float) -> str:
    """Formatiert Dauer menschenlesbar: ms für kurze, s für längere Zeiten."""
    if milliseconds >= 1000:
        return f"{milliseconds / 1000:.2f}s"
    return f"{milliseconds:.0f}ms"


def log_preview(text: str, max_length: int = 100) -> str:
    """Kürzt Text für Log-Ausgabe mit Ellipsis wenn nötig."""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


class Stopwatch:
    """Misst Wall-Clock-Zeit eines Blocks; die Uhr ist injizierbar.

    Usage:
        with Stopwatch() as sw:
            upload()
        sw.elapsed  # Sekunden
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._start = 0.0
        self.elapsed = 0.0

    def __enter__(self) -> "Stopwatch":
        self._start = self._clock()
        return self

    def __exit__(self, *exc) -> None:
        self.elapsed = max(0.0, self._clock() - self._start)


@contextmanager
def timed_operation(
    name: str,
    *,
    logger=None,
    include_session: bool = True,
):
    """Kontextmanager für Zeitmessung mit automatischem Logging.

    Args:
        name: Name der Operation (Log-Label).
        logger: Optionaler Logger. Default: tapscribe Root-Logger.
        include_session: Wenn False, wird keine Korrelations-ID vorangestellt.

    Usage:
        with timed_operation("Transcode"):
            transcode(src, dst)
    """
    op_logger = logger or get_logger()
    session_id = get_session_id() if include_session else ""
    prefix = f"[{session_id}] " if session_id else ""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        op_logger.info(f"{prefix}{name}: {format_duration(elapsed_ms)}")
