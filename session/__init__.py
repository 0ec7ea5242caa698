"""Session-Lebenszyklus für TapScribe.

Usage:
    from session import SessionManager, StateStore

    manager = SessionManager(paths, store, recorder, watchdog, pipeline, controller,
                             watchdog_seconds=3600)
    manager.toggle()
"""

from .manager import SessionManager
from .pipeline import PipelineResult, TranscriptionPipeline, best_effort
from .state import SessionDescriptor, SessionState
from .stats import (
    StatisticsRecord,
    StatisticsRecorder,
    compute_statistics,
    format_summary,
)
from .store import StateStore
from .watchdog import Watchdog, run_watchdog

__all__ = [
    "SessionManager",
    "PipelineResult",
    "TranscriptionPipeline",
    "best_effort",
    "SessionDescriptor",
    "SessionState",
    "StatisticsRecord",
    "StatisticsRecorder",
    "compute_statistics",
    "format_summary",
    "StateStore",
    "Watchdog",
    "run_watchdog",
]
