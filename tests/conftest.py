"""
Gemeinsame Test-Fixtures für TapScribe.

Diese Fixtures isolieren Tests von externen Abhängigkeiten:
- Dateisystem (User-Verzeichnis, State-Verzeichnis)
- Umgebungsvariablen (API-Key, Modell, URL)
- Prozesse, Benachrichtigungen, Clipboard, Transkriptions-Dienst

Die Fakes zeichnen Aufrufe auf, statt echte Prozesse zu starten.
"""

import shutil
import sys
from pathlib import Path

import pytest

# Projekt-Root zum Python-Path hinzufügen
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import AppPaths  # noqa: E402


# =============================================================================
# Fakes für Kollaborateure
# =============================================================================


class FakeController:
    """ProcessController ohne echte Prozesse."""

    def __init__(self, first_pid: int = 1000) -> None:
        self._next_pid = first_pid
        self.running: set[int] = set()
        self.spawned: list[list[str]] = []
        self.terminated: list[int] = []

    def spawn(self, command, log_file=None) -> int:
        pid = self._next_pid
        self._next_pid += 1
        self.spawned.append(list(command))
        self.running.add(pid)
        return pid

    def is_running(self, pid: int) -> bool:
        return pid in self.running

    def owns(self, pid: int) -> bool:
        return pid in self.running

    def terminate(self, pid: int, timeout: float = 5.0) -> bool:
        self.terminated.append(pid)
        if pid in self.running:
            self.running.discard(pid)
            return True
        return False

    def commands(self, kind: str) -> list[list[str]]:
        """Gespawnte Worker-Kommandos einer Art ("record", "watchdog", "dismiss")."""
        return [cmd for cmd in self.spawned if len(cmd) > 2 and cmd[2] == kind]


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[dict] = []
        self.closed: list[str] = []

    def notify(self, title, body="", *, urgency="normal", expire_ms=0, replace_id=None):
        if self.fail:
            raise RuntimeError("Notification-Daemon nicht erreichbar")
        self.calls.append(
            {"title": title, "body": body, "urgency": urgency, "replace_id": replace_id}
        )
        return replace_id or "42"

    def close(self, notification_id):
        self.closed.append(notification_id)
        return True


class FakeClipboard:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.copied: list[str] = []

    def copy(self, text: str) -> bool:
        if self.fail:
            raise RuntimeError("Kein Clipboard-Backend")
        self.copied.append(text)
        return True


class FakePaster:
    def __init__(self) -> None:
        self.count = 0

    def paste(self) -> bool:
        self.count += 1
        return True


class FakeTranscriber:
    def __init__(self, response: str = "hello world", error: Exception | None = None):
        self.response = response
        self.error = error
        self.uploaded: list[Path] = []

    def transcribe(self, audio_path: Path) -> str:
        self.uploaded.append(audio_path)
        if self.error is not None:
            raise self.error
        return self.response


def fake_transcode(source: Path, target: Path) -> Path:
    """Kopiert statt zu komprimieren – wirft wie das Original bei fehlender Quelle."""
    from utils.errors import TranscodeError

    if not source.exists():
        raise TranscodeError(f"Rohaufnahme fehlt: {source}")
    shutil.copyfile(source, target)
    return target


# =============================================================================
# Environment & Isolation Fixtures
# =============================================================================


@pytest.fixture
def app_paths(tmp_path) -> AppPaths:
    """User-Verzeichnis im tmp_path."""
    paths = AppPaths(tmp_path / "tapscribe")
    paths.ensure()
    return paths


@pytest.fixture
def clean_env(monkeypatch):
    """Entfernt alle TAPSCRIBE_* Umgebungsvariablen für saubere Tests."""
    import os

    for key in list(os.environ.keys()):
        if key.startswith("TAPSCRIBE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def mock_env(monkeypatch, clean_env):
    """Setzt die drei Pflichtwerte."""
    monkeypatch.setenv("TAPSCRIBE_API_KEY", "test-key")
    monkeypatch.setenv("TAPSCRIBE_MODEL", "whisper-large-v3")
    monkeypatch.setenv("TAPSCRIBE_API_URL", "https://api.example.com/openai/v1")


@pytest.fixture
def controller():
    return FakeController()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def paster():
    return FakePaster()


@pytest.fixture
def transcriber():
    return FakeTranscriber()


@pytest.fixture
def dismissals():
    """Aufgezeichnete (notification_id, delay) Paare."""
    return []


@pytest.fixture
def make_pipeline(app_paths, transcriber, notifier, clipboard, paster, dismissals):
    """Factory für TranscriptionPipeline mit Fakes.

    Usage:
        pipeline = make_pipeline(duration=60.0, keep_compressed=False)
    """
    from session.pipeline import TranscriptionPipeline

    def _create(duration: float | None = 5.0, **kwargs):
        defaults = dict(
            transcriber=transcriber,
            notifier=notifier,
            clipboard=clipboard,
            paster=paster,
            schedule_dismissal=lambda nid, delay: dismissals.append((nid, delay)),
            transcoder=fake_transcode,
            duration_probe=lambda _path: duration,
        )
        defaults.update(kwargs)
        return TranscriptionPipeline(app_paths, **defaults)

    return _create


@pytest.fixture
def make_manager(app_paths, controller, make_pipeline):
    """Factory für SessionManager mit Fakes und echtem StateStore."""
    from datetime import datetime, timezone

    from audio.recording import RecorderProcess
    from session import SessionManager, StateStore, Watchdog

    def _create(pipeline=None, now=None, watchdog_seconds: float = 3600):
        return SessionManager(
            app_paths,
            StateStore(app_paths),
            RecorderProcess(controller, sleep=lambda _s: None),
            Watchdog(controller),
            pipeline or make_pipeline(),
            controller,
            watchdog_seconds=watchdog_seconds,
            now=now or (lambda: datetime(2026, 10, 19, 9, 30, 0, tzinfo=timezone.utc)),
        )

    return _create


@pytest.fixture
def simulate_capture():
    """Schreibt Fake-Audio an den Pfad der aktuellen Session (statt Mikrofon)."""

    def _write(manager, payload: bytes = b"RIFF fake wav data") -> Path:
        audio_path = manager.store.audio_path
        audio_path.write_bytes(payload)
        return audio_path

    return _write
