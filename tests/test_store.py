"""Tests für den StateStore – Lock-Marker und Session-Deskriptor."""

import json

import pytest

from session.state import SessionDescriptor, SessionState
from session.store import StateStore, atomic_write_text
from utils.errors import NoActiveSession


@pytest.fixture
def store(app_paths):
    return StateStore(app_paths)


class TestLock:
    def test_acquire_when_free(self, store):
        assert store.try_acquire() is True
        assert store.is_held()

    def test_second_acquire_fails(self, store):
        """Der Lock ist exklusiv: zweiter try_acquire() liefert False."""
        assert store.try_acquire() is True
        assert store.try_acquire() is False
        assert store.is_held()

    def test_release_is_idempotent(self, store):
        store.try_acquire()
        store.release()
        store.release()
        assert not store.is_held()

    def test_acquire_after_release(self, store):
        store.try_acquire()
        store.release()
        assert store.try_acquire() is True

    def test_lock_owner_is_current_process(self, store):
        import os

        store.try_acquire()
        assert store.lock_owner() == os.getpid()

    def test_lock_owner_without_lock(self, store):
        assert store.lock_owner() is None

    def test_acquire_creates_state_dir(self, tmp_path):
        from config import AppPaths

        store = StateStore(AppPaths(tmp_path / "fresh"))
        assert store.try_acquire() is True


class TestDescriptor:
    def test_load_without_descriptor(self, store):
        assert store.load() is None
        assert store.state is SessionState.IDLE

    def test_save_and_load(self, store):
        descriptor = SessionDescriptor("20261019-093000", "/tmp/x.wav", recorder_pid=7)
        store.save(descriptor)

        loaded = store.load()
        assert loaded == descriptor
        assert store.state is SessionState.RECORDING

    def test_state_persisted_as_string(self, store, app_paths):
        store.save(
            SessionDescriptor("s", "/tmp/x.wav", state=SessionState.PROCESSING)
        )
        data = json.loads(app_paths.session_file.read_text())
        assert data["state"] == "processing"

    def test_corrupt_descriptor_is_ignored(self, store, app_paths):
        app_paths.session_file.write_text("{not json")
        assert store.load() is None

    def test_unknown_fields_are_ignored(self, store, app_paths):
        app_paths.session_file.write_text(
            json.dumps({"session_id": "s", "audio_path": "/a.wav", "extra": 1})
        )
        assert store.load().session_id == "s"

    def test_typed_accessors(self, store, tmp_path):
        store.save(SessionDescriptor("s", str(tmp_path / "s.wav")))

        store.recorder_pid = 123
        store.watchdog_pid = 456
        store.notification_id = "9"

        assert store.recorder_pid == 123
        assert store.watchdog_pid == 456
        assert store.notification_id == "9"
        assert store.audio_path == tmp_path / "s.wav"

    def test_accessors_without_session(self, store):
        assert store.recorder_pid is None
        assert store.audio_path is None
        with pytest.raises(NoActiveSession):
            store.recorder_pid = 1

    def test_clear_only_own_session(self, store):
        """clear(session_id) lässt einen Nachfolger-Deskriptor stehen."""
        store.save(SessionDescriptor("neu", "/tmp/neu.wav"))
        store.clear("alt")
        assert store.load().session_id == "neu"

        store.clear("neu")
        assert store.load() is None

    def test_no_temp_files_left(self, store, app_paths):
        store.save(SessionDescriptor("s", "/tmp/s.wav"))
        store.update(recorder_pid=1)
        leftovers = [p.name for p in app_paths.state_dir.iterdir() if p.suffix == ".tmp"]
        assert leftovers == []


class TestAtomicWrite:
    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "f.txt"
        target.write_text("alt")
        atomic_write_text(target, "neu")
        assert target.read_text() == "neu"
