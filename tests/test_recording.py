"""Tests für AudioRecorder.run() (sounddevice gemockt, echtes WAV via soundfile)."""

import sys
import threading
from types import SimpleNamespace
from unittest.mock import patch

import numpy as np
import pytest
import soundfile as sf

from audio.recording import AudioRecorder

CHUNK = 160  # 10ms bei 16 kHz


def _chunk(value: float) -> np.ndarray:
    return np.full((CHUNK, 1), value, dtype="float32")


class FakeInputStream:
    """Ersetzt sd.InputStream: liefert Chunks über den Callback des Recorders.

    `on_enter` läuft beim Öffnen des Streams, `on_exit` beim Schließen –
    dort landen Puffer, die der Treiber erst beim Stoppen ausliefert.
    """

    def __init__(self, on_enter, on_exit=None, **kwargs):
        self.callback = kwargs["callback"]
        self.kwargs = kwargs
        self._on_enter = on_enter
        self._on_exit = on_exit

    def push(self, value: float) -> None:
        self.callback(_chunk(value), CHUNK, None, None)

    def __enter__(self):
        self._on_enter(self)
        return self

    def __exit__(self, *exc):
        if self._on_exit is not None:
            self._on_exit(self)
        return False


@pytest.fixture
def fake_sounddevice():
    """Installiert ein sounddevice-Modul, dessen InputStream konfigurierbar ist."""
    streams: list[FakeInputStream] = []
    hooks = {}

    def _input_stream(**kwargs):
        stream = FakeInputStream(hooks["on_enter"], hooks.get("on_exit"), **kwargs)
        streams.append(stream)
        return stream

    module = SimpleNamespace(InputStream=_input_stream)
    with patch.dict(sys.modules, {"sounddevice": module}):
        yield hooks, streams


def _read_back(path):
    data, samplerate = sf.read(path, dtype="float32")
    return data, samplerate


class TestAudioRecorderRun:
    def test_chunks_queued_before_stop_are_written(self, fake_sounddevice, tmp_path):
        """Stop kommt, während noch Chunks in der Queue liegen – keiner geht verloren."""
        hooks, _ = fake_sounddevice
        recorder = AudioRecorder(tmp_path / "rec.wav")

        def _on_enter(stream):
            for _ in range(5):
                stream.push(0.25)
            recorder.request_stop()

        hooks["on_enter"] = _on_enter

        seconds = recorder.run()

        data, samplerate = _read_back(tmp_path / "rec.wav")
        assert samplerate == 16000
        assert len(data) == 5 * CHUNK
        assert seconds == pytest.approx(5 * CHUNK / 16000)
        assert np.allclose(data, 0.25, atol=1e-3)

    def test_buffers_flushed_on_stream_close_are_written(self, fake_sounddevice, tmp_path):
        """Letzter Puffer kommt erst beim Schließen des Streams (Ende des letzten Worts)."""
        hooks, _ = fake_sounddevice
        recorder = AudioRecorder(tmp_path / "rec.wav")

        def _on_enter(stream):
            stream.push(0.1)
            recorder.request_stop()

        hooks["on_enter"] = _on_enter
        hooks["on_exit"] = lambda stream: stream.push(0.5)

        recorder.run()

        data, _ = _read_back(tmp_path / "rec.wav")
        assert len(data) == 2 * CHUNK
        assert data[-1] == pytest.approx(0.5, abs=1e-3)

    def test_stop_from_other_thread(self, fake_sounddevice, tmp_path):
        """Wie im Worker: Chunks und Stop-Signal kommen aus fremden Threads."""
        hooks, _ = fake_sounddevice
        recorder = AudioRecorder(tmp_path / "rec.wav")

        def _produce(stream):
            for _ in range(20):
                stream.push(0.0)
            recorder.request_stop()

        threads = []

        def _on_enter(stream):
            thread = threading.Thread(target=_produce, args=(stream,))
            threads.append(thread)
            thread.start()

        hooks["on_enter"] = _on_enter

        recorder.run()
        threads[0].join(timeout=2)

        assert sf.info(tmp_path / "rec.wav").frames == 20 * CHUNK

    def test_stream_configuration(self, fake_sounddevice, tmp_path):
        hooks, streams = fake_sounddevice
        recorder = AudioRecorder(tmp_path / "sub" / "rec.wav")
        hooks["on_enter"] = lambda _stream: recorder.request_stop()

        assert recorder.run() == 0.0

        kwargs = streams[0].kwargs
        assert kwargs["samplerate"] == 16000
        assert kwargs["channels"] == 1
        assert kwargs["dtype"] == "float32"
        # Verzeichnis wird angelegt, leere Aufnahme bleibt gültiges WAV
        assert sf.info(tmp_path / "sub" / "rec.wav").frames == 0
