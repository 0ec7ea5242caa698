"""Audio-Modul für TapScribe.

Bietet Mikrofon-Aufnahme im Hintergrund-Prozess und Transcoding.

Usage:
    from audio import RecorderProcess, transcode, probe_duration

    recorder = RecorderProcess(controller)
    pid = recorder.start_capture(wav_path)
    # ... später, in einem anderen Aufruf ...
    recorder.stop_capture(pid)
    transcode(wav_path, mp3_path)
"""

from .convert import probe_duration, transcode
from .recording import AudioRecorder, RecorderProcess, record_until_signalled

__all__ = [
    "AudioRecorder",
    "RecorderProcess",
    "record_until_signalled",
    "transcode",
    "probe_duration",
]
