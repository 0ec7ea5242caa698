"""Transcoding und Dauer-Ermittlung mit soundfile (libsndfile).

Die Rohaufnahme (WAV) wird vor dem Upload komprimiert; die Audiodauer für
die Statistik wird aus der komprimierten Datei gelesen, nicht geschätzt.
"""

import logging
from pathlib import Path

import soundfile as sf

from config import UPLOAD_FORMAT, UPLOAD_SUBTYPE
from utils.errors import TranscodeError

logger = logging.getLogger("tapscribe.audio.convert")

# Frames pro Block – hält den Speicher auch bei einstündigen Aufnahmen klein
BLOCK_FRAMES = 65536


def transcode(
    source: Path,
    target: Path,
    format: str = UPLOAD_FORMAT,
    subtype: str | None = UPLOAD_SUBTYPE,
) -> Path:
    """Konvertiert `source` blockweise nach `target`.

    Raises:
        TranscodeError: Quelle fehlt/leer, Codec-Fehler oder leeres Ergebnis
    """
    if not source.exists() or source.stat().st_size == 0:
        raise TranscodeError(f"Rohaufnahme fehlt oder ist leer: {source}")

    try:
        with sf.SoundFile(source) as src:
            with sf.SoundFile(
                target,
                mode="w",
                samplerate=src.samplerate,
                channels=src.channels,
                format=format,
                subtype=subtype,
            ) as dst:
                for block in src.blocks(blocksize=BLOCK_FRAMES, dtype="float32"):
                    dst.write(block)
    except (RuntimeError, OSError, TypeError, ValueError) as e:
        # sf.LibsndfileError erbt von RuntimeError
        raise TranscodeError(f"Transcoding fehlgeschlagen ({source.name}): {e}") from e

    if not target.exists() or target.stat().st_size == 0:
        raise TranscodeError(f"Transcoding lieferte keine Daten: {target}")

    logger.debug(
        f"Transcoding: {source.name} ({source.stat().st_size // 1024}KB) → "
        f"{target.name} ({target.stat().st_size // 1024}KB)"
    )
    return target


def probe_duration(path: Path) -> float | None:
    """Liest die Audiodauer in Sekunden. None, wenn nicht ermittelbar."""
    try:
        info = sf.info(str(path))
    except (RuntimeError, OSError) as e:
        logger.warning(f"Audiodauer nicht ermittelbar ({path.name}): {e}")
        return None
    if info.samplerate <= 0:
        return None
    return info.frames / info.samplerate


__all__ = ["transcode", "probe_duration", "BLOCK_FRAMES"]
