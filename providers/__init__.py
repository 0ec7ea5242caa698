"""Transkriptions-Provider für TapScribe.

Usage:
    from providers import get_transcriber

    transcriber = get_transcriber(settings)
    text = transcriber.transcribe(mp3_path)
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from utils.settings import Settings


class Transcriber(Protocol):
    def transcribe(self, audio_path: "Path") -> str: ...


def get_transcriber(settings: "Settings") -> Transcriber:
    """Factory für den konfigurierten Transkriptions-Dienst."""
    from .openai import OpenAITranscriber

    return OpenAITranscriber.from_settings(settings)


__all__ = ["Transcriber", "get_transcriber"]
