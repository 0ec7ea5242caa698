"""OpenAI-kompatibler Transkriptions-Provider.

Nutzt die OpenAI Transcription API. Über die Basis-URL funktioniert derselbe
Client auch mit kompatiblen Diensten (Groq, lokale Whisper-Server).
"""

import logging
from pathlib import Path

import openai

from utils.errors import UploadError
from utils.settings import Settings
from utils.timing import log_preview, timed_operation

logger = logging.getLogger("tapscribe.providers.openai")


class OpenAITranscriber:
    """Multipart-Upload an /audio/transcriptions mit response_format=text.

    Timeout und Retries übernimmt der SDK-Client (Backoff bei 408/429/5xx
    und Verbindungsfehlern). Danach ist der Fehler fatal.
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        language: str | None = None,
        timeout: float = 120.0,
        max_retries: int = 1,
        client=None,
    ) -> None:
        self.model = model
        self.language = language
        self._client = client or openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAITranscriber":
        return cls(
            api_key=settings.api_key,
            model=settings.model,
            base_url=settings.base_url,
            language=settings.language,
            timeout=settings.upload_timeout,
            max_retries=settings.upload_retries,
        )

    def transcribe(self, audio_path: Path) -> str:
        """Transkribiert die Audiodatei.

        Returns:
            Transkript (ungetrimmt, so wie der Dienst es liefert)

        Raises:
            UploadError: Netzwerk-, Auth- oder Dienstfehler
        """
        params = {
            "model": self.model,
            "response_format": "text",
        }
        if self.language:
            params["language"] = self.language

        try:
            audio_kb = audio_path.stat().st_size // 1024
            logger.info(
                f"Upload: {self.model}, {audio_kb}KB, lang={self.language or 'auto'}"
            )
            with timed_operation("Transkription", logger=logger, include_session=False):
                with audio_path.open("rb") as audio_file:
                    response = self._client.audio.transcriptions.create(
                        file=(audio_path.name, audio_file), **params
                    )
        except openai.APIError as e:
            raise UploadError(f"Transkriptions-Dienst: {e}") from e
        except OSError as e:
            raise UploadError(f"Upload fehlgeschlagen: {e}") from e

        # API gibt bei format="text" String zurück, manche Dienste ein Objekt
        if isinstance(response, str):
            result = response
        elif hasattr(response, "text"):
            result = response.text
        else:
            raise UploadError(f"Unerwarteter Response-Typ: {type(response)}")

        logger.debug(f"Ergebnis: {log_preview(result)}")
        return result


__all__ = ["OpenAITranscriber"]
