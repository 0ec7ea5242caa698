"""Laufzeit-Einstellungen aus Umgebung und `.env`.

Drei Werte sind Pflicht (API-Key, Modell, Endpoint-URL). Fehlen sie,
wird ConfigError geworfen – die CLI beendet sich dann mit Exit-Code 1.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from config import (
    DISMISS_DELAY_SECONDS,
    UPLOAD_MAX_RETRIES,
    UPLOAD_TIMEOUT_SECONDS,
    WATCHDOG_TIMEOUT_SECONDS,
)

from .env import get_env_bool_default, get_env_float, get_env_int
from .errors import ConfigError

logger = logging.getLogger("tapscribe")

REQUIRED_KEYS = ("TAPSCRIBE_API_KEY", "TAPSCRIBE_MODEL", "TAPSCRIBE_API_URL")

# Wird ein vollständiger Endpoint angegeben, bleibt nur die Basis-URL übrig
_ENDPOINT_SUFFIX = "/audio/transcriptions"


def normalize_base_url(url: str) -> str:
    """Reduziert eine Transkriptions-URL auf die OpenAI-kompatible Basis-URL."""
    url = url.strip().rstrip("/")
    if url.endswith(_ENDPOINT_SUFFIX):
        url = url[: -len(_ENDPOINT_SUFFIX)]
    return url


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str
    base_url: str
    language: str | None = None
    watchdog_seconds: float = WATCHDOG_TIMEOUT_SECONDS
    dismiss_seconds: float = DISMISS_DELAY_SECONDS
    keep_compressed: bool = True
    auto_paste: bool = True
    upload_timeout: float = UPLOAD_TIMEOUT_SECONDS
    upload_retries: int = UPLOAD_MAX_RETRIES


def load_settings(env_file: Path | None = None) -> Settings:
    """Liest die Einstellungen aus `os.environ`.

    Args:
        env_file: Nur für die Fehlermeldung – wo der User die Werte eintragen soll.

    Raises:
        ConfigError: Wenn ein Pflichtwert fehlt
    """
    values = {key: (os.getenv(key) or "").strip() for key in REQUIRED_KEYS}
    missing = [key for key, value in values.items() if not value]
    if missing:
        location = f" (in {env_file})" if env_file else ""
        raise ConfigError(
            f"Konfiguration unvollständig, fehlt: {', '.join(missing)}{location}"
        )

    retries = get_env_int("TAPSCRIBE_UPLOAD_RETRIES")
    if retries is not None and retries < 0:
        logger.warning(f"TAPSCRIBE_UPLOAD_RETRIES={retries} ist negativ, ignoriere")
        retries = None

    return Settings(
        api_key=values["TAPSCRIBE_API_KEY"],
        model=values["TAPSCRIBE_MODEL"],
        base_url=normalize_base_url(values["TAPSCRIBE_API_URL"]),
        language=os.getenv("TAPSCRIBE_LANGUAGE") or None,
        watchdog_seconds=get_env_float("TAPSCRIBE_WATCHDOG_SECONDS")
        or WATCHDOG_TIMEOUT_SECONDS,
        dismiss_seconds=get_env_float("TAPSCRIBE_DISMISS_SECONDS")
        or DISMISS_DELAY_SECONDS,
        keep_compressed=get_env_bool_default("TAPSCRIBE_KEEP_MP3", True),
        auto_paste=get_env_bool_default("TAPSCRIBE_AUTO_PASTE", True),
        upload_timeout=get_env_float("TAPSCRIBE_UPLOAD_TIMEOUT")
        or UPLOAD_TIMEOUT_SECONDS,
        upload_retries=UPLOAD_MAX_RETRIES if retries is None else retries,
    )


__all__ = ["Settings", "load_settings", "normalize_base_url", "REQUIRED_KEYS"]
