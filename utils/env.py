"""Umgebungsvariablen und `.env`-Dateien.

Rangfolge (höchste zuerst):
1) Prozess-Environment (Shell, Hotkey-Tool)
2) User-`.env` im TapScribe-Verzeichnis (`~/.tapscribe/.env`)
3) Projekt-`.env` im aktuellen Arbeitsverzeichnis

Ungültige Werte optionaler Variablen werden mit Warnung ignoriert –
es gilt dann der Default. Nur die Pflichtwerte (utils.settings) sind fatal.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, TypeVar

from dotenv import dotenv_values

logger = logging.getLogger("tapscribe")

T = TypeVar("T")

_BOOL_WORDS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def parse_bool(value: str | None) -> bool | None:
    """"yes"/"on"/"1" → True, "no"/"off"/"0" → False, sonst None."""
    if value is None:
        return None
    return _BOOL_WORDS.get(value.strip().lower())


def _read(name: str, parse: Callable[[str], T | None]) -> T | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    try:
        value = parse(raw.strip())
    except ValueError:
        value = None
    if value is None:
        logger.warning(f"Ungültiger Wert {name}={raw!r}, verwende Default")
    return value


def _positive_float(raw: str) -> float | None:
    value = float(raw)
    return value if value > 0 else None


def get_env_bool(name: str) -> bool | None:
    return _read(name, parse_bool)


def get_env_bool_default(name: str, default: bool) -> bool:
    parsed = get_env_bool(name)
    return default if parsed is None else parsed


def get_env_float(name: str) -> float | None:
    """Positive Zahl (Sekunden) oder None."""
    return _read(name, _positive_float)


def get_env_int(name: str) -> int | None:
    return _read(name, int)


def load_environment(user_env: Path | None = None) -> None:
    """Übernimmt Werte aus den `.env`-Dateien in `os.environ`.

    Bereits gesetzte Variablen werden nie überschrieben.
    """
    if user_env is None:
        from config import DEFAULT_PATHS

        user_env = DEFAULT_PATHS.env_file

    merged: dict[str, str] = {}
    for env_path in (Path(".env"), user_env):  # später gewinnt
        if env_path.is_file():
            merged.update(
                {key: value for key, value in dotenv_values(env_path).items() if value is not None}
            )

    for key, value in merged.items():
        os.environ.setdefault(key, value)


__all__ = [
    "get_env_bool",
    "get_env_bool_default",
    "get_env_float",
    "get_env_int",
    "load_environment",
    "parse_bool",
]
