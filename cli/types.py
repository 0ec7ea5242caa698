"""Shared CLI type definitions for TapScribe."""

from enum import Enum


class Command(str, Enum):
    """Befehle der Hotkey-CLI."""

    start = "start"
    stop = "stop"
    toggle = "toggle"


USAGE = "Usage: tapscribe {start|stop|toggle}"
