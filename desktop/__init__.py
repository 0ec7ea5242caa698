"""Desktop-Abstraktion für TapScribe.

Dieses Modul stellt plattformunabhängige Interfaces bereit und
lädt automatisch die richtige Implementierung für das aktuelle OS.

Usage:
    from desktop import get_notifier, get_clipboard, get_paster

    notification_id = get_notifier().notify("TapScribe", "Aufnahme läuft")
    get_clipboard().copy("Hello World")
    get_paster().paste()
"""

import sys
from typing import Protocol

from .process import ProcessController, get_process_controller


class Notifier(Protocol):
    def notify(
        self,
        title: str,
        body: str = "",
        *,
        urgency: str = "normal",
        expire_ms: int = 0,
        replace_id: str | None = None,
    ) -> str | None: ...

    def close(self, notification_id: str) -> bool: ...


class ClipboardHandler(Protocol):
    def copy(self, text: str) -> bool: ...


class Paster(Protocol):
    def paste(self) -> bool: ...


def get_platform() -> str:
    """Ermittelt die aktuelle Plattform.

    Returns:
        'macos', 'windows' oder 'linux'

    Raises:
        RuntimeError: Bei nicht unterstützter Plattform
    """
    if sys.platform == "darwin":
        return "macos"
    elif sys.platform == "win32":
        return "windows"
    elif sys.platform.startswith("linux"):
        return "linux"
    raise RuntimeError(f"Nicht unterstützte Plattform: {sys.platform}")


def get_notifier() -> Notifier:
    """Factory für plattformspezifische Benachrichtigungen."""
    platform = get_platform()
    if platform == "macos":
        from .notify import MacOSNotifier

        return MacOSNotifier()
    elif platform == "linux":
        from .notify import LinuxNotifier

        return LinuxNotifier()
    raise NotImplementedError(f"Benachrichtigungen nicht implementiert für {platform}")


def get_clipboard() -> ClipboardHandler:
    """Factory für plattformspezifischen Clipboard-Handler."""
    if get_platform() == "macos":
        from .clipboard import MacOSClipboard

        return MacOSClipboard()
    from .clipboard import PyperclipClipboard

    return PyperclipClipboard()


def get_paster() -> Paster:
    """Factory für synthetisches Einfügen."""
    from .paste import KeyboardPaster

    return KeyboardPaster()


__all__ = [
    "Notifier",
    "ClipboardHandler",
    "Paster",
    "ProcessController",
    "get_platform",
    "get_notifier",
    "get_clipboard",
    "get_paster",
    "get_process_controller",
]
