"""Synthetisches Einfügen (Strg+V / Cmd+V) via pynput."""

import logging
import sys
import time

logger = logging.getLogger("tapscribe.desktop.paste")


class KeyboardPaster:
    """Sendet den Einfügen-Shortcut an das fokussierte Fenster.

    macOS braucht dafür Accessibility-Rechte, X11 funktioniert direkt,
    unter Wayland nur mit XWayland-Fenstern.
    """

    def __init__(self, platform: str | None = None, delay: float = 0.1) -> None:
        self.platform = platform or sys.platform
        # Clipboard-Manager brauchen einen Moment, bis der neue Inhalt anliegt
        self.delay = delay

    def paste(self) -> bool:
        from pynput.keyboard import Controller, Key

        modifier = Key.cmd if self.platform == "darwin" else Key.ctrl
        time.sleep(self.delay)

        keyboard = Controller()
        with keyboard.pressed(modifier):
            keyboard.press("v")
            keyboard.release("v")

        logger.info(f"Auto-Paste: {'Cmd' if modifier == Key.cmd else 'Strg'}+V gesendet")
        return True


__all__ = ["KeyboardPaster"]
