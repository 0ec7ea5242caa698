"""Zwischenablage für die Transkript-Zustellung.

macOS: pbcopy (kein Zusatzpaket, zuverlässig auch ohne GUI-Session)
Linux: pyperclip (wählt selbst zwischen wl-copy, xclip und xsel)

`copy()` meldet Erfolg als bool; die Pipeline fügt nur nach erfolgreichem
Kopieren ein, sonst landete der vorherige Clipboard-Inhalt im Fenster.
"""

import logging
import os
import subprocess

logger = logging.getLogger("tapscribe.desktop.clipboard")


class MacOSClipboard:
    # Hotkey-Tools starten uns ohne Shell-Locale; pbcopy würde Umlaute
    # dann als MacRoman interpretieren
    _ENV_OVERRIDES = {"LANG": "en_US.UTF-8", "LC_ALL": "en_US.UTF-8"}

    def copy(self, text: str) -> bool:
        try:
            result = subprocess.run(
                ["pbcopy"],
                input=text.encode("utf-8"),
                capture_output=True,
                timeout=2,
                env={**os.environ, **self._ENV_OVERRIDES},
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"pbcopy nicht ausführbar: {e}")
            return False
        if result.returncode != 0:
            logger.error(f"pbcopy fehlgeschlagen: {result.stderr.decode(errors='replace')}")
            return False
        logger.debug(f"Zwischenablage: {len(text)} Zeichen (pbcopy)")
        return True


class PyperclipClipboard:
    def copy(self, text: str) -> bool:
        import pyperclip

        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            # Kein Backend installiert (xclip/xsel/wl-clipboard)
            logger.error(f"Zwischenablage nicht verfügbar: {e}")
            return False
        logger.debug(f"Zwischenablage: {len(text)} Zeichen (pyperclip)")
        return True


__all__ = ["MacOSClipboard", "PyperclipClipboard"]
