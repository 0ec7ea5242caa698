"""Desktop-Benachrichtigungen.

Linux: notify-send (libnotify >= 0.7.9 für --print-id) + gdbus zum Schließen
macOS: osascript (keine IDs, Schließen ist ein No-op)

Alle Aufrufe sind best effort: Fehler werden geloggt, nie geworfen.
"""

import logging
import subprocess

logger = logging.getLogger("tapscribe.desktop.notify")

APP_TITLE = "TapScribe"
PERSISTENT = 0  # expire-time 0 = bleibt bis zum expliziten Schließen


class LinuxNotifier:
    """Freedesktop-Benachrichtigungen via notify-send."""

    def notify(
        self,
        title: str,
        body: str = "",
        *,
        urgency: str = "normal",
        expire_ms: int = PERSISTENT,
        replace_id: str | None = None,
    ) -> str | None:
        """Zeigt (oder ersetzt) eine Benachrichtigung.

        Returns:
            Notification-ID für spätere Updates/close(), None bei Fehler
        """
        cmd = [
            "notify-send",
            f"--app-name={APP_TITLE}",
            "--print-id",
            f"--urgency={urgency}",
            f"--expire-time={expire_ms}",
        ]
        if replace_id:
            cmd.append(f"--replace-id={replace_id}")
        cmd.extend([title, body])
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=2)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"notify-send fehlgeschlagen: {e}")
            return None
        if result.returncode != 0:
            logger.warning(f"notify-send fehlgeschlagen: {result.stderr.strip()}")
            return None
        return result.stdout.strip() or None

    def close(self, notification_id: str) -> bool:
        try:
            result = subprocess.run(
                [
                    "gdbus",
                    "call",
                    "--session",
                    "--dest",
                    "org.freedesktop.Notifications",
                    "--object-path",
                    "/org/freedesktop/Notifications",
                    "--method",
                    "org.freedesktop.Notifications.CloseNotification",
                    str(notification_id),
                ],
                capture_output=True,
                text=True,
                timeout=2,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Benachrichtigung {notification_id} nicht geschlossen: {e}")
            return False
        return result.returncode == 0


def _applescript_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class MacOSNotifier:
    """macOS Notification Center via osascript."""

    def notify(
        self,
        title: str,
        body: str = "",
        *,
        urgency: str = "normal",
        expire_ms: int = PERSISTENT,
        replace_id: str | None = None,
    ) -> str | None:
        script = (
            f"display notification {_applescript_string(body)} "
            f"with title {_applescript_string(title)}"
        )
        if urgency == "critical":
            script += ' sound name "Basso"'
        try:
            subprocess.run(
                ["osascript", "-e", script], capture_output=True, timeout=2
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"osascript fehlgeschlagen: {e}")
        return None

    def close(self, notification_id: str) -> bool:
        return False


__all__ = ["LinuxNotifier", "MacOSNotifier", "PERSISTENT"]
