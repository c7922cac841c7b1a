"""Desktop notification delivery through the platform's notification command."""

import asyncio
import contextlib
import logging
import sys

logger = logging.getLogger(__name__)

APP_NAME = "KollektivWidget"


def _applescript_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_command(title: str, body: str, sound: str | None, platform: str) -> list[str] | None:
    """Build the notification command line for a platform.

    Args:
        title: Notification title.
        body: Notification body text.
        sound: Sound name, only honoured on macOS.
        platform: Value of ``sys.platform``.

    Returns:
        The argv to execute, or None if the platform has no supported command.
    """
    if platform == "darwin":
        script = (
            f"display notification {_applescript_string(body)} "
            f"with title {_applescript_string(title)}"
        )
        if sound:
            script += f" sound name {_applescript_string(sound)}"
        return ["osascript", "-e", script]
    if platform.startswith("linux"):
        return ["notify-send", f"--app-name={APP_NAME}", title, body]
    return None


class DesktopNotificationSink:
    """Sends notifications with osascript on macOS and notify-send on Linux."""

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        self._timeout_seconds = timeout_seconds

    async def send(self, title: str, body: str, sound: str | None = None) -> bool:
        """Show a desktop notification.

        Returns:
            True if the notification command ran successfully.
        """
        command = build_command(title, body, sound, sys.platform)
        if command is None:
            logger.warning(f"Desktop notifications are not supported on {sys.platform}")
            return False

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.warning(f"Notification command not found: {command[0]}")
            return False

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), self._timeout_seconds)
        except TimeoutError:
            logger.warning(f"{command[0]} timed out after {self._timeout_seconds}s")
            return False
        finally:
            # Timed out or cancelled mid-send
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip() if stderr else ""
            logger.warning(f"{command[0]} exited with status {process.returncode}: {message}")
            return False
        return True
