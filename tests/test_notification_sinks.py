"""Tests for notification sinks."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from kollektiv_widget.adapters.notifications import (
    DesktopNotificationSink,
    LoggingNotificationSink,
)
from kollektiv_widget.adapters.notifications.desktop_notification_sink import build_command

MODULE = "kollektiv_widget.adapters.notifications.desktop_notification_sink"


def mock_process(returncode: int | None = 0, stderr: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(b"", stderr))
    process.wait = AsyncMock(return_value=returncode)
    return process


def test_macos_command_uses_osascript_with_escaped_text() -> None:
    command = build_command('Bus "31"', "Leaves in 3 minutes", "Glass", "darwin")

    assert command[0:2] == ["osascript", "-e"]
    assert 'with title "Bus \\"31\\""' in command[2]
    assert 'sound name "Glass"' in command[2]


def test_linux_command_uses_notify_send() -> None:
    command = build_command("Bus departure", "Leaves in 3 minutes", "default", "linux")

    assert command[0] == "notify-send"
    assert command[-2:] == ["Bus departure", "Leaves in 3 minutes"]


def test_unsupported_platform_has_no_command() -> None:
    assert build_command("t", "b", None, "win32") is None


@pytest.mark.asyncio
@patch(f"{MODULE}.sys")
@patch(f"{MODULE}.asyncio.create_subprocess_exec", new_callable=AsyncMock)
async def test_desktop_sink_macos(mock_exec: AsyncMock, mock_sys: MagicMock) -> None:
    mock_sys.platform = "darwin"
    mock_exec.return_value = mock_process()

    assert await DesktopNotificationSink().send("Title", "Message")
    assert mock_exec.call_args.args[0] == "osascript"


@pytest.mark.asyncio
@patch(f"{MODULE}.sys")
@patch(f"{MODULE}.asyncio.create_subprocess_exec", new_callable=AsyncMock)
async def test_desktop_sink_linux(mock_exec: AsyncMock, mock_sys: MagicMock) -> None:
    mock_sys.platform = "linux"
    mock_exec.return_value = mock_process()

    assert await DesktopNotificationSink().send("Title", "Message")
    assert mock_exec.call_args.args[0] == "notify-send"


@pytest.mark.asyncio
@patch(f"{MODULE}.sys")
@patch(f"{MODULE}.asyncio.create_subprocess_exec", new_callable=AsyncMock)
async def test_desktop_sink_missing_binary_fails(mock_exec: AsyncMock, mock_sys: MagicMock) -> None:
    """Given no notification command installed, when sending, then delivery reports failure."""
    mock_sys.platform = "linux"
    mock_exec.side_effect = FileNotFoundError

    assert not await DesktopNotificationSink().send("Title", "Message")


@pytest.mark.asyncio
@patch(f"{MODULE}.sys")
@patch(f"{MODULE}.asyncio.create_subprocess_exec", new_callable=AsyncMock)
async def test_desktop_sink_nonzero_exit_fails(mock_exec: AsyncMock, mock_sys: MagicMock) -> None:
    mock_sys.platform = "linux"
    mock_exec.return_value = mock_process(returncode=1, stderr=b"No D-Bus session")

    assert not await DesktopNotificationSink().send("Title", "Message")


@pytest.mark.asyncio
@patch(f"{MODULE}.sys")
async def test_desktop_sink_unsupported_platform_fails(mock_sys: MagicMock) -> None:
    mock_sys.platform = "win32"

    assert not await DesktopNotificationSink().send("Title", "Message")


@pytest.mark.asyncio
async def test_logging_sink_always_delivers() -> None:
    sink = LoggingNotificationSink()

    assert await sink.send("Bus departure", "Line 31 leaves in 3 minutes")
    assert sink.sent == [("Bus departure", "Line 31 leaves in 3 minutes")]


@pytest.mark.asyncio
@patch(f"{MODULE}.sys")
@patch(f"{MODULE}.asyncio.create_subprocess_exec", new_callable=AsyncMock)
async def test_desktop_sink_timeout_kills_process(mock_exec: AsyncMock, mock_sys: MagicMock) -> None:
    mock_sys.platform = "linux"
    process = mock_process(returncode=None)
    process.communicate = AsyncMock(side_effect=TimeoutError)
    mock_exec.return_value = process

    assert not await DesktopNotificationSink().send("Title", "Message")
    process.kill.assert_called_once()
    process.wait.assert_awaited_once()


@pytest.mark.asyncio
@patch(f"{MODULE}.sys")
@patch(f"{MODULE}.asyncio.create_subprocess_exec", new_callable=AsyncMock)
async def test_desktop_sink_cancelled_send_reaps_process(mock_exec: AsyncMock, mock_sys: MagicMock) -> None:
    """Given the monitor stops mid-send, when the send is cancelled, then the child process is killed and reaped."""
    mock_sys.platform = "darwin"
    process = mock_process(returncode=None)
    process.communicate = AsyncMock(side_effect=asyncio.CancelledError)
    mock_exec.return_value = process

    with pytest.raises(asyncio.CancelledError):
        await DesktopNotificationSink().send("Title", "Message")

    process.kill.assert_called_once()
    process.wait.assert_awaited_once()
