"""Autostart entries as XDG desktop files."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from deckbuddy.interfaces import NativeAutoStartHandlerInterface


def autostart_contents(app_name: str, exec_command: str) -> str:
    """The desktop entry text that starts ``exec_command``."""
    return (
        "[Desktop Entry]\n"
        "Type=Application\n"
        f"Name={app_name}\n"
        f"Exec={exec_command}\n"
        f"Icon={app_name}\n"
    )


class AutoStartHandler(NativeAutoStartHandlerInterface):
    """Enables or disables autostart by writing or removing a desktop file."""

    def __init__(self, autostart_path: Union[str, Path], app_name: str, exec_command: str) -> None:
        self._path = Path(autostart_path)
        self._app_name = app_name
        self._exec_command = exec_command

    def _contents(self) -> bytes:
        return autostart_contents(self._app_name, self._exec_command).encode("utf-8")

    def set_auto_start(self, enable: bool) -> None:
        """Write or remove the desktop file; raises OSError when that fails."""
        if self._path.exists():
            self._path.unlink()

        if enable:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_bytes(self._contents())

    def is_auto_start_enabled(self) -> bool:
        if not self._path.exists():
            return False
        return self._path.read_bytes() == self._contents()