"""Process queries and signalling through the Linux ``/proc`` filesystem."""

from __future__ import annotations

import logging
import os
import signal
from collections import deque
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from deckbuddy.interfaces import NativeProcessHandlerInterface

log = logging.getLogger(__name__)

_UINT_MAX = 2**32 - 1
_SIGKILL = getattr(signal, "SIGKILL", signal.SIGTERM)

KillFunction = Callable[[int, int], None]


def _to_uint(text: str) -> Optional[int]:
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if value <= _UINT_MAX else None


def _children_of(needle: int, pairs: Iterable[tuple[int, int]]) -> list[int]:
    """Pids whose parent is ``needle``; ``pairs`` holds (pid, parent pid)."""
    return [pid for pid, parent in pairs if parent == needle and pid != needle]


class NativeProcessHandler(NativeProcessHandlerInterface):
    """Reads process information from ``proc_root`` and signals processes with ``kill``."""

    def __init__(self, proc_root: Union[str, Path] = "/proc", kill: KillFunction = os.kill) -> None:
        self._proc = Path(proc_root)
        self._kill = kill

    def get_pids(self) -> list[int]:
        try:
            entries = sorted(self._proc.iterdir(), key=lambda entry: entry.name.lower())
        except OSError:
            return []

        pids = []
        for entry in entries:
            pid = _to_uint(entry.name)
            if pid is not None and entry.is_dir():
                pids.append(pid)
        return pids

    def get_exec_path(self, pid: int) -> str:
        """Canonical path of the executable, or an empty string if it cannot be resolved."""
        link = self._proc / str(pid) / "exe"
        try:
            target = os.readlink(link)
            return str((link.parent / target).resolve(strict=True))
        except (OSError, RuntimeError):
            return ""

    def get_parent_pid(self, pid: int) -> int:
        """Parent pid from the status file, or 0 when unavailable."""
        try:
            status = (self._proc / str(pid) / "status").read_text(errors="replace")
        except OSError:
            return 0
        for line in status.splitlines():
            if line.startswith("PPid:"):
                value = _to_uint(line[len("PPid:"):].strip())
                return value if value is not None else 0
        return 0

    def _parent_pairs(self) -> list[tuple[int, int]]:
        return [(pid, self.get_parent_pid(pid)) for pid in self.get_pids()]

    def get_related_pids(self, pid: int) -> list[int]:
        """``pid`` followed by all its descendants, breadth first."""
        pairs = self._parent_pairs()
        related: list[int] = []
        queue = deque([pid])
        while queue:
            current = queue.popleft()
            related.append(current)
            queue.extend(_children_of(current, pairs))
        return related

    def _signal_related(self, pid: int, signum: int, action: str) -> None:
        for related_pid in self.get_related_pids(pid):
            try:
                self._kill(related_pid, signum)
            except ProcessLookupError:
                pass
            except OSError as error:
                log.warning("Failed to %s process %s - %s", action, related_pid, error.strerror or error)

    def close(self, pid: int) -> None:
        self._signal_related(pid, signal.SIGTERM, "close")

    def terminate(self, pid: int) -> None:
        self._signal_related(pid, _SIGKILL, "terminate")

    def get_children_pids(self, pid: int) -> list[int]:
        """Sorted children and grandchildren of ``pid``; empty if ``pid`` does not exist."""
        all_pids = self.get_pids()
        if pid not in all_pids:
            return []

        pairs = [(child, self.get_parent_pid(child)) for child in all_pids]
        children = _children_of(pid, pairs)
        nested = set(children)
        for child in children:
            nested.update(_children_of(child, pairs))
        return sorted(nested)

    def get_cmdline(self, pid: int) -> str:
        """Command line arguments joined by spaces, or an empty string."""
        try:
            data = (self._proc / str(pid) / "cmdline").read_bytes()
        except OSError:
            return ""
        if not data:
            return ""
        parts = data.split(b"\0")
        if parts and parts[-1] == b"":
            parts.pop()
        return " ".join(part.decode("utf-8", errors="replace") for part in parts)