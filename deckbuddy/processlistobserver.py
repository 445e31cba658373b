"""Finds the Steam process and the app ids of the games it runs."""

from __future__ import annotations

import logging
import re
import threading
from typing import Optional

from deckbuddy.interfaces import Signal, Timer
from deckbuddy.nativeprocess import NativeProcessHandler

log = logging.getLogger(__name__)

_STEAM_EXEC_PATTERN = re.compile(r".*?Steam.+?steam$", re.IGNORECASE)
_APP_ID_PATTERN = re.compile(r"AppId=([0-9]+)", re.IGNORECASE)
_UINT_MAX = 2**32 - 1
_CHECK_INTERVAL_MS = 2000


class SteamProcessListObserver:
    """Periodically collects the app ids found in the command lines of Steam's children."""

    def __init__(
        self,
        process_handler: Optional[NativeProcessHandler] = None,
        check_interval_ms: int = _CHECK_INTERVAL_MS,
    ) -> None:
        self._processes = process_handler if process_handler is not None else NativeProcessHandler()
        self._lock = threading.RLock()
        self._app_ids: frozenset[int] = frozenset()
        self._steam_pid = 0
        self.list_changed = Signal()
        self._check_timer = Timer(self.check_process_list, check_interval_ms, single_shot=True)

    def _is_steam(self, pid: int) -> bool:
        exec_path = self._processes.get_exec_path(pid)
        return bool(exec_path) and _STEAM_EXEC_PATTERN.search(exec_path) is not None

    def find_steam_process(self, previous_pid: int) -> int:
        """Pid of the running Steam process, preferring ``previous_pid``; 0 if none is found."""
        pids = self._processes.get_pids()
        if previous_pid in pids and self._is_steam(previous_pid):
            return previous_pid
        return next((pid for pid in pids if self._is_steam(pid)), 0)

    def observe_pid(self, pid: int) -> None:
        self.stop_observing()
        if pid != 0:
            with self._lock:
                self._steam_pid = pid
            self.check_process_list()

    def stop_observing(self) -> None:
        with self._lock:
            self._check_timer.stop()
            self._steam_pid = 0

    @property
    def app_ids(self) -> frozenset[int]:
        return self._app_ids

    def _collect_app_ids(self, steam_pid: int) -> frozenset[int]:
        running: set[int] = set()
        for pid in self._processes.get_children_pids(steam_pid):
            match = _APP_ID_PATTERN.search(self._processes.get_cmdline(pid))
            if match is None:
                continue
            app_id = int(match.group(1))
            if app_id <= _UINT_MAX:
                running.add(app_id)
        return frozenset(running)

    def check_process_list(self) -> None:
        with self._lock:
            steam_pid = self._steam_pid
            running = self._collect_app_ids(steam_pid) if steam_pid != 0 else frozenset()
            changed = running != self._app_ids
            if changed:
                self._app_ids = running
            if steam_pid != 0:
                self._check_timer.start()
        if changed:
            self.list_changed.emit()