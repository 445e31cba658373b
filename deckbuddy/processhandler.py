"""Monitoring and closing of a single process through a native process handler."""

from __future__ import annotations

import logging
import re
import threading
from typing import Optional, Pattern, Union

from deckbuddy.interfaces import NativeProcessHandlerInterface, Signal, Timer, single_shot

log = logging.getLogger(__name__)

_CHECK_INTERVAL_MS = 1000
_MATCH_ANYTHING = re.compile("")

RegexLike = Union[str, Pattern[str]]


def matching_process(exec_path: str, exec_regex: RegexLike) -> bool:
    """True if ``exec_path`` is non-empty and contains a match of ``exec_regex``."""
    if not exec_path:
        return False
    return re.search(exec_regex, exec_path) is not None


class ProcessHandler:
    """Tracks one process by pid and executable path; emits ``process_died`` when it goes away."""

    def __init__(self, native_handler: NativeProcessHandlerInterface) -> None:
        if native_handler is None:
            raise ValueError("native_handler is required")
        self._native = native_handler
        self._lock = threading.RLock()
        self._pid = 0
        self._exec_regex: RegexLike = _MATCH_ANYTHING
        self.process_died = Signal()
        self._check_timer = Timer(self.check_state, _CHECK_INTERVAL_MS, single_shot=True)
        self._kill_timer = Timer(self.terminate, single_shot=True)

    def get_pids(self) -> list[int]:
        return list(self._native.get_pids())

    def get_pids_matching_exec_path(self, exec_regex: RegexLike) -> list[int]:
        return [
            pid for pid in self.get_pids() if matching_process(self._native.get_exec_path(pid), exec_regex)
        ]

    def close_detached(self, exec_regex: RegexLike, auto_termination_timer: int) -> None:
        """Close every process matching ``exec_regex``, killing survivors after the timer."""
        for pid in self.get_pids_matching_exec_path(exec_regex):
            self.close_detached_pid(pid, exec_regex, auto_termination_timer)

    def close_detached_pid(self, pid: int, exec_regex: RegexLike, auto_termination_timer: int) -> None:
        exec_path = self._native.get_exec_path(pid)
        if not matching_process(exec_path, exec_regex):
            return

        log.debug("closing detached %s | %s", pid, exec_path)
        self._native.close(pid)

        def kill_if_alive() -> None:
            current_path = self._native.get_exec_path(pid)
            if matching_process(current_path, exec_regex):
                log.debug("terminating detached %s | %s", pid, current_path)
                self._native.terminate(pid)

        single_shot(auto_termination_timer, kill_if_alive)

    def start_monitoring(self, pid: int, exec_regex: RegexLike) -> bool:
        with self._lock:
            self.stop_monitoring()
            if pid == 0:
                return False
            if not matching_process(self._native.get_exec_path(pid), exec_regex):
                return False
            self._pid = pid
            self._exec_regex = exec_regex
            self._check_timer.start()
            return True

    def stop_monitoring(self) -> None:
        with self._lock:
            self._pid = 0
            self._exec_regex = _MATCH_ANYTHING
            self._check_timer.stop()
            self._kill_timer.stop()

    def close(self, auto_termination_timer: Optional[int] = None) -> None:
        """Ask the process to close; force-kill it after ``auto_termination_timer`` ms if given."""
        with self._lock:
            if self.is_running_now():
                self._native.close(self._pid)
                if auto_termination_timer is not None:
                    self._kill_timer.start(auto_termination_timer)

    def terminate(self) -> None:
        with self._lock:
            if self.is_running_now():
                self._native.terminate(self._pid)

    def is_running(self) -> bool:
        return self._pid != 0

    def is_running_now(self) -> bool:
        """Re-check the process right away and report whether it is still running."""
        if self.is_running():
            self.check_state()
        return self.is_running()

    def check_state(self) -> None:
        died = False
        with self._lock:
            self._check_timer.stop()
            if not matching_process(self._native.get_exec_path(self._pid), self._exec_regex):
                self.stop_monitoring()
                died = True
            else:
                self._check_timer.start()
        if died:
            self.process_died.emit()