"""Steam state observation through the registry file and the process list."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from deckbuddy.interfaces import Signal, SteamRegistryObserverInterface, Timer, TrackedAppData, single_shot
from deckbuddy.processlistobserver import SteamProcessListObserver
from deckbuddy.registryparser import Node
from deckbuddy.registrywatcher import RegistryFileWatcher

log = logging.getLogger(__name__)

PID_PATH = ("Registry", "HKLM", "Software", "Valve", "Steam", "SteamPID")
DEFAULT_STEAM_EXEC = "/usr/bin/steam"
_UINT_MASK = 0xFFFFFFFF
_MAX_RECHECKS = 10
_RECHECK_DELAY_MS = 5000
_OBSERVATION_DELAY_MS = 2000


def get_entry(path: Sequence[str], nodes: list[Node], kind: type) -> Any:
    """Value at the key ``path`` if it exists and is of ``kind``, otherwise None."""
    if not path or not nodes:
        return None

    current = nodes
    last = len(path) - 1
    for depth, segment in enumerate(path):
        node = next((candidate for candidate in current if candidate.key == segment), None)
        if node is None:
            return None
        if depth == last:
            return node.value if isinstance(node.value, kind) else None
        if not isinstance(node.value, list):
            return None
        current = node.value
    return None


def _default_registry_path() -> Path:
    return Path.home() / ".steam" / "registry.vdf"


class SteamRegistryObserver(SteamRegistryObserverInterface):
    """Reports the Steam pid, exec path and running apps from the registry file and process list."""

    def __init__(
        self,
        registry_file_override: Union[str, Path] = "",
        steam_binary_override: Union[str, Path] = "",
        watcher: Optional[Any] = None,
        process_list_observer: Optional[Any] = None,
        recheck_delay_ms: int = _RECHECK_DELAY_MS,
        observation_delay_ms: int = _OBSERVATION_DELAY_MS,
    ) -> None:
        super().__init__()
        self._lock = threading.RLock()
        self._is_observing_apps = False
        self._pid = 0
        self._global_app_id = 0
        self._recheck_counter = 0
        self._recheck_delay_ms = recheck_delay_ms
        self._tracked_app: Optional[TrackedAppData] = None
        self._recheck_timers: list[Timer] = []

        if watcher is None:
            registry_path = Path(registry_file_override) if str(registry_file_override) else _default_registry_path()
            watcher = RegistryFileWatcher(registry_path)
        self._watcher = watcher
        self._process_list = process_list_observer if process_list_observer is not None else SteamProcessListObserver()

        self._watcher.registry_changed.connect(self.registry_changed)
        self._process_list.list_changed.connect(self.registry_changed)
        self._observation_delay = Timer(self._begin_app_observation, observation_delay_ms, single_shot=True)

        steam_exec = str(steam_binary_override) if str(steam_binary_override) else DEFAULT_STEAM_EXEC
        if not Path(steam_exec).exists():
            raise FileNotFoundError(f"Steam binary does not exist at specified path: {steam_exec}")
        log.info("Steam binary path set to %s", steam_exec)
        self._steam_exec = steam_exec

    def _begin_app_observation(self) -> None:
        with self._lock:
            self._is_observing_apps = True
        self.registry_changed()

    def start_app_observation(self) -> None:
        with self._lock:
            self._observation_delay.start()
            self._process_list.observe_pid(self._pid)

    def stop_app_observation(self) -> None:
        with self._lock:
            self._observation_delay.stop()
            self._process_list.stop_observing()
            self._is_observing_apps = False
            self._global_app_id = 0
            if self._tracked_app is not None:
                self._tracked_app.is_running = False
                self._tracked_app.is_updating = False

    def start_tracking_app(self, app_id: int) -> None:
        with self._lock:
            self._tracked_app = TrackedAppData(app_id)
        self.registry_changed()

    def stop_tracking_app(self) -> None:
        with self._lock:
            self._tracked_app = None

    def _update_pid(self, emissions: list[tuple[Signal, Any]]) -> None:
        value = get_entry(PID_PATH, self._watcher.data, int)
        pid = 0 if value is None else value & _UINT_MASK
        if pid == self._pid:
            return

        if pid != 0:
            actual_pid = self._process_list.find_steam_process(self._pid)
            if actual_pid == 0:
                do_recheck = self._recheck_counter < _MAX_RECHECKS
                self._recheck_counter += 1
                log.warning(
                    "Steam PID from registry.vdf indicates that the Steam process is running, but it's not%s",
                    "... Rechecking in 5 seconds." if do_recheck else "...",
                )
                if do_recheck:
                    self._recheck_timers = [timer for timer in self._recheck_timers if timer.is_active()]
                    self._recheck_timers.append(single_shot(self._recheck_delay_ms, self.registry_changed))
                else:
                    # Something else has triggered the check, so start counting anew.
                    self._recheck_counter = 0
            elif actual_pid != pid and self._pid != actual_pid:
                log.warning(
                    "Steam PID from registry.vdf does not match what we have found (normal for flatpak or "
                    "outdated data)! Using PID %s (instead of %s) to track Steam process.",
                    actual_pid,
                    pid,
                )

            if actual_pid != 0:
                self._recheck_counter = 0
            pid = actual_pid
        else:
            self._recheck_counter = 0

        if pid != self._pid:
            self._pid = pid
            self._process_list.observe_pid(pid)
            emissions.append((self.steam_pid, pid))

    def _update_apps(self, emissions: list[tuple[Signal, Any]]) -> None:
        # Steam no longer stores app state in the registry, so the process list is used instead.
        running_apps = self._process_list.app_ids
        first_running = min(running_apps) if running_apps else 0
        tracked = self._tracked_app

        if tracked is not None:
            tracked_is_running = tracked.app_id in running_apps
            global_app_id = tracked.app_id if tracked_is_running else first_running
        else:
            tracked_is_running = False
            global_app_id = first_running

        if global_app_id != self._global_app_id:
            self._global_app_id = global_app_id
            emissions.append((self.global_app_id, global_app_id))

        if tracked is not None and tracked_is_running != tracked.is_running:
            tracked.is_running = tracked_is_running
            emissions.append((self.tracked_app_is_running, tracked_is_running))

    def registry_changed(self) -> None:
        """Re-read the Steam state and emit signals for whatever changed."""
        emissions: list[tuple[Signal, Any]] = []
        with self._lock:
            self._update_pid(emissions)

            if self._steam_exec:
                emissions.append((self.steam_exec_path, self._steam_exec))
                self._steam_exec = ""

            if self._is_observing_apps:
                self._update_apps(emissions)

        for signal, value in emissions:
            signal.emit(value)