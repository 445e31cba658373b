"""Steam process control: launching apps, closing Steam and tracking running apps."""

from __future__ import annotations

import logging
import re
import sys
import threading
import time
from typing import Callable, Optional, Sequence

from deckbuddy.interfaces import Signal, SteamRegistryObserverInterface, Timer, TrackedAppData
from deckbuddy.processhandler import ProcessHandler

log = logging.getLogger(__name__)

STEAM_EXEC_PATTERN = re.compile(r"[\\/]steam(?:\.exe$|$)", re.IGNORECASE)
_REAPER_PATTERN = re.compile(r".*?Steam.+?reaper", re.IGNORECASE)
_SEC_TO_MS = 1000
_FORCED_REAPER_TERMINATION_MS = 5000
_TIME_TO_KILL_MS = 10000

Launcher = Callable[[str, Sequence[str]], bool]


class SteamHandler:
    """Controls the Steam client and keeps track of the app it runs.

    ``launcher`` starts a detached program with arguments and reports success.
    """

    def __init__(
        self,
        process_handler: ProcessHandler,
        registry_observer: SteamRegistryObserverInterface,
        launcher: Launcher,
        big_picture_delay_s: float = 1.0,
    ) -> None:
        if process_handler is None:
            raise ValueError("process_handler is required")
        if registry_observer is None:
            raise ValueError("registry_observer is required")
        self._process = process_handler
        self._observer = registry_observer
        self._launcher = launcher
        self._big_picture_delay_s = big_picture_delay_s
        self._lock = threading.RLock()

        self._steam_exec_path = ""
        self._global_app_id = 0
        self._tracked_app: Optional[TrackedAppData] = None

        self.process_state_changed = Signal()

        self._process.process_died.connect(self.on_steam_process_died)
        self._observer.steam_exec_path.connect(self.on_steam_exec_path)
        self._observer.steam_pid.connect(self.on_steam_pid)
        self._observer.global_app_id.connect(self.on_global_app_id)
        self._observer.tracked_app_is_running.connect(self.on_tracked_app_is_running)
        self._observer.tracked_app_is_updating.connect(self.on_tracked_app_is_updating)
        self._close_timer = Timer(self.terminate_steam, single_shot=True)

    def is_running(self) -> bool:
        return self._process.is_running()

    def is_running_now(self) -> bool:
        return self._process.is_running_now()

    def close(self, grace_period_in_sec: Optional[int] = None) -> bool:
        """Close Steam gracefully; force it after ``grace_period_in_sec`` if given."""
        with self._lock:
            if not self._process.is_running_now():
                self._close_timer.stop()
                return True

            if self._steam_exec_path:
                if not self._launcher(self._steam_exec_path, ["-shutdown"]):
                    log.warning("Failed to start Steam shutdown sequence! Using others means to close steam...")
                    self._process.close(None)
            else:
                log.warning("Steam EXEC path is not available yet, using other means of closing!")
                self._process.close(None)

            if grace_period_in_sec is not None:
                time_in_ms = int(grace_period_in_sec) * _SEC_TO_MS
                if not self._close_timer.is_active() or self._close_timer.interval != time_in_ms:
                    self._close_timer.start(time_in_ms)
            return True

    def launch_app(self, app_id: int, force_big_picture: bool) -> bool:
        with self._lock:
            if not self._steam_exec_path:
                log.warning("Steam EXEC path is not available yet!")
                return False
            if self._close_timer.is_active():
                log.warning("Already closing Steam, will not launch new app!")
                return False
            if app_id == 0:
                log.warning("Will not launch app with 0 ID!")
                return False

            if self.get_running_app() != app_id:
                steam_running = self._process.is_running_now()
                if force_big_picture and steam_running:
                    if not self._launcher(self._steam_exec_path, ["steam://open/bigpicture"]):
                        log.warning("Failed to open Steam in big picture mode!")
                        return False
                    # Steam needs a moment to actually switch into big picture mode.
                    time.sleep(self._big_picture_delay_s)

                args = ["-bigpicture"] if force_big_picture and not steam_running else []
                args += ["-applaunch", str(app_id)]
                if not self._launcher(self._steam_exec_path, args):
                    log.warning("Failed to start Steam app launch sequence!")
                    return False

                self._tracked_app = TrackedAppData(app_id)
                self._observer.start_tracking_app(app_id)
            return True

    def get_running_app(self) -> int:
        if not self._process.is_running():
            return 0
        tracked = self._tracked_app
        if tracked is not None and tracked.is_running:
            return tracked.app_id
        return self._global_app_id

    def get_tracked_active_app(self) -> Optional[int]:
        tracked = self._tracked_app
        if self._process.is_running() and tracked is not None and (tracked.is_running or tracked.is_updating):
            return tracked.app_id
        return None

    def get_tracked_updating_app(self) -> Optional[int]:
        tracked = self._tracked_app
        if self._process.is_running() and tracked is not None and tracked.is_updating:
            return tracked.app_id
        return None

    def clear_tracked_app(self) -> None:
        self._observer.stop_tracking_app()
        self._tracked_app = None

    def on_steam_process_died(self) -> None:
        log.debug("Steam is no longer running!")
        with self._lock:
            self._observer.stop_app_observation()
            self.clear_tracked_app()
            self._close_timer.stop()
            self._global_app_id = 0

            if sys.platform.startswith("linux"):
                # A crashed Steam may leave the reaper (the game) running behind it.
                self._process.close_detached(_REAPER_PATTERN, _FORCED_REAPER_TERMINATION_MS)
        self.process_state_changed.emit()

    def on_steam_exec_path(self, path: str) -> None:
        self._steam_exec_path = path
        log.info("Steam exec path: %s", path)

    def on_steam_pid(self, pid: int) -> None:
        currently_running = self._process.is_running()
        if pid == 0:
            if currently_running:
                log.debug("Steam is no longer running according to registry. Waiting for actual shutdown.")
            return

        if not self._process.start_monitoring(pid, STEAM_EXEC_PATTERN):
            log.debug("Failed to start monitoring Steam process %s (probably outdated)...", pid)
            if currently_running:
                self.process_state_changed.emit()
            return

        if not currently_running:
            log.debug("Steam is running!")
            self._observer.start_app_observation()
            self.process_state_changed.emit()

    def on_global_app_id(self, app_id: int) -> None:
        if app_id != self._global_app_id:
            self._global_app_id = app_id
            log.debug("Running appID change detected (via global key): %s", app_id)

    def on_tracked_app_is_running(self, state: bool) -> None:
        tracked = self._tracked_app
        if tracked is None:
            log.debug("Received update for tracked app that is no longer tracked")
            return
        log.debug('App %s "running" value change detected: %s', tracked.app_id, state)
        tracked.is_running = state

    def on_tracked_app_is_updating(self, state: bool) -> None:
        tracked = self._tracked_app
        if tracked is None:
            log.debug("Received update for tracked app that is no longer tracked")
            return
        log.debug('App %s "updating" value change detected: %s', tracked.app_id, state)
        tracked.is_updating = state

    def terminate_steam(self) -> None:
        log.warning("Forcefully killing Steam...")
        self._process.close(_TIME_TO_KILL_MS)