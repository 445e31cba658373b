"""Shared building blocks: signals, timers, value types and native handler interfaces."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional


class Signal:
    """A list of callables that are invoked together when the signal is emitted."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []
        self._lock = threading.Lock()

    def connect(self, slot: Callable[..., Any]) -> None:
        with self._lock:
            self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        """Remove a connected slot; raises ValueError if it was never connected."""
        with self._lock:
            try:
                self._slots.remove(slot)
            except ValueError:
                raise ValueError("slot is not connected to this signal") from None

    def emit(self, *args: Any) -> None:
        with self._lock:
            slots = list(self._slots)
        for slot in slots:
            slot(*args)


class Timer:
    """A restartable timer that emits ``timeout`` after ``interval`` milliseconds."""

    def __init__(
        self,
        callback: Optional[Callable[[], Any]] = None,
        interval_ms: int = 0,
        single_shot: bool = False,
    ) -> None:
        self.timeout = Signal()
        if callback is not None:
            self.timeout.connect(callback)
        self.interval = interval_ms
        self.single_shot = single_shot
        self._lock = threading.Lock()
        self._thread: Optional[threading.Timer] = None
        self._generation = 0

    def start(self, interval_ms: Optional[int] = None) -> None:
        """(Re)start the timer, optionally with a new interval."""
        with self._lock:
            if interval_ms is not None:
                self.interval = interval_ms
            self._schedule_locked()

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            if self._thread is not None:
                self._thread.cancel()
                self._thread = None

    def is_active(self) -> bool:
        with self._lock:
            return self._thread is not None

    def _schedule_locked(self) -> None:
        if self._thread is not None:
            self._thread.cancel()
        self._generation += 1
        thread = threading.Timer(max(self.interval, 0) / 1000, self._fire, args=(self._generation,))
        thread.daemon = True
        self._thread = thread
        thread.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            if self.single_shot:
                self._thread = None
            else:
                self._schedule_locked()
        self.timeout.emit()


def single_shot(interval_ms: int, callback: Callable[[], Any]) -> Timer:
    """Call ``callback`` once after ``interval_ms``; the returned timer can cancel it."""
    timer = Timer(callback, interval_ms, single_shot=True)
    timer.start()
    return timer


@dataclass(frozen=True)
class Resolution:
    width: int
    height: int


@dataclass
class TrackedAppData:
    app_id: int
    is_running: bool = False
    is_updating: bool = False


DisplayPredicate = Callable[[str, bool], Optional[Resolution]]
ChangedResolutions = Mapping[str, Optional[Resolution]]


class NativeAutoStartHandlerInterface(ABC):
    @abstractmethod
    def set_auto_start(self, enable: bool) -> None: ...

    @abstractmethod
    def is_auto_start_enabled(self) -> bool: ...


class NativePcStateHandlerInterface(ABC):
    @abstractmethod
    def can_shutdown_pc(self) -> bool: ...

    @abstractmethod
    def can_restart_pc(self) -> bool: ...

    @abstractmethod
    def can_suspend_pc(self) -> bool: ...

    @abstractmethod
    def can_hibernate_pc(self) -> bool: ...

    @abstractmethod
    def shutdown_pc(self) -> bool: ...

    @abstractmethod
    def restart_pc(self) -> bool: ...

    @abstractmethod
    def suspend_pc(self) -> bool: ...

    @abstractmethod
    def hibernate_pc(self) -> bool: ...


class NativeProcessHandlerInterface(ABC):
    @abstractmethod
    def get_pids(self) -> list[int]: ...

    @abstractmethod
    def get_exec_path(self, pid: int) -> str: ...

    @abstractmethod
    def close(self, pid: int) -> None: ...

    @abstractmethod
    def terminate(self, pid: int) -> None: ...


class NativeResolutionHandlerInterface(ABC):
    @abstractmethod
    def change_resolution(self, predicate: DisplayPredicate) -> dict[str, Optional[Resolution]]:
        """Apply the resolutions chosen by ``predicate``.

        Returns a map of display name to the previous resolution, or None
        where the display already had the requested one.
        """


class SteamRegistryObserverInterface(ABC):
    """Observes Steam state and reports it through signals."""

    def __init__(self) -> None:
        self.steam_exec_path = Signal()
        self.steam_pid = Signal()
        self.global_app_id = Signal()
        self.tracked_app_is_running = Signal()
        self.tracked_app_is_updating = Signal()

    @abstractmethod
    def start_app_observation(self) -> None: ...

    @abstractmethod
    def stop_app_observation(self) -> None: ...

    @abstractmethod
    def start_tracking_app(self, app_id: int) -> None: ...

    @abstractmethod
    def stop_tracking_app(self) -> None: ...