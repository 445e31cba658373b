"""Delayed shutdown, restart, suspend and hibernate requests."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from deckbuddy.interfaces import NativePcStateHandlerInterface, Timer, single_shot

log = logging.getLogger(__name__)

_SEC_TO_MS = 1000


class PcState(Enum):
    Normal = "Normal"
    Restarting = "Restarting"
    ShuttingDown = "ShuttingDown"
    Suspending = "Suspending"


class PcStateHandler:
    """Runs a PC state change after a grace period, refusing overlapping requests."""

    def __init__(self, native_handler: NativePcStateHandlerInterface) -> None:
        if native_handler is None:
            raise ValueError("native_handler is required")
        self._native = native_handler
        self._state = PcState.Normal
        self._pending: Optional[Timer] = None

    @property
    def state(self) -> PcState:
        return self._state

    def shutdown_pc(self, grace_period_in_sec: int) -> bool:
        return self._change_state(
            grace_period_in_sec,
            "shut down",
            "shutdown",
            self._native.can_shutdown_pc,
            self._native.shutdown_pc,
            PcState.ShuttingDown,
        )

    def restart_pc(self, grace_period_in_sec: int) -> bool:
        return self._change_state(
            grace_period_in_sec,
            "restarted",
            "restart",
            self._native.can_restart_pc,
            self._native.restart_pc,
            PcState.Restarting,
        )

    def suspend_pc(self, grace_period_in_sec: int) -> bool:
        return self._change_state(
            grace_period_in_sec,
            "suspended",
            "suspend",
            self._native.can_suspend_pc,
            self._native.suspend_pc,
            PcState.Suspending,
        )

    def hibernate_pc(self, grace_period_in_sec: int) -> bool:
        return self._change_state(
            grace_period_in_sec,
            "hibernated",
            "hibernate",
            self._native.can_hibernate_pc,
            self._native.hibernate_pc,
            PcState.Suspending,
        )

    def _change_state(
        self,
        grace_period_in_sec: int,
        cant_do_entry: str,
        failed_to_do_entry: str,
        can_do: Callable[[], bool],
        do: Callable[[], bool],
        new_state: PcState,
    ) -> bool:
        if self._state is not PcState.Normal:
            log.debug("PC is already changing state. Aborting request.")
            return False

        if not can_do():
            log.warning("PC cannot be %s!", cant_do_entry)
            return False

        def perform() -> None:
            log.info("Resetting PC state back to normal.")
            self._state = PcState.Normal
            if not do():
                log.warning("Failed to %s PC!", failed_to_do_entry)

        self._state = new_state
        self._pending = single_shot(int(grace_period_in_sec) * _SEC_TO_MS, perform)
        return True