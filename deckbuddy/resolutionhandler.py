"""Changing display resolutions and restoring the originals afterwards."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from deckbuddy.interfaces import NativeResolutionHandlerInterface, Resolution, Timer

log = logging.getLogger(__name__)

_RETRY_TIME_S = 10
_SEC_TO_MS = 1000


class ResolutionHandler:
    """Changes resolutions of handled displays and remembers what they were before."""

    def __init__(
        self,
        native_handler: NativeResolutionHandlerInterface,
        handled_displays: Iterable[str] = (),
    ) -> None:
        if native_handler is None:
            raise ValueError("native_handler is required")
        self._native = native_handler
        self._handled_displays = frozenset(handled_displays)
        self._original_resolutions: dict[str, Resolution] = {}
        self._lock = threading.RLock()
        self._retry_timer = Timer(self.restore_resolution, _RETRY_TIME_S * _SEC_TO_MS, single_shot=True)

    def __enter__(self) -> "ResolutionHandler":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def change_resolution(self, width: int, height: int) -> bool:
        """Apply ``width`` x ``height`` to the handled displays (or the primary one if none are set)."""
        log.debug("Trying to change resolution.")
        requested = Resolution(width, height)

        def predicate(display_name: str, is_primary: bool) -> Optional[Resolution]:
            if (not self._handled_displays and is_primary) or display_name in self._handled_displays:
                return requested
            return None

        with self._lock:
            result = self._native.change_resolution(predicate)
            if not result:
                return False

            for display_name, previous in result.items():
                if previous is None:
                    # Resolution did not change since it already matched.
                    continue
                self._original_resolutions.setdefault(display_name, previous)
            return True

    def restore_resolution(self) -> None:
        """Restore changed displays; retries later if some could not be restored."""
        with self._lock:
            self._retry_timer.stop()
            if not self._original_resolutions:
                return

            log.debug("Trying to restore resolution.")
            originals = dict(self._original_resolutions)
            result = self._native.change_resolution(lambda name, _is_primary: originals.get(name))
            for display_name in result:
                self._original_resolutions.pop(display_name, None)

            if self._original_resolutions:
                log.debug("Failed to restore resolution. Trying again in %s seconds.", _RETRY_TIME_S)
                self._retry_timer.start()

    def close(self) -> None:
        """Restore any changed resolutions."""
        self.restore_resolution()