"""Session-aware resolution changes: X11 is delegated to a backend, Wayland is unsupported."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from deckbuddy.interfaces import DisplayPredicate, NativeResolutionHandlerInterface, Resolution

log = logging.getLogger(__name__)


def is_wayland_session(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Guess from the environment whether this is a Wayland session."""
    env = os.environ if environ is None else environ

    session_type = env.get("XDG_SESSION_TYPE", "")
    if session_type:
        lowered = session_type.lower()
        if lowered == "wayland":
            log.debug("XDG_SESSION_TYPE says it's a Wayland session!")
            return True
        if lowered == "x11":
            log.debug("XDG_SESSION_TYPE says it's an X11 session!")
            return False
        log.debug("XDG_SESSION_TYPE has unknown value (%s). Checking for WAYLAND_DISPLAY!", session_type)
    else:
        log.debug("XDG_SESSION_TYPE not present in the ENV. Checking for WAYLAND_DISPLAY!")

    if env.get("WAYLAND_DISPLAY", ""):
        log.debug("Found WAYLAND_DISPLAY, assuming Wayland session.")
        return True

    log.warning("No ENV found to determine session type, assuming X11 session.")
    return False


class NativeResolutionHandler(NativeResolutionHandlerInterface):
    """Forwards resolution changes to an X11 backend unless running under Wayland."""

    def __init__(
        self,
        x11_handler: Optional[NativeResolutionHandlerInterface] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._x11_handler = x11_handler
        self._environ = environ

    def change_resolution(self, predicate: DisplayPredicate) -> dict[str, Optional[Resolution]]:
        if is_wayland_session(self._environ):
            log.debug("Resolution change for Wayland session is not supported yet...")
            return {}
        if self._x11_handler is None:
            log.debug("No X11 resolution backend is available.")
            return {}
        return dict(self._x11_handler.change_resolution(predicate))