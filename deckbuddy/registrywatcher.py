"""Watches a registry file and re-parses it shortly after it changes."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union

from deckbuddy.interfaces import Signal, Timer, single_shot
from deckbuddy.registryparser import Node, RegistryFileParser

log = logging.getLogger(__name__)


class RegistryFileWatcher:
    """Polls ``path`` for changes and emits ``registry_changed`` after re-parsing it."""

    def __init__(
        self,
        path: Union[str, Path],
        poll_interval_ms: int = 500,
        retry_interval_ms: int = 1000,
        parse_delay_ms: int = 1000,
    ) -> None:
        self._path = Path(path)
        if not self._path.exists():
            raise FileNotFoundError(f"registry.vdf file does not exist at specified path: {self._path}")
        log.info("registry.vdf file path set to %s", self._path)

        self.registry_changed = Signal()
        self._parser = RegistryFileParser()
        self._lock = threading.RLock()
        self._watching = False
        self._signature: Optional[tuple[int, int]] = None

        self._poll_timer = Timer(self._poll, poll_interval_ms)
        self._retry_timer = Timer(self.retry, retry_interval_ms, single_shot=True)
        self._parse_timer = Timer(self.parse_file, parse_delay_ms, single_shot=True)
        self._startup = single_shot(0, self.retry)

    @property
    def data(self) -> list[Node]:
        return self._parser.root

    def _stat_signature(self) -> Optional[tuple[int, int]]:
        try:
            info = os.stat(self._path)
        except OSError:
            return None
        return info.st_mtime_ns, info.st_size

    def _add_watch(self) -> bool:
        signature = self._stat_signature()
        if signature is None:
            return False
        self._signature = signature
        self._watching = True
        self._poll_timer.start()
        return True

    def _poll(self) -> None:
        with self._lock:
            if not self._watching:
                return
            signature = self._stat_signature()
            if signature is None:
                self._watching = False
                self._poll_timer.stop()
            elif signature == self._signature:
                return
            else:
                self._signature = signature
        self.file_changed()

    def file_changed(self) -> None:
        with self._lock:
            if not self._watching:
                self.retry()
                return
            if not self._parse_timer.is_active():
                self._parse_timer.start()

    def retry(self) -> None:
        with self._lock:
            if not self._add_watch():
                self._retry_timer.start()
                return
            if not self._parse_timer.is_active():
                self._parse_timer.start()

    def parse_file(self) -> None:
        with self._lock:
            if not self._parser.parse(self._path):
                log.warning("failed at parsing registry file %s", self._path)
        self.registry_changed.emit()

    def close(self) -> None:
        """Stop watching and cancel pending work."""
        with self._lock:
            self._watching = False
            for timer in (self._startup, self._poll_timer, self._retry_timer, self._parse_timer):
                timer.stop()

    def __enter__(self) -> "RegistryFileWatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()