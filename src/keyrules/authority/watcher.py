"""Directory watcher: trigger a reload when rule files change.

One non-recursive ``watchdog`` watch per rule directory.  Only events that
can change the compiled chain are forwarded: a rule file was created,
deleted, moved, or closed after writing.  Editor backups and hidden files
(``.foo.keyrules.swp``, ``#foo.keyrules#``) are ignored.

Bursts are not coalesced: saving a file may fire several reloads.  Each
reload is atomic and idempotent, so this only costs time.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Sequence

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from keyrules.policy.chain import DEFAULT_RULES_SUFFIX

logger = logging.getLogger(__name__)

_RELOAD_EVENTS = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED, EVENT_TYPE_CLOSED}
)
_IGNORED_PREFIXES = (".", "#")


def is_rule_file_name(name: str, suffix: str = DEFAULT_RULES_SUFFIX) -> bool:
    """True for names that may hold rules (not hidden, not an editor backup)."""
    return not name.startswith(_IGNORED_PREFIXES) and name.endswith(suffix)


class RuleFileEventHandler(FileSystemEventHandler):
    """Forward relevant rule file events to *on_change*."""

    def __init__(
        self,
        on_change: Callable[[str], None],
        *,
        suffix: str = DEFAULT_RULES_SUFFIX,
    ) -> None:
        super().__init__()
        self._on_change = on_change
        self._suffix = suffix

    def relevant_path(self, event: FileSystemEvent) -> str | None:
        """Return the rule file path *event* touches, or ``None``."""
        if event.is_directory or event.event_type not in _RELOAD_EVENTS:
            return None
        candidates = [event.src_path]
        if event.event_type == EVENT_TYPE_MOVED:
            candidates.append(getattr(event, "dest_path", ""))
        for raw in candidates:
            path = os.fsdecode(raw)
            if path and is_rule_file_name(os.path.basename(path), self._suffix):
                return path
        return None

    def on_any_event(self, event: FileSystemEvent) -> None:
        path = self.relevant_path(event)
        if path is None:
            return
        logger.info("Reloading rules (%s %s)", event.event_type, path)
        try:
            self._on_change(path)
        except Exception:
            # The observer thread must survive a failed reload.
            logger.exception("Reload after %s failed", path)


class DirectoryWatcher:
    """Watch rule directories and call *on_change* for relevant events.

    Directories that cannot be watched are logged and left static; starting
    the watcher never fails because of them.
    """

    def __init__(
        self,
        directories: Sequence[str | Path],
        on_change: Callable[[str], None],
        *,
        suffix: str = DEFAULT_RULES_SUFFIX,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._directories = [Path(d) for d in directories]
        self._handler = RuleFileEventHandler(on_change, suffix=suffix)
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._watched: list[Path] = []

    @property
    def handler(self) -> RuleFileEventHandler:
        return self._handler

    @property
    def watched(self) -> list[Path]:
        """Directories actually being observed."""
        return list(self._watched)

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            logger.warning("Directory watcher already running")
            return

        observer = self._observer_factory()
        observer.start()
        self._observer = observer

        for directory in self._directories:
            if not directory.is_dir():
                logger.warning("Error monitoring directory %s: not a directory", directory)
                continue
            try:
                observer.schedule(self._handler, str(directory), recursive=False)
            except OSError as exc:
                logger.warning("Error monitoring directory %s: %s", directory, exc)
                continue
            self._watched.append(directory)
            logger.debug("Watching directory: %s", directory)

    def stop(self, timeout: float = 5.0) -> None:
        observer, self._observer = self._observer, None
        self._watched = []
        if observer is None:
            return
        observer.stop()
        observer.join(timeout)

    def __enter__(self) -> DirectoryWatcher:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
