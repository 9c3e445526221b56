"""Watch a single definition file and fire a callback when it changes."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)


class DefinitionFileHandler(FileSystemEventHandler):
    """Forwards events for one file out of its parent directory's stream.

    Watchdog delivers events on its observer thread.  When an event loop is
    given, the callback is scheduled onto that loop so reloads run on the
    same thread as request handling; otherwise it runs in place.
    """

    def __init__(
        self,
        target: Path,
        callback: Callable[[], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__()
        self._target = os.path.abspath(target)
        self._callback = callback
        self._loop = loop

    def _matches(self, path: str | bytes) -> bool:
        return os.path.abspath(os.fsdecode(path)) == self._target

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._dispatch()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._dispatch()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save via rename-over land here.
        if not event.is_directory and self._matches(event.dest_path):
            self._dispatch()

    def _dispatch(self) -> None:
        logger.debug("Change detected in %s", self._target)
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._callback)
        else:
            self._callback()


class DefinitionFileWatcher:
    """Owns one watchdog observer for one file."""

    def __init__(
        self,
        path: Path,
        callback: Callable[[], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.path = path
        self.handler = DefinitionFileHandler(path, callback, loop)
        self._observer: Observer | None = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(
            self.handler, os.path.dirname(os.path.abspath(self.path)), recursive=False
        )
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("Watching %s for changes", self.path)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("Stopped watching %s", self.path)
