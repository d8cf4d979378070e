"""Filesystem change notifications that wake the follow loop early."""

import logging
import os
import threading

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class ChangeNotifier(FileSystemEventHandler):
    """Sets `wakeup` whenever an event touches the followed path.

    Only signals; the follower is still stepped by the run loop, never from
    the observer thread.
    """

    def __init__(self, path: str, wakeup: threading.Event):
        super().__init__()
        self._path = os.path.abspath(path)
        self._wakeup = wakeup
        self._observer = None

    def _touches(self, event) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path, getattr(event, "dest_path", "")]
        return any(p and os.path.abspath(os.fsdecode(p)) == self._path for p in paths)

    def on_any_event(self, event):
        if event.event_type not in ("created", "modified", "moved", "deleted"):
            return
        if self._touches(event):
            logger.debug("%s event for %s", event.event_type, self._path)
            self._wakeup.set()

    def start(self) -> None:
        """Schedule on the parent directory so rotation is observed too."""
        self._observer = Observer()
        self._observer.schedule(self, os.path.dirname(self._path), recursive=False)
        self._observer.start()
        logger.info("Watching directory: %s", os.path.dirname(self._path))

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
