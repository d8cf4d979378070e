"""Opening the followed path with a bounded retry budget."""

import logging
import os
import time
from dataclasses import dataclass
from typing import BinaryIO, Callable

from tailfollow.errors import TerminalFailure
from tailfollow.identity import FileIdentity, identity_of
from tailfollow.stats import FollowStats

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


@dataclass
class OpenedFile:
    handle: BinaryIO
    identity: FileIdentity
    position: int


class FileOpener:
    """Opens a path for binary reading, counting consecutive failures.

    A failure below `max_attempts` returns None so the caller can wait and
    retry; the failure that reaches `max_attempts` raises TerminalFailure.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        stats: FollowStats | None = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._stats = stats
        self.retry_count = 0

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def try_open(self, path: str, seek_end: bool) -> OpenedFile | None:
        """Make one open attempt. Seeks to EOF when `seek_end`, else offset 0."""
        try:
            handle = open(path, "rb")
        except OSError as e:
            return self._failed(path, e)

        try:
            identity, _ = identity_of(handle)
            position = handle.seek(0, os.SEEK_END) if seek_end else 0
        except OSError as e:
            handle.close()
            return self._failed(path, e)
        self.retry_count = 0
        logger.debug("Opened %s (inode=%d) at offset %d", path, identity.inode, position)
        return OpenedFile(handle=handle, identity=identity, position=position)

    def _failed(self, path: str, error: OSError) -> None:
        self.retry_count += 1
        if self._stats is not None:
            self._stats.open_retries += 1
        if self.retry_count >= self._max_attempts:
            logger.error("Giving up on %s after %d attempt(s): %s",
                         path, self.retry_count, error)
            raise TerminalFailure(path, self.retry_count) from error
        logger.warning("Open failed for %s (attempt %d/%d): %s",
                       path, self.retry_count, self._max_attempts, error)
        return None

    def open_with_retry(self, path: str, seek_end: bool) -> OpenedFile:
        """Attempt to open until success or TerminalFailure, sleeping between attempts."""
        while True:
            opened = self.try_open(path, seek_end)
            if opened is not None:
                return opened
            self._sleep(self._retry_delay)
