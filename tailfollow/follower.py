"""Follower: emits text appended to a single file, surviving rotation and truncation."""

import logging
import os
import time
from typing import Callable

from tailfollow.decoder import Utf8StreamDecoder
from tailfollow.errors import DecodeError, ReadError
from tailfollow.identity import FileIdentity, stat_path
from tailfollow.opener import DEFAULT_MAX_ATTEMPTS, FileOpener, OpenedFile
from tailfollow.sinks import Sink, log_decode_error
from tailfollow.stats import FollowStats

logger = logging.getLogger(__name__)

DECODE_POLICIES = ("skip", "fatal")
DEFAULT_CHUNK_SIZE = 64 * 1024


class Follower:
    """Follows one file path, one step at a time.

    Construction opens the path (with retry) and positions at end of file.
    Each call to step() detects rotation (the path now names a different
    physical file) or truncation (same file, smaller than last seen), then
    reads everything available, decodes it and writes the text to the sink.

    Raises TerminalFailure from construction or step() once the open retry
    budget is exhausted, and ReadError from step() when I/O on the open
    handle fails. Decode errors go to `errors` and are not raised
    unless `decode_errors="fatal"`.
    """

    def __init__(
        self,
        path: str,
        sink: Sink,
        errors: Callable[[DecodeError], None] = log_decode_error,
        max_open_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = 1.0,
        read_chunk_size: int = DEFAULT_CHUNK_SIZE,
        decode_errors: str = "skip",
        sleep: Callable[[float], None] = time.sleep,
    ):
        if decode_errors not in DECODE_POLICIES:
            raise ValueError(f"decode_errors must be one of {DECODE_POLICIES}, got {decode_errors!r}")
        if read_chunk_size < 1:
            raise ValueError("read_chunk_size must be positive")
        self._path = path
        self._sink = sink
        self._errors = errors
        self._chunk_size = read_chunk_size
        self._fatal_decode = decode_errors == "fatal"
        self._decoder = Utf8StreamDecoder(path)
        self.stats = FollowStats()
        self._opener = FileOpener(max_open_attempts, retry_delay, sleep, stats=self.stats)
        self._handle = None
        self._identity = None
        self._last_size = 0

        self._install(self._opener.open_with_retry(path, seek_end=True))
        logger.info("Following %s from offset %d", path, self._last_size)

    @property
    def path(self) -> str:
        return self._path

    @property
    def identity(self):
        return self._identity

    @property
    def last_size(self) -> int:
        return self._last_size

    @property
    def pending_bytes(self) -> bytes:
        return self._decoder.pending

    @property
    def retry_count(self) -> int:
        return self._opener.retry_count

    @property
    def closed(self) -> bool:
        return self._handle is None

    def _install(self, opened: OpenedFile) -> None:
        """Replace handle and identity together; the old handle is closed."""
        old = self._handle
        self._handle = opened.handle
        self._identity = opened.identity
        self._last_size = opened.position
        self._decoder.reset()
        if old is not None:
            old.close()

    def _check_path(self) -> bool:
        """Detect rotation or truncation. Returns False if nothing should be read this step."""
        st = stat_path(self._path)
        if st is None:
            return True

        if FileIdentity.from_stat(st) != self._identity:
            return self._rotate()

        if st.st_size < self._last_size:
            logger.info("File truncation detected for %s (%d -> %d bytes)",
                        self._path, self._last_size, st.st_size)
            try:
                self._handle.seek(0)
            except OSError as e:
                raise ReadError(self._path, e) from e
            self._decoder.reset()
            self._last_size = st.st_size
            self.stats.truncations += 1
        return True

    def _rotate(self) -> bool:
        logger.info("File rotation detected for %s", self._path)
        opened = self._opener.try_open(self._path, seek_end=False)
        if opened is None:
            return False
        self._install(opened)
        self.stats.rotations += 1
        return True

    def _available(self) -> int:
        """Bytes between the read position and end of file as of now."""
        try:
            return os.fstat(self._handle.fileno()).st_size - self._handle.tell()
        except OSError as e:
            raise ReadError(self._path, e) from e

    def _read(self, size: int) -> tuple[int, bytes]:
        try:
            offset = self._handle.tell()
            return offset, self._handle.read(size)
        except OSError as e:
            raise ReadError(self._path, e) from e

    def _read_position(self) -> int:
        try:
            return self._handle.tell()
        except OSError as e:
            raise ReadError(self._path, e) from e

    def step(self) -> int:
        """Run one poll cycle. Returns the number of characters emitted.

        Reads only up to the end of file seen at the start of the read, so
        a step returns even while a writer keeps appending.
        """
        if self._handle is None:
            raise ValueError("step() on a closed Follower")
        self.stats.steps += 1
        if not self._check_path():
            return 0

        emitted = 0
        error = None
        remaining = self._available()
        while remaining > 0:
            offset, chunk = self._read(min(self._chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            self.stats.bytes_read += len(chunk)
            if error is not None:
                # Rest of this read cycle is dropped after an invalid sequence.
                error.dropped += len(chunk)
                continue
            text, error = self._decoder.decode(chunk, offset)
            if text:
                self._sink.write(text)
                emitted += len(text)

        self._last_size = self._read_position()
        self.stats.chars_emitted += emitted
        if error is not None:
            self.stats.decode_errors += 1
            if self._fatal_decode:
                raise error
            self._errors(error)
        return emitted

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.debug("Closed %s", self._path)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
