"""Output sink and diagnostic channel used by the follower."""

import logging
from typing import Protocol, TextIO

from tailfollow.errors import DecodeError

logger = logging.getLogger(__name__)


class Sink(Protocol):
    def write(self, text: str) -> object: ...


class TextSink:
    """Writes text to a stream and flushes so output appears as it is followed."""

    def __init__(self, stream: TextIO):
        self._stream = stream

    def write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()


class CollectingSink:
    """Keeps every written chunk in memory."""

    def __init__(self):
        self.chunks: list[str] = []

    def write(self, text: str) -> None:
        self.chunks.append(text)

    @property
    def text(self) -> str:
        return "".join(self.chunks)


def log_decode_error(error: DecodeError) -> None:
    """Default error channel: report decode errors through logging."""
    logger.error("%s", error)
