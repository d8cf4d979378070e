"""Incremental UTF-8 decoding that holds back characters split across reads.

Bytes are decoded greedily. A trailing incomplete sequence is kept as
`pending` and prepended to the next chunk; it is never more than
MAX_CHAR_BYTES - 1 bytes and is always a valid prefix of some character.
Invalid sequences are reported to the caller rather than replaced.
"""

import codecs
import logging

from tailfollow.errors import DecodeError

logger = logging.getLogger(__name__)

MAX_CHAR_BYTES = 4


def _is_partial_char(tail: bytes) -> bool:
    """True if `tail` is an incomplete but so far valid UTF-8 sequence."""
    if not tail or len(tail) >= MAX_CHAR_BYTES:
        return False
    try:
        return codecs.getincrementaldecoder("utf-8")().decode(tail, final=False) == ""
    except UnicodeDecodeError:
        return False


class Utf8StreamDecoder:
    def __init__(self, path: str):
        self._path = path
        self.pending = b""

    def reset(self) -> None:
        """Discard any partial character held from a previous read."""
        if self.pending:
            logger.debug("Discarding %d pending byte(s) for %s", len(self.pending), self._path)
        self.pending = b""

    def decode(self, data: bytes, offset: int) -> tuple[str, DecodeError | None]:
        """Decode `data`, which starts at file offset `offset`.

        Returns the decodable text and, if an invalid sequence was found, a
        DecodeError describing the bytes dropped from the invalid point on.
        Text before the invalid point is still returned.
        """
        buf = self.pending + data
        buf_offset = offset - len(self.pending)
        self.pending = b""
        try:
            return buf.decode("utf-8"), None
        except UnicodeDecodeError as e:
            head = buf[:e.start].decode("utf-8")
            tail = buf[e.start:]
            if _is_partial_char(tail):
                self.pending = tail
                return head, None
            error = DecodeError(self._path, buf_offset + e.start, len(tail), e.reason)
            return head, error
