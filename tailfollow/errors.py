"""Error types raised and reported while following a file."""


class FollowError(Exception):
    """Base class for follower errors."""


class OpenError(FollowError):
    """The followed path could not be opened."""

    def __init__(self, path: str, attempts: int):
        super().__init__(f"could not open {path} after {attempts} attempt(s)")
        self.path = path
        self.attempts = attempts


class TerminalFailure(OpenError):
    """Open retry budget exhausted; following cannot continue."""


class DecodeError(FollowError):
    """Bytes read from the file are not valid UTF-8.

    `offset` is the file offset where the undecodable data starts and
    `dropped` is the number of bytes discarded from the read cycle.
    """

    def __init__(self, path: str, offset: int, dropped: int, reason: str):
        super().__init__(path, offset, reason)
        self.path = path
        self.offset = offset
        self.dropped = dropped
        self.reason = reason

    def __str__(self):
        return (
            f"invalid UTF-8 in {self.path} at offset {self.offset}: {self.reason} "
            f"({self.dropped} byte(s) dropped)"
        )


class ReadError(FollowError):
    """I/O on the open handle failed; following cannot continue."""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f"read failed for {path}: {cause}")
        self.path = path
