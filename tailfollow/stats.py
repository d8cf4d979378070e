"""Counters describing what a follower has done."""

import time


class FollowStats:
    """Tracks follower activity. Owned by a single follower, not thread-shared."""

    def __init__(self):
        self.steps = 0
        self.bytes_read = 0
        self.chars_emitted = 0
        self.rotations = 0
        self.truncations = 0
        self.decode_errors = 0
        self.open_retries = 0
        self._start_time = time.monotonic()

    def snapshot(self) -> dict:
        elapsed = time.monotonic() - self._start_time
        return {
            "steps": self.steps,
            "bytes_read": self.bytes_read,
            "chars_emitted": self.chars_emitted,
            "rotations": self.rotations,
            "truncations": self.truncations,
            "decode_errors": self.decode_errors,
            "open_retries": self.open_retries,
            "elapsed_seconds": round(elapsed, 1),
        }
