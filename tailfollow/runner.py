"""Driving loop: step the follower until asked to stop."""

import logging
import threading

from tailfollow.follower import Follower

logger = logging.getLogger(__name__)


def run(
    follower: Follower,
    stop_event: threading.Event,
    poll_interval: float,
    wakeup: threading.Event | None = None,
) -> dict:
    """Call follower.step() until `stop_event` is set.

    Between steps waits `poll_interval` seconds, or less if `wakeup` is set.
    TerminalFailure propagates to the caller. Returns a stats snapshot.
    """
    while not stop_event.is_set():
        follower.step()
        if wakeup is None:
            stop_event.wait(poll_interval)
        else:
            wakeup.wait(poll_interval)
            wakeup.clear()
    logger.info("Follow loop stopped for %s", follower.path)
    return follower.stats.snapshot()
