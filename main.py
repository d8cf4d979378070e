#!/usr/bin/env python3
"""tailfollow — follow a file like `tail -F`, surviving rotation and truncation."""

import argparse
import logging
import signal
import sys
import threading

from tailfollow.config import LOG_LEVELS, load_config, load_yaml_config
from tailfollow.errors import DecodeError, ReadError, TerminalFailure
from tailfollow.follower import DECODE_POLICIES, Follower
from tailfollow.runner import run
from tailfollow.sinks import TextSink
from tailfollow.watcher import ChangeNotifier

logger = logging.getLogger("tailfollow")

EXIT_OK = 0
EXIT_FAILURE = 1


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tailfollow",
        description="Print text appended to a file as it is written.",
    )
    parser.add_argument("path", nargs="?", default=None, help="File to follow")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument(
        "--poll-interval", dest="poll_interval", type=float, default=None,
        help="Seconds between polls (default: 0.1)",
    )
    parser.add_argument(
        "--max-open-attempts", dest="max_open_attempts", type=int, default=None,
        help="Open attempts before giving up (default: 3)",
    )
    parser.add_argument(
        "--retry-delay", dest="retry_delay", type=float, default=None,
        help="Seconds between open attempts at startup (default: 1.0)",
    )
    parser.add_argument(
        "--decode-errors", dest="decode_errors", choices=DECODE_POLICIES, default=None,
        help="Invalid UTF-8 handling: report and skip, or stop (default: skip)",
    )
    parser.add_argument(
        "--watch", action="store_true", default=None,
        help="Use filesystem notifications to wake up between polls",
    )
    parser.add_argument(
        "--log-level", dest="log_level", type=str.upper, choices=LOG_LEVELS, default=None,
        help="Diagnostic log level on stderr (default: WARNING)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_cli_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [tailfollow] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    try:
        config = load_config(args, load_yaml_config(args.config))
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_FAILURE
    logging.getLogger().setLevel(config.log_level)
    logger.info("Config: path=%s, poll_interval=%.2f, max_open_attempts=%d, decode_errors=%s",
                config.path, config.poll_interval, config.max_open_attempts, config.decode_errors)

    stop_event = threading.Event()
    wakeup = threading.Event() if config.watch else None

    def _signal_handler(sig, _frame):
        logger.info("Shutdown signal received (signal %d), stopping...", sig)
        stop_event.set()
        if wakeup is not None:
            wakeup.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    notifier = None
    try:
        with Follower(
            config.path,
            TextSink(sys.stdout),
            max_open_attempts=config.max_open_attempts,
            retry_delay=config.retry_delay,
            read_chunk_size=config.read_chunk_size,
            decode_errors=config.decode_errors,
        ) as follower:
            if wakeup is not None:
                notifier = ChangeNotifier(config.path, wakeup)
                notifier.start()
            stats = run(follower, stop_event, config.poll_interval, wakeup)
    except (TerminalFailure, ReadError) as e:
        logger.error("%s", e)
        return EXIT_FAILURE
    except DecodeError as e:
        logger.error("Stopping on decode error: %s", e)
        return EXIT_FAILURE
    except (KeyboardInterrupt, BrokenPipeError):
        return EXIT_OK
    finally:
        if notifier is not None:
            notifier.stop()

    logger.info("Stats: %s", stats)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
