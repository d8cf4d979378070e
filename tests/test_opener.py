"""Tests for the open/retry manager."""

import errno

import pytest

from tailfollow.errors import OpenError, TerminalFailure
from tailfollow.opener import FileOpener
from tailfollow.stats import FollowStats


class TestTryOpen:
    def test_seek_end(self, tmp_path):
        f = tmp_path / "a.log"
        f.write_text("0123456789")
        opened = FileOpener().try_open(str(f), seek_end=True)
        with opened.handle:
            assert opened.position == 10
            assert opened.handle.tell() == 10

    def test_seek_start(self, tmp_path):
        f = tmp_path / "a.log"
        f.write_text("0123456789")
        opened = FileOpener().try_open(str(f), seek_end=False)
        with opened.handle:
            assert opened.position == 0
            assert opened.handle.read() == b"0123456789"

    def test_failures_count_until_terminal(self, tmp_path):
        opener = FileOpener(max_attempts=3)
        path = str(tmp_path / "missing.log")
        assert opener.try_open(path, seek_end=True) is None
        assert opener.retry_count == 1
        assert opener.try_open(path, seek_end=True) is None
        assert opener.retry_count == 2
        with pytest.raises(TerminalFailure) as exc_info:
            opener.try_open(path, seek_end=True)
        assert exc_info.value.path == path
        assert isinstance(exc_info.value, OpenError)

    def test_success_resets_count(self, tmp_path):
        opener = FileOpener()
        f = tmp_path / "a.log"
        assert opener.try_open(str(f), seek_end=True) is None
        f.write_text("")
        opened = opener.try_open(str(f), seek_end=True)
        opened.handle.close()
        assert opener.retry_count == 0

    def test_single_attempt_budget(self, tmp_path):
        with pytest.raises(TerminalFailure):
            FileOpener(max_attempts=1).try_open(str(tmp_path / "x"), seek_end=True)

    def test_invalid_budget(self):
        with pytest.raises(ValueError):
            FileOpener(max_attempts=0)


class TestOpenWithRetry:
    def test_sleeps_between_attempts(self, tmp_path):
        sleeps = []
        opener = FileOpener(max_attempts=3, retry_delay=2.0, sleep=sleeps.append)
        with pytest.raises(TerminalFailure) as exc_info:
            opener.open_with_retry(str(tmp_path / "missing.log"), seek_end=True)
        assert sleeps == [2.0, 2.0]
        assert exc_info.value.attempts == 3

    def test_returns_once_available(self, tmp_path):
        f = tmp_path / "a.log"
        sleeps = []

        def sleep(delay):
            sleeps.append(delay)
            f.write_text("abc")

        opener = FileOpener(sleep=sleep)
        opened = opener.open_with_retry(str(f), seek_end=True)
        opened.handle.close()
        assert len(sleeps) == 1
        assert opened.position == 3


class TestFailureAccounting:
    def test_stats_count_every_failed_attempt(self, tmp_path):
        stats = FollowStats()
        opener = FileOpener(max_attempts=3, sleep=lambda _: None, stats=stats)
        with pytest.raises(TerminalFailure):
            opener.open_with_retry(str(tmp_path / "missing.log"), seek_end=True)
        assert stats.open_retries == 3

    def test_fstat_failure_counts_as_failed_attempt(self, tmp_path, monkeypatch):
        f = tmp_path / "a.log"
        f.write_text("data")

        def broken_fstat(fd):
            raise OSError(errno.EIO, "Input/output error")

        monkeypatch.setattr("tailfollow.identity.os.fstat", broken_fstat)
        opener = FileOpener(max_attempts=2)
        assert opener.try_open(str(f), seek_end=True) is None
        assert opener.retry_count == 1
        with pytest.raises(TerminalFailure) as exc_info:
            opener.try_open(str(f), seek_end=True)
        assert isinstance(exc_info.value.__cause__, OSError)
