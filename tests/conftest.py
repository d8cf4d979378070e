import pytest

from tailfollow.follower import Follower
from tailfollow.sinks import CollectingSink

ENV_VARS = (
    "TAIL_PATH", "POLL_INTERVAL", "MAX_OPEN_ATTEMPTS", "RETRY_DELAY",
    "READ_CHUNK_SIZE", "DECODE_ERRORS", "WATCH", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def log_file(tmp_path):
    f = tmp_path / "app.log"
    f.write_text("existing line\n")
    return f


@pytest.fixture
def sink():
    return CollectingSink()


@pytest.fixture
def reported():
    return []


@pytest.fixture
def make_follower(sink, reported):
    """Build a Follower that never sleeps and collects decode errors."""
    created = []

    def _make(path, **kwargs):
        kwargs.setdefault("errors", reported.append)
        kwargs.setdefault("sleep", lambda _: None)
        follower = Follower(str(path), sink, **kwargs)
        created.append(follower)
        return follower

    yield _make
    for follower in created:
        follower.close()