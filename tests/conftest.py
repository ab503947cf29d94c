"""
Shared fixtures for the visitor import tests.
"""

from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from visitor_import.batching import BatchTransactionManager
from visitor_import.storage import create_session_factory, create_store_engine, init_schema

CHROME_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/67.0.3396.99 Safari/537.36"
)

SAMPLE_LINE = (
    '24.99.237.149 - - [30/Jun/2018:12:31:51 -0400] '
    '"GET /minecraft/get-log?offset=188 HTTP/1.1" 200 26 '
    '"https://snooky.biz/minecraft" "' + CHROME_AGENT + '"'
)


class CommitFailingSession(Session):
    """Session whose commits start failing after a fixed number."""

    def __init__(self, *args, allowed_commits=0, **kwargs):
        super().__init__(*args, **kwargs)
        self.allowed_commits = allowed_commits

    def commit(self):
        if self.allowed_commits <= 0:
            raise OperationalError("COMMIT", {}, Exception("database or disk is full"))
        self.allowed_commits -= 1
        super().commit()


@pytest.fixture
def chrome_agent():
    return CHROME_AGENT


@pytest.fixture
def sample_line():
    return SAMPLE_LINE


@pytest.fixture
def make_line():
    """Build a combined log line from its interesting fields."""
    def _make(host="24.99.237.149", path="/", referrer="-", agent=CHROME_AGENT,
              when="30/Jun/2018:12:31:51 -0400", status="200", size="26", method="GET"):
        return (
            f'{host} - - [{when}] "{method} {path} HTTP/1.1" {status} {size} '
            f'"{referrer}" "{agent}"'
        )
    return _make


@pytest.fixture
def log_dir(tmp_path):
    path = tmp_path / "logs"
    path.mkdir()
    return path


@pytest.fixture
def write_log(log_dir):
    """Write *lines* to a log file inside ``log_dir`` and return its path."""
    def _write(name, lines) -> Path:
        path = log_dir / name
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def engine(tmp_path):
    engine = create_store_engine(f"sqlite:///{tmp_path / 'visitors.db'}")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def batches(session_factory):
    manager = BatchTransactionManager(session_factory, batch_size=1000)
    yield manager
    manager.finish()


@pytest.fixture
def commit_failing_factory(engine):
    """Session factory whose sessions allow *allowed* commits, then fail."""
    def _factory(allowed=0):
        return sessionmaker(bind=engine, class_=CommitFailingSession, autoflush=False, allowed_commits=allowed)
    return _factory
