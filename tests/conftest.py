from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from farmstore.adapters.dev_email import DevEmailAdapter
from farmstore.adapters.sqlite.migrator import SQLiteMigrator
from farmstore.adapters.sqlite_db import SQLiteDiscountRepo, SQLiteSubscriberRepo
from farmstore.adapters.token_store import InMemoryProcessedTokenStore
from farmstore.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).parent.parent
MIGRATIONS_DIR = str(PROJECT_ROOT / "migrations")


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "farmstore.db")
    SQLiteMigrator(path, MIGRATIONS_DIR).run_migrations()
    return path


@pytest.fixture
def subscriber_repo(db_path) -> SQLiteSubscriberRepo:
    return SQLiteSubscriberRepo(db_path)


@pytest.fixture
def discount_repo(db_path) -> SQLiteDiscountRepo:
    return SQLiteDiscountRepo(db_path)


@pytest.fixture
def email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def token_store() -> InMemoryProcessedTokenStore:
    return InMemoryProcessedTokenStore()


@pytest.fixture
def clock() -> FixedClock:
    # Inside the BREZPOSTNINE validity window
    return FixedClock(datetime(2025, 5, 10, 12, 0, tzinfo=UTC))


@pytest.fixture
def rules():
    return load_rules(PROJECT_ROOT / "rules.yaml")
