import sqlite3
from pathlib import Path

import pytest

from farmstore.adapters.sqlite.migrator import SQLiteMigrator

MIGRATIONS_DIR = str(Path(__file__).parent.parent.parent / "migrations")


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "test_db.sqlite")


def _tables(db_path: str) -> set[str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        return {r[0] for r in rows}
    finally:
        conn.close()


def test_migrator_applies_schema(temp_db_path):
    applied = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR).run_migrations()

    assert applied == ["001_initial.sql", "002_seed_discounts.sql"]
    assert {"_migrations", "newsletter_subscribers", "discount_codes"} <= _tables(temp_db_path)


def test_migrator_seeds_codes(temp_db_path):
    SQLiteMigrator(temp_db_path, MIGRATIONS_DIR).run_migrations()

    conn = sqlite3.connect(temp_db_path)
    codes = {r[0] for r in conn.execute("SELECT code FROM discount_codes").fetchall()}
    conn.close()
    assert codes == {"DOBRODOSLI10", "BREZPOSTNINE"}


def test_migrator_is_idempotent(temp_db_path):
    migrator = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR)

    migrator.run_migrations()
    assert migrator.run_migrations() == []

    conn = sqlite3.connect(temp_db_path)
    cursor = conn.execute("SELECT count(*) FROM _migrations")
    assert cursor.fetchone()[0] == 2
    conn.close()


def test_down_section_not_applied(temp_db_path, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_t.sql").write_text(
        "-- Up\nCREATE TABLE t (id INTEGER);\n-- Down\nDROP TABLE t;\n", encoding="utf-8"
    )

    SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()

    assert "t" in _tables(temp_db_path)


def test_broken_migration_raises(temp_db_path, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_bad.sql").write_text("CREATE TABLE (;\n", encoding="utf-8")

    with pytest.raises(RuntimeError, match="001_bad.sql"):
        SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()
