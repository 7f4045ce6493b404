"""Transactional batches, status codes and error classification."""

from __future__ import annotations

import logging
import os
import sqlite3
import sys
import tempfile
from functools import partial
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "mini_dac").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mini_dac import (
    BusinessFailure,
    DacSqlExecutionError,
    DataBase,
    SQLiteDialect,
    capture,
)


def main() -> None:
    logging.basicConfig(level=logging.WARNING)

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "demo.sqlite3")
        db = DataBase(partial(sqlite3.connect, path), SQLiteDialect())
        db.execute_non_query("CREATE TABLE users (email TEXT UNIQUE)")

        # 1) A failing statement rolls back the whole batch.
        def register_twice(tx):
            tx.execute_non_query("INSERT INTO users VALUES (:e)", {"e": "a@example.com"})
            tx.execute_non_query("INSERT INTO users VALUES (:e)", {"e": "a@example.com"})

        try:
            db.execute_transactional_sql_batch(register_twice)
        except DacSqlExecutionError as exc:
            print("Rolled back:", exc, "| driver error:", type(exc.cause).__name__)
        print("Rows after rollback:", db.execute_scalar("SELECT COUNT(*) FROM users"))

        # 2) Driver errors can be suppressed per call; the helper default is returned.
        db.execute_non_query("INSERT INTO users VALUES (:e)", {"e": "b@example.com"})
        affected = db.execute_non_query(
            "INSERT INTO users VALUES (:e)", {"e": "b@example.com"}, throw_db_exception=False
        )
        print("Suppressed duplicate insert, affected:", affected)

        # 3) Non-zero status codes always surface; here a reader fakes one.
        strict = DataBase(
            partial(sqlite3.connect, path),
            SQLiteDialect(status_reader=lambda cursor, command: 50001),
        )
        outcome = capture(strict.execute_scalar, "SELECT COUNT(*) FROM users")
        if isinstance(outcome, BusinessFailure):
            print("Business failure:", outcome.code, "partial result:", outcome.partial_result)


if __name__ == "__main__":
    main()
