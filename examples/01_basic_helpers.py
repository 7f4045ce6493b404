"""Typed helper example: non-query, scalar, reader and tables over SQLite."""

from __future__ import annotations

import os
import sqlite3
import sys
import tempfile
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "mini_dac").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mini_dac import CommandType, DataBase, SQLiteDialect


@dataclass
class NewUser:
    email: str
    age: Optional[int] = None


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        # 1) Every call opens and closes its own connection.
        db = DataBase(partial(sqlite3.connect, os.path.join(tmp, "demo.sqlite3")), SQLiteDialect())
        db.execute_non_query(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT UNIQUE, age INTEGER)"
        )

        # 2) Parameters may be a mapping, (name, value) pairs or a record object.
        sql = "INSERT INTO users (email, age) VALUES (:email, :age)"
        db.execute_non_query(sql, {"email": "alice@example.com", "age": 25})
        db.execute_non_query(sql, [("email", "bob@example.com"), ("age", None)])
        db.execute_non_query(sql, NewUser(email="carol@example.com", age=41))

        print("Count:", db.execute_scalar("SELECT COUNT(*) FROM users"))

        # 3) A reader owns its connection until it is closed.
        with db.execute_reader("SELECT email, age FROM users ORDER BY id") as reader:
            while reader.read():
                print("Row:", reader.current)

        # 4) Tables and data sets, with paging.
        page = db.get_data_table("SELECT * FROM users ORDER BY id", start_record=1, max_records=2)
        print("Page:", page.to_dicts())
        whole = db.get_data_set("users", command_type=CommandType.TABLE_DIRECT)
        print("Data set:", whole, whole["Table0"].to_dicts())


if __name__ == "__main__":
    main()
