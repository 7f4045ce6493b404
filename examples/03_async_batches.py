"""Async executor example (sync sqlite3 driver driven through AsyncDataBase)."""

from __future__ import annotations

import asyncio
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

from mini_dac import AsyncDataBase, DacCancelledError, SQLiteDialect


async def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        cancel = asyncio.Event()
        db = AsyncDataBase(
            partial(sqlite3.connect, os.path.join(tmp, "demo.sqlite3")),
            SQLiteDialect(),
            cancellation=cancel,
        )
        await db.execute_non_query("CREATE TABLE jobs (name TEXT)")

        async def enqueue(tx):
            for name in ("build", "test", "deploy"):
                await tx.execute_non_query("INSERT INTO jobs VALUES (:name)", {"name": name})
            return await tx.execute_scalar("SELECT COUNT(*) FROM jobs")

        print("Queued:", await db.execute_transactional_sql_batch(enqueue))

        async with await db.execute_reader("SELECT name FROM jobs") as reader:
            print("Jobs:", [row["name"] async for row in reader])

        # Setting the token stops the next call before a connection is opened.
        cancel.set()
        try:
            await db.execute_scalar("SELECT COUNT(*) FROM jobs")
        except DacCancelledError as exc:
            print("Cancelled:", exc)


if __name__ == "__main__":
    asyncio.run(main())
