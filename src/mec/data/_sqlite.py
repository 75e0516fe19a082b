"""Async facade over stdlib ``sqlite3``.

Every blocking call runs in an anyio worker thread. The connection is
opened with ``check_same_thread=False`` since consecutive calls can land
on different pool threads; ``Database`` serialises access with a lock.
"""

import sqlite3
from collections.abc import Callable, Sequence
from typing import Any

import anyio


async def _in_thread(func: Callable[[], Any]) -> Any:
    return await anyio.to_thread.run_sync(func)


class AsyncConnection:
    """A ``sqlite3.Connection`` whose methods are awaitable.

    Rows come back as dicts keyed by column name.
    """

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._conn.row_factory = _dict_row

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        return await _in_thread(lambda: self._conn.execute(sql, params).fetchall())

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        return await _in_thread(lambda: self._conn.execute(sql, params).fetchone())

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        return await _in_thread(lambda: self._conn.execute(sql, params).rowcount)

    async def executescript(self, sql: str) -> None:
        await _in_thread(lambda: self._conn.executescript(sql))

    async def begin(self) -> None:
        self._conn.autocommit = False

    async def commit(self) -> None:
        try:
            await _in_thread(self._conn.commit)
        finally:
            self._conn.autocommit = True

    async def rollback(self) -> None:
        try:
            await _in_thread(self._conn.rollback)
        finally:
            self._conn.autocommit = True

    async def close(self) -> None:
        await _in_thread(self._conn.close)


def _dict_row(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    return {column[0]: value for column, value in zip(cursor.description, row, strict=True)}


async def connect(path: str) -> AsyncConnection:
    """Open *path* in autocommit mode; ``begin()`` turns it off until commit or rollback."""
    conn = await _in_thread(
        lambda: sqlite3.connect(path, autocommit=True, check_same_thread=False)
    )
    return AsyncConnection(conn)
