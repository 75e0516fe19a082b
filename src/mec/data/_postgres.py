"""Async PostgreSQL access through an asyncpg pool.

``PgConnection`` exposes the same awaitable methods as the SQLite
``AsyncConnection``, so ``Database`` runs one code path for both drivers.
Placeholders are asyncpg's ``$1, $2, ...``.
"""

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

import asyncpg


def affected_rows(status: str) -> int:
    """Row count from an asyncpg command status (``"INSERT 0 3"`` -> 3)."""
    parts = status.split()
    if len(parts) >= 2 and parts[-1].isdigit():
        return int(parts[-1])
    return 0


class PgConnection:
    """An acquired asyncpg connection. Rows come back as dicts."""

    __slots__ = ("_conn", "_tx")

    def __init__(self, conn: Any) -> None:
        self._conn = conn
        self._tx: Any = None

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        return [dict(row) for row in await self._conn.fetch(sql, *params)]

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        row = await self._conn.fetchrow(sql, *params)
        return None if row is None else dict(row)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        return affected_rows(await self._conn.execute(sql, *params))

    async def executescript(self, sql: str) -> None:
        # Without arguments asyncpg uses the simple protocol, which accepts
        # several statements.
        await self._conn.execute(sql)

    async def begin(self) -> None:
        self._tx = self._conn.transaction()
        await self._tx.start()

    async def commit(self) -> None:
        tx, self._tx = self._tx, None
        await tx.commit()

    async def rollback(self) -> None:
        tx, self._tx = self._tx, None
        await tx.rollback()


class PgPool:
    __slots__ = ("_pool",)

    def __init__(self, pool: Any) -> None:
        self._pool = pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[PgConnection]:
        conn = await self._pool.acquire()
        try:
            yield PgConnection(conn)
        finally:
            await self._pool.release(conn)

    async def close(self) -> None:
        await self._pool.close()


async def create_pool(url: str, *, max_size: int = 5) -> PgPool:
    return PgPool(await asyncpg.create_pool(url, min_size=1, max_size=max_size))
