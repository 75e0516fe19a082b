"""Tests for mec.data: SQLite and PostgreSQL access, row mapping, model loading."""

import logging
from dataclasses import dataclass
from pathlib import Path

import pytest

from mec.config import AppConfig
from mec.context import AppContext
from mec.data import DataError, Database, QueryError, load_models
from mec.data._mapping import map_rows
from mec.data._postgres import affected_rows
from mec.data.database import detect_driver, sqlite_path
from mec.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class Package:
    id: int
    title: str
    shipped: bool = False


@pytest.fixture
async def db():
    database = Database("sqlite:///:memory:")
    await database.connect()
    await database.execute_script(
        "CREATE TABLE packages (id INTEGER PRIMARY KEY, title TEXT NOT NULL, shipped INTEGER DEFAULT 0)"
    )
    yield database
    await database.disconnect()


class TestSqlitePath:
    def test_memory_forms(self) -> None:
        for url in ("sqlite::memory:", "sqlite://", "sqlite:///:memory:"):
            assert sqlite_path(url) == ":memory:"

    def test_relative_file(self) -> None:
        assert sqlite_path("sqlite:///app.db") == "app.db"

    def test_absolute_file(self) -> None:
        assert sqlite_path("sqlite:////var/data/app.db") == "/var/data/app.db"

    def test_other_schemes_rejected(self) -> None:
        with pytest.raises(DataError, match="Unsupported database URL"):
            sqlite_path("postgres://localhost/app")


class TestMapRows:
    def test_coerces_and_drops_extra_columns(self) -> None:
        rows = [{"id": "1", "title": "Crate", "shipped": 1, "weight": 3.5}]
        assert map_rows(Package, rows) == [Package(id=1, title="Crate", shipped=True)]

    def test_requires_dataclass(self) -> None:
        with pytest.raises(TypeError, match="not a dataclass"):
            map_rows(dict, [{}])


class TestDatabase:
    async def test_authenticate(self, db: Database, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="mec.data"):
            await db.authenticate()
        assert "Connection has been established successfully." in caplog.text

    async def test_execute_and_fetch(self, db: Database) -> None:
        assert await db.execute("INSERT INTO packages (title) VALUES (?)", "Crate") == 1
        await db.execute("INSERT INTO packages (title, shipped) VALUES (?, ?)", "Box", 1)

        packages = await db.fetch(Package, "SELECT * FROM packages ORDER BY id")
        assert packages == [
            Package(id=1, title="Crate", shipped=False),
            Package(id=2, title="Box", shipped=True),
        ]

    async def test_fetch_one(self, db: Database) -> None:
        await db.execute("INSERT INTO packages (title) VALUES (?)", "Crate")
        assert await db.fetch_one(Package, "SELECT * FROM packages WHERE title = ?", "Crate") == Package(
            id=1, title="Crate"
        )
        assert await db.fetch_one(Package, "SELECT * FROM packages WHERE title = ?", "None") is None

    async def test_fetch_val(self, db: Database) -> None:
        assert await db.fetch_val("SELECT COUNT(*) FROM packages") == 0

    async def test_query_error(self, db: Database) -> None:
        with pytest.raises(QueryError, match="no such table"):
            await db.fetch_val("SELECT * FROM missing")

    async def test_transaction_commits(self, db: Database) -> None:
        async with db.transaction():
            await db.execute("INSERT INTO packages (title) VALUES (?)", "A")
            await db.execute("INSERT INTO packages (title) VALUES (?)", "B")
        assert await db.fetch_val("SELECT COUNT(*) FROM packages") == 2

    async def test_transaction_rolls_back(self, db: Database) -> None:
        with pytest.raises(RuntimeError):
            async with db.transaction():
                await db.execute("INSERT INTO packages (title) VALUES (?)", "A")
                raise RuntimeError("abort")
        assert await db.fetch_val("SELECT COUNT(*) FROM packages") == 0

    async def test_nested_transaction_joins_outer(self, db: Database) -> None:
        with pytest.raises(RuntimeError):
            async with db.transaction():
                async with db.transaction():
                    await db.execute("INSERT INTO packages (title) VALUES (?)", "inner")
                raise RuntimeError("abort")
        assert await db.fetch_val("SELECT COUNT(*) FROM packages") == 0

    async def test_connects_lazily(self) -> None:
        database = Database("sqlite::memory:")
        assert not database.connected
        assert await database.fetch_val("SELECT 1") == 1
        assert database.connected
        await database.disconnect()
        assert not database.connected

    async def test_file_database(self, tmp_path: Path) -> None:
        database = Database(f"sqlite:///{tmp_path / 'app.db'}")
        await database.execute_script("CREATE TABLE t (x INTEGER)")
        await database.disconnect()
        assert (tmp_path / "app.db").is_file()


class TestDetectDriver:
    def test_schemes(self) -> None:
        assert detect_driver("sqlite:///app.db") == "sqlite"
        assert detect_driver("sqlite::memory:") == "sqlite"
        assert detect_driver("postgresql://mec@localhost/app") == "postgresql"
        assert detect_driver("postgres://mec@localhost/app") == "postgresql"

    def test_unknown_scheme(self) -> None:
        with pytest.raises(DataError, match="Unsupported database URL 'mysql://localhost/app'"):
            Database("mysql://localhost/app")

    def test_postgres_database_has_no_path(self) -> None:
        database = Database("postgresql://mec@localhost/app", pool_size=3)
        assert database.driver == "postgresql"
        assert database.path is None
        assert database.pool_size == 3

    def test_app_accepts_postgres_url(self) -> None:
        from mec.app import App

        app = App(AppConfig(database_url="postgresql://mec@localhost/app", log_console=False))
        assert app.db.driver == "postgresql"
        assert not app.db.connected


class FakeTransaction:
    def __init__(self, log: list[str]) -> None:
        self.log = log

    async def start(self) -> None:
        self.log.append("BEGIN")

    async def commit(self) -> None:
        self.log.append("COMMIT")

    async def rollback(self) -> None:
        self.log.append("ROLLBACK")


class FakePgConnection:
    def __init__(self, log: list[str]) -> None:
        self.log = log

    async def fetch(self, sql, *args):
        self.log.append(sql)
        return [{"id": 1, "title": "Crate"}, {"id": 2, "title": "Box"}]

    async def fetchrow(self, sql, *args):
        self.log.append(sql)
        return {"?column?": 1} if sql == "SELECT 1" else None

    async def execute(self, sql, *args):
        self.log.append(sql)
        return "UPDATE 2"

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self.log)


class FakePgPool:
    def __init__(self) -> None:
        self.log: list[str] = []
        self.created: list[tuple[str, dict]] = []
        self.acquired = 0
        self.released = 0
        self.closed = False

    async def acquire(self) -> FakePgConnection:
        self.acquired += 1
        return FakePgConnection(self.log)

    async def release(self, conn) -> None:
        self.released += 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def pg_pool(monkeypatch: pytest.MonkeyPatch) -> FakePgPool:
    import asyncpg

    pool = FakePgPool()

    async def create_pool(url, **kwargs):
        pool.created.append((url, kwargs))
        return pool

    monkeypatch.setattr(asyncpg, "create_pool", create_pool)
    return pool


class TestPostgres:
    async def test_connect_creates_pool(self, pg_pool: FakePgPool) -> None:
        database = Database("postgresql://mec@localhost/app", pool_size=4)
        await database.connect()
        assert pg_pool.created == [("postgresql://mec@localhost/app", {"min_size": 1, "max_size": 4})]
        await database.disconnect()
        assert pg_pool.closed

    async def test_authenticate(self, pg_pool: FakePgPool, caplog: pytest.LogCaptureFixture) -> None:
        database = Database("postgresql://mec@localhost/app")
        with caplog.at_level(logging.INFO, logger="mec.data"):
            await database.authenticate()
        assert "Connection has been established successfully." in caplog.text

    async def test_fetch_maps_rows(self, pg_pool: FakePgPool) -> None:
        database = Database("postgresql://mec@localhost/app")
        packages = await database.fetch(Package, "SELECT * FROM packages")
        assert packages == [Package(1, "Crate"), Package(2, "Box")]
        assert await database.fetch_one(Package, "SELECT * FROM packages WHERE id = $1", 9) is None

    async def test_connection_released_per_statement(self, pg_pool: FakePgPool) -> None:
        database = Database("postgresql://mec@localhost/app")
        assert await database.execute("UPDATE packages SET shipped = true") == 2
        await database.fetch(Package, "SELECT * FROM packages")
        assert pg_pool.acquired == pg_pool.released == 2

    async def test_transaction_uses_one_connection(self, pg_pool: FakePgPool) -> None:
        database = Database("postgresql://mec@localhost/app")
        async with database.transaction():
            await database.execute("UPDATE a SET x = 1")
            await database.execute("UPDATE b SET x = 1")
        assert pg_pool.log == ["BEGIN", "UPDATE a SET x = 1", "UPDATE b SET x = 1", "COMMIT"]
        assert pg_pool.acquired == pg_pool.released == 1

    async def test_transaction_rolls_back(self, pg_pool: FakePgPool) -> None:
        database = Database("postgresql://mec@localhost/app")
        with pytest.raises(RuntimeError):
            async with database.transaction():
                await database.execute("UPDATE a SET x = 1")
                raise RuntimeError("abort")
        assert pg_pool.log[-1] == "ROLLBACK"

    def test_affected_rows(self) -> None:
        assert affected_rows("INSERT 0 3") == 3
        assert affected_rows("UPDATE 2") == 2
        assert affected_rows("CREATE TABLE") == 0


class TestTransactionsPerDatabase:
    async def test_other_database_not_joined(self, db: Database) -> None:
        other = Database("sqlite:///:memory:")
        await other.execute_script("CREATE TABLE t (x INTEGER)")
        with pytest.raises(RuntimeError):
            async with db.transaction():
                await other.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("abort")
        assert await other.fetch_val("SELECT COUNT(*) FROM t") == 1
        await other.disconnect()


def _ctx() -> AppContext:
    return AppContext(
        config=AppConfig(),
        logger=logging.getLogger("mec.app"),
        db=Database("sqlite:///:memory:"),
    )


class TestLoadModels:
    async def test_missing_directory(self) -> None:
        assert await load_models("models", _ctx()) == {}

    async def test_defines_in_name_order(self, write_file) -> None:
        write_file("models/b_second.py", "def define(ctx):\n    return len(ctx.models)\n")
        write_file("models/a_first.py", "async def define(ctx):\n    return len(ctx.models)\n")
        write_file("models/_shared.py", "VALUE = 1\n")

        ctx = _ctx()
        models = await load_models("models", ctx)
        assert models == {"a_first": 0, "b_second": 1}
        assert ctx.models is models

    async def test_define_uses_database(self, write_file) -> None:
        write_file(
            "models/note.py",
            "async def define(ctx):\n"
            "    await ctx.db.execute_script('CREATE TABLE note (id INTEGER PRIMARY KEY)')\n"
            "    return 'notes'\n",
        )
        ctx = _ctx()
        await load_models("models", ctx)
        assert await ctx.db.fetch_val("SELECT COUNT(*) FROM note") == 0
        await ctx.db.disconnect()

    async def test_missing_define(self, write_file) -> None:
        write_file("models/broken.py", "TABLE = 'broken'\n")
        with pytest.raises(ConfigurationError, match="define"):
            await load_models("models", _ctx())
