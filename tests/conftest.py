from collections.abc import Iterator

import pytest
from click.testing import CliRunner
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session

from docslug import MemoryStore, SlugRegistry, Slugger


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def registry(store: MemoryStore) -> SlugRegistry:
    return SlugRegistry(store)


@pytest.fixture()
def slugger(registry: SlugRegistry) -> Slugger:
    return Slugger(registry)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    """In-memory SQLite engine with working SAVEPOINT support."""
    engine = create_engine("sqlite://")

    # pysqlite emits its own BEGIN; hand transaction control to SQLAlchemy
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session
