import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, SQLModel, create_engine

from app import crud
from app.core.config import Settings

logger = logging.getLogger(__name__)


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys = ON;")
        cursor.execute("PRAGMA journal_mode = WAL;")
        cursor.execute("PRAGMA synchronous = NORMAL;")
    finally:
        cursor.close()


class Store:
    """Owns the database engine for one prompt store.

    Nothing is opened at import time: build a store, call `init()` once, hand
    sessions out with `session()` and `close()` it when done. Separate stores
    never share state.
    """

    def __init__(self, database_url: str, *, echo: bool = False):
        self.database_url = database_url
        url = make_url(database_url)
        connect_args = {}
        if url.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        self.engine: Engine = create_engine(
            database_url, echo=echo, connect_args=connect_args
        )
        if url.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _configure_sqlite_connection)
        self._initialized = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "Store":
        return cls(settings.SQLALCHEMY_DATABASE_URI)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        """Create missing tables and insert missing default templates.

        Idempotent: defaults are matched by their fixed ids, so running this
        again never duplicates them or resets their edited name/content.
        """
        SQLModel.metadata.create_all(self.engine)
        with self.session() as session:
            inserted = crud.seed_default_templates(session=session)
        if inserted:
            logger.info("Seeded %d default templates", inserted)
        self._initialized = True

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session

    def close(self) -> None:
        self.engine.dispose()
        self._initialized = False
