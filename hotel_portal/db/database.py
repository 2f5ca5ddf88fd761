"""Relational store: connection settings, schema and per-operation connections.

Connections come from the SQLAlchemy engine pool and are held only for the
duration of one store call. Store methods report failures as Status values
instead of raising.
"""

import configparser
import functools
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import (
    Boolean,
    Column,
    Connection,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    inspect,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from hotel_portal.status import Status

logger = logging.getLogger(__name__)

metadata = MetaData()

hotel_details = Table(
    "hotel_details",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("name", String(256), nullable=False),
    Column("street", String(512)),
    Column("city", String(64)),
    Column("state", String(32)),
    Column("latitude", Float),
    Column("longitude", Float),
    Column("areadesc", String(4000)),
    Column("propertydesc", String(4000)),
)

review_details = Table(
    "review_details",
    metadata,
    Column("reviewid", String(64), primary_key=True),
    Column("hotelid", String(32), nullable=False, index=True),
    Column("user", String(512), index=True),
    Column("rating", Float),
    Column("isrecommended", Boolean),
    Column("title", String(2000)),
    Column("reviewtext", String(4000)),
    Column("reviewdate", String(256)),
)

login_users = Table(
    "login_users",
    metadata,
    Column("userid", Integer, primary_key=True, autoincrement=True),
    Column("username", String(32), nullable=False, unique=True),
    Column("password", String(64), nullable=False),
    Column("usersalt", String(32), nullable=False),
    Column("lastlogin", String(256)),
    Column("currentlogin", String(256)),
)

saved_hotels = Table(
    "saved_hotels",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user", String(64), primary_key=True),
)

visited_links = Table(
    "visited_links",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user", String(64), primary_key=True),
)


class DatabaseConfigError(Exception):
    def __init__(self, status: Status, message: str):
        self.status = status
        self.message = message
        super().__init__(message)


class StoreConnectionError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    username: str | None = None
    password: str | None = None


def load_database_properties(path: str | Path) -> DatabaseConfig:
    """Read a ``key=value`` properties file with ``url``, ``username`` and ``password``."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DatabaseConfigError(Status.MISSING_CONFIG, f"{path}: {exc}") from exc

    parser = configparser.ConfigParser(
        delimiters=("=", ":"), comment_prefixes=("#", "!"), interpolation=None
    )
    try:
        parser.read_string("[database]\n" + text)
    except configparser.Error as exc:
        raise DatabaseConfigError(Status.MISSING_VALUES, f"{path}: {exc}") from exc

    section = parser["database"]
    url = section.get("url", "").strip()
    if not url:
        raise DatabaseConfigError(Status.MISSING_VALUES, f"{path}: no 'url' property")
    return DatabaseConfig(
        url=url,
        username=section.get("username") or None,
        password=section.get("password") or None,
    )


class Database:
    def __init__(self, config: DatabaseConfig, **engine_options):
        try:
            url = make_url(config.url)
        except ArgumentError as exc:
            raise DatabaseConfigError(Status.MISSING_VALUES, f"Invalid database url: {exc}") from exc
        if url.get_backend_name() == "sqlite":
            # pooled connections are handed to request and ingestion threads
            engine_options.setdefault("connect_args", {"check_same_thread": False})
        elif config.username:
            url = url.set(username=config.username, password=config.password)
        self.engine = create_engine(url, pool_pre_ping=True, **engine_options)

    @classmethod
    def from_properties(cls, path: str | Path, **engine_options) -> "Database":
        return cls(load_database_properties(path), **engine_options)

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """A pooled connection inside one transaction, released on every exit."""
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as exc:
            raise StoreConnectionError(str(exc)) from exc
        with conn:
            with conn.begin():
                yield conn

    def test_connection(self) -> bool:
        try:
            with self.transaction():
                return True
        except StoreConnectionError as exc:
            logger.error("%s %s", Status.CONNECTION_FAILED.message, exc)
            return False

    def setup_tables(self) -> Status:
        if not self.test_connection():
            return Status.CONNECTION_FAILED
        try:
            existing = set(inspect(self.engine).get_table_names())
            missing = [t for t in metadata.sorted_tables if t.name not in existing]
            if not missing:
                logger.info("Tables found.")
                return Status.OK
            logger.info("Creating tables: %s", ", ".join(t.name for t in missing))
            metadata.create_all(self.engine, tables=missing)
            created = set(inspect(self.engine).get_table_names())
        except SQLAlchemyError as exc:
            logger.error("%s %s", Status.CREATE_FAILED.message, exc)
            return Status.CREATE_FAILED
        if any(t.name not in created for t in missing):
            return Status.CREATE_FAILED
        return Status.OK

    def dispose(self) -> None:
        self.engine.dispose()


def is_blank(text: str | None) -> bool:
    return text is None or not text.strip()


def returns_status(func: Callable[..., Status]) -> Callable[..., Status]:
    """Map connection and SQL failures of a store call to a Status."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Status:
        try:
            return func(*args, **kwargs)
        except StoreConnectionError as exc:
            logger.error("%s: %s %s", func.__qualname__, Status.CONNECTION_FAILED.message, exc)
            return Status.CONNECTION_FAILED
        except SQLAlchemyError as exc:
            logger.error("%s: %s %s", func.__qualname__, Status.SQL_EXCEPTION.message, exc)
            return Status.SQL_EXCEPTION

    return wrapper


def returns_default(default_factory: Callable[[], object]):
    """Log connection and SQL failures of a read and return a default value."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (StoreConnectionError, SQLAlchemyError) as exc:
                logger.error("%s failed: %s", func.__qualname__, exc)
                return default_factory()

        return wrapper

    return decorator
