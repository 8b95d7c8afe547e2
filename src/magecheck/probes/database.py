from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from magecheck.utils.check_types import DatabaseUnavailable


def make_engine(url: str | URL, *, connect_timeout: int = 10) -> Engine:
    parsed = make_url(url)
    connect_args: dict[str, Any] = {}
    if parsed.get_backend_name() == "mysql":
        connect_args["connect_timeout"] = int(connect_timeout)
    return create_engine(parsed, connect_args=connect_args, pool_pre_ping=True)


class SqlDatabaseProber:
    """Version and storage-engine queries against a MySQL-compatible server."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def version(self) -> str:
        try:
            with self.engine.connect() as conn:
                raw = conn.execute(text("SELECT VERSION()")).scalar()
        except SQLAlchemyError as ex:
            raise DatabaseUnavailable(f"cannot query server version: {ex}") from ex
        return str(raw or "")

    def list_engines(self) -> set[str]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(text("SHOW ENGINES")).mappings().all()
        except SQLAlchemyError as ex:
            raise DatabaseUnavailable(f"cannot list storage engines: {ex}") from ex
        engines: set[str] = set()
        for row in rows:
            # column name case differs between MySQL and MariaDB drivers
            for key, value in row.items():
                if str(key).lower() == "engine" and value:
                    engines.add(str(value))
        return engines


class UnconfiguredDatabaseProber:
    def __init__(self, reason: str) -> None:
        self.reason = reason

    def version(self) -> str:
        raise DatabaseUnavailable(self.reason)

    def list_engines(self) -> set[str]:
        raise DatabaseUnavailable(self.reason)
