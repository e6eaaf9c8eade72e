"""Database boundary: introspection commands and row streaming."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import DatabaseConfig
from .errors import ConnectionFailure, IntrospectionFailure
from .models.dump import ObjectKind, RoutineKind
from .sql_text import quote_identifier

logger = logging.getLogger(__name__)


def _identifier(name: str) -> str:
    """Backtick-quoted identifier safe to embed in a text() statement."""
    # text() reads ":word" as a bind parameter unless the colon is escaped
    return quote_identifier(name).replace(":", "\\:")


class Introspector(ABC):
    """What the dump engine needs from a database connection."""

    database: str = ""

    @abstractmethod
    def list_objects(self, kind: ObjectKind) -> list[str]:
        """Names of all tables or views, in the order the server reports them."""
        pass

    @abstractmethod
    def show_create(self, kind: ObjectKind, name: str) -> str:
        """The server's own CREATE statement for a table or view."""
        pass

    @abstractmethod
    def list_routines(self, kind: RoutineKind) -> list[str]:
        """Names of the stored procedures or functions of the database."""
        pass

    @abstractmethod
    def show_create_routine(self, kind: RoutineKind, name: str) -> str:
        """The server's own CREATE statement for a stored routine."""
        pass

    @abstractmethod
    def stream_rows(self, table: str) -> Iterator[Mapping[str, Any]]:
        """Yield every row of a table as an ordered column -> value mapping."""
        pass

    def close(self):
        """Release the connection."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class MySQLIntrospector(Introspector):
    """Introspector backed by one SQLAlchemy connection to a MySQL server."""

    def __init__(self, db_config: DatabaseConfig, engine: Optional[Engine] = None):
        """Initialize the introspector.

        Args:
            db_config: Database connection configuration
            engine: Engine to use instead of one built from ``db_config``
        """
        self.db_config = db_config
        self.database = db_config.database
        self._engine = engine
        self._conn: Optional[Connection] = None

    def connect(self) -> Connection:
        """Open the connection used for the whole run."""
        if self._conn is None:
            if self._engine is None:
                self._engine = create_engine(self.db_config.connection_url)
            try:
                self._conn = self._engine.connect()
            except SQLAlchemyError as e:
                raise ConnectionFailure(
                    f"Cannot connect to {self.db_config.host}:{self.db_config.port}/{self.database}: {e}"
                ) from e
            logger.debug("Connected to %s:%s/%s", self.db_config.host, self.db_config.port, self.database)
        return self._conn

    def close(self):
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def _query(self, sql: str, params: Optional[dict] = None, what: str = "query"):
        conn = self.connect()
        try:
            return conn.execute(text(sql), params or {}).fetchall()
        except SQLAlchemyError as e:
            raise IntrospectionFailure(f"Failed to {what}: {e}") from e

    def list_objects(self, kind: ObjectKind) -> list[str]:
        sql = f"SHOW FULL TABLES IN {_identifier(self.database)} WHERE Table_type LIKE :pattern"
        rows = self._query(sql, {"pattern": f"%{kind.value}%"}, what=f"list {kind.value.lower()}s")
        return [row[0] for row in rows]

    def show_create(self, kind: ObjectKind, name: str) -> str:
        # SHOW CREATE TABLE also answers for views
        rows = self._query(
            f"SHOW CREATE TABLE {_identifier(name)}",
            what=f"read CREATE statement of {kind.value.lower()} {name}",
        )
        if not rows or len(rows[0]) < 2 or not rows[0][1]:
            raise IntrospectionFailure(f"No CREATE statement returned for {kind.value.lower()} {name}")
        return rows[0][1]

    def list_routines(self, kind: RoutineKind) -> list[str]:
        rows = self._query(
            f"SHOW {kind.value} STATUS WHERE Db = :database",
            {"database": self.database},
            what=f"list {kind.value.lower()}s",
        )
        return [row._mapping["Name"] for row in rows]

    def show_create_routine(self, kind: RoutineKind, name: str) -> str:
        qualified = f"{_identifier(self.database)}.{_identifier(name)}"
        rows = self._query(
            f"SHOW CREATE {kind.value} {qualified}",
            what=f"read CREATE statement of {kind.value.lower()} {name}",
        )
        column = f"Create {kind.value.capitalize()}"
        sql = rows[0]._mapping.get(column) if rows else None
        if not sql:
            # The server hides the body without SHOW_ROUTINE / ownership
            raise IntrospectionFailure(
                f"No CREATE statement returned for {kind.value.lower()} {name} (missing privileges?)"
            )
        return sql

    def stream_rows(self, table: str) -> Iterator[Mapping[str, Any]]:
        conn = self.connect()
        sql = f"SELECT * FROM {_identifier(table)}"
        try:
            result = conn.execute(text(sql).execution_options(stream_results=True))
        except SQLAlchemyError as e:
            raise IntrospectionFailure(f"Failed to read rows of table {table}: {e}") from e
        try:
            for row in result.mappings():
                yield row
        except SQLAlchemyError as e:
            raise IntrospectionFailure(f"Failed while streaming rows of table {table}: {e}") from e
        finally:
            result.close()
