"""DDL generation for the database, tables, views and stored routines."""

import logging

from .create_statement import CreateTableStatement, rewrite_view
from .introspector import Introspector
from .models.dump import ObjectKind, RoutineKind, TableSchema
from .sql_text import quote_identifier

logger = logging.getLogger(__name__)


class SchemaEmitter:
    """Builds schema statements from the server's own CREATE text.

    The emitter keeps no state between calls: foreign keys found in a table
    are returned with its schema and re-attached by the caller.
    """

    def __init__(self, introspector: Introspector):
        self.introspector = introspector

    def emit_create_database(self, charset: str = "utf8mb4", collation: str = "utf8mb4_general_ci") -> str:
        database = quote_identifier(self.introspector.database)
        return (
            f"CREATE DATABASE IF NOT EXISTS {database}\n"
            f"\tCHARACTER SET {charset}\n"
            f"\tCOLLATE {collation};\n\n"
            f"USE {database};\n\n"
        )

    def emit_drop(self, name: str) -> str:
        return f"DROP TABLE IF EXISTS {quote_identifier(name)};\n"

    def emit_table(self, name: str) -> TableSchema:
        """Guarded CREATE TABLE for one table, with foreign keys split out.

        Args:
            name: Table name

        Returns:
            TableSchema whose ``create_sql`` holds no FOREIGN KEY definition
            and whose ``foreign_keys`` lists them as ``ADD ...`` fragments
        """
        sql = self.introspector.show_create(ObjectKind.TABLE, name)
        statement = CreateTableStatement.parse(sql, name=name).guarded()
        foreign_keys = [c.as_alter_fragment() for c in statement.foreign_keys]
        if foreign_keys:
            statement = statement.without_foreign_keys()
            logger.debug("Deferred %d foreign keys of %s", len(foreign_keys), name)
        return TableSchema(
            name=name,
            create_sql=f"{statement.render()};\n\n",
            foreign_keys=foreign_keys,
        )

    def emit_foreign_keys(self, name: str, clauses: list[str]) -> str:
        """One ALTER TABLE re-adding every deferred clause of a table."""
        if not clauses:
            return ""
        return f"ALTER TABLE {quote_identifier(name)}\n " + ",\n ".join(clauses) + ";\n\n"

    def emit_view(self, name: str) -> str:
        sql = self.introspector.show_create(ObjectKind.VIEW, name)
        return f"{rewrite_view(sql, name=name)};\n\n"

    def emit_routine(self, kind: RoutineKind, name: str) -> str:
        """Drop-and-create block for a stored procedure or function."""
        sql = self.introspector.show_create_routine(kind, name)
        lines = [
            "DELIMITER $$",
            f"DROP {kind.value} IF EXISTS {quote_identifier(name)}$$",
            f"{sql}$$",
            "DELIMITER ;",
        ]
        return "\n".join(lines) + "\n\n"
