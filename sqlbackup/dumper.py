"""Dump orchestration: discovery, schema, foreign keys, routines and data."""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from .catalog import ObjectCatalog
from .config import DumpConfig
from .data_emitter import DataEmitter
from .introspector import Introspector
from .models.dump import (
    DeferredForeignKeys,
    DumpResult,
    ObjectKind,
    RoutineKind,
    Section,
)
from .schema_emitter import SchemaEmitter
from .sink import OutputSink
from .sql_text import banner, footer, header

logger = logging.getLogger(__name__)

FOREIGN_KEY_CHECKS_OFF = "SET FOREIGN_KEY_CHECKS = FALSE;\n\n"
FOREIGN_KEY_CHECKS_ON = "SET FOREIGN_KEY_CHECKS = TRUE;\n\n"


class DatabaseDumper:
    """Runs one dump of a database into a sink.

    Stages run in a fixed order and each one is skipped when its section is
    disabled::

        discover tables -> discover views -> [DB] -> [TABLES] -> [VIEWS]
            -> [ROUTINES] -> [DATA]

    Any error aborts the run. Text already flushed to the sink stays there.
    """

    def __init__(
        self,
        introspector: Introspector,
        dump_config: Optional[DumpConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
        timer: Callable[[], float] = time.perf_counter,
    ):
        """Initialize the dumper.

        Args:
            introspector: Database boundary
            dump_config: Selection of objects and sections (optional)
            clock: Source of the header timestamp
            timer: Monotonic clock used for the elapsed time
        """
        self.introspector = introspector
        self.config = dump_config or DumpConfig()
        self.clock = clock
        self.timer = timer
        self.catalog = ObjectCatalog(introspector)
        self.schema = SchemaEmitter(introspector)

    @property
    def database(self) -> str:
        return self.introspector.database

    def run(self, sink: OutputSink) -> DumpResult:
        """Write the complete dump to the sink and flush it.

        Returns:
            DumpResult summarizing what was written
        """
        sections = self.config.sections
        object_filter = self.config.object_filter
        started = self.timer()
        result = DumpResult(database=self.database, path=str(sink.path) if sink.path else None)

        result.tables = self.catalog.discover(ObjectKind.TABLE, object_filter)
        result.views = self.catalog.discover(ObjectKind.VIEW, object_filter)

        sink.write(header(self.database, self.clock()))

        if sections.enabled(Section.DB):
            sink.write(banner("CREATE DB"))
            sink.write(self.schema.emit_create_database(self.config.db_charset, self.config.db_collation))

        if sections.enabled(Section.TABLES):
            result.foreign_key_count = self._emit_tables(sink, result.tables)

        if sections.enabled(Section.VIEWS):
            sink.write(banner("CREATE VIEWS"))
            for view in result.views:
                sink.write(self.schema.emit_view(view))

        if sections.enabled(Section.ROUTINES):
            result.procedures = self._emit_routines(sink, RoutineKind.PROCEDURE, "CREATE PROCEDURES")
            result.functions = self._emit_routines(sink, RoutineKind.FUNCTION, "CREATE FUNCTIONS")

        if sections.enabled(Section.DATA):
            result.rows = self._emit_data(sink, result.tables)

        result.elapsed = self.timer() - started
        sink.write(footer(result.elapsed))
        sink.flush()
        logger.info("Backup of %s finished in %.2fs", self.database, result.elapsed)
        return result

    def _emit_tables(self, sink: OutputSink, tables: list[str]) -> int:
        sink.write(banner("DROP TABLES"))
        for table in tables:
            sink.write(self.schema.emit_drop(table))
        sink.write("\n")

        deferred = DeferredForeignKeys()
        sink.write(banner("CREATE TABLES"))
        for table in tables:
            schema = self.schema.emit_table(table)
            sink.write(schema.create_sql)
            deferred.add(table, schema.foreign_keys)

        count = deferred.clause_count
        sink.write(banner("FOREIGN KEYS"))
        for table in tables:
            sink.write(self.schema.emit_foreign_keys(table, deferred.pop(table)))
        return count

    def _emit_routines(self, sink: OutputSink, kind: RoutineKind, label: str) -> list[str]:
        sink.write(banner(label))
        names = self.catalog.list_routines(kind)
        for name in names:
            sink.write(self.schema.emit_routine(kind, name))
        return names

    def _emit_data(self, sink: OutputSink, tables: list[str]) -> dict[str, int]:
        data = DataEmitter(self.introspector, sink, self.config.batch_size)

        sink.write(banner("TRUNCATE DATA"))
        sink.write(FOREIGN_KEY_CHECKS_OFF)
        for table in tables:
            sink.write(data.emit_truncate(table))
        sink.write("\n" + FOREIGN_KEY_CHECKS_ON)

        rows = {}
        sink.write(banner("DUMP DATA"))
        sink.write(FOREIGN_KEY_CHECKS_OFF)
        for table in tables:
            rows[table] = data.emit_table_data(table)
        sink.write(FOREIGN_KEY_CHECKS_ON)
        return rows
