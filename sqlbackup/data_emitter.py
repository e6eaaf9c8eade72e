"""Row dumping as batched multi-row INSERT statements."""

import logging
from typing import Iterable

from .escaper import serialize_row
from .introspector import Introspector
from .sink import OutputSink
from .sql_text import quote_identifier

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


class DataEmitter:
    """Streams table rows into the sink, one INSERT per batch.

    At most one batch of serialized rows is held in memory: the sink is
    flushed whenever a statement is closed.
    """

    def __init__(self, introspector: Introspector, sink: OutputSink, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.introspector = introspector
        self.sink = sink
        self.batch_size = batch_size

    def emit_truncate(self, name: str) -> str:
        return f"TRUNCATE {quote_identifier(name)};\n"

    def insert_header(self, name: str, columns: Iterable[str]) -> str:
        fields = ",".join(quote_identifier(c) for c in columns)
        return f"INSERT INTO {quote_identifier(name)}({fields}) VALUES\n"

    def emit_table_data(self, name: str) -> int:
        """Write all rows of a table.

        Args:
            name: Table name

        Returns:
            Number of rows written
        """
        self.sink.flush()
        count = 0
        in_batch = 0
        for row in self.introspector.stream_rows(name):
            if in_batch == 0:
                self.sink.write(self.insert_header(name, row.keys()))
            else:
                self.sink.write(",\n")
            self.sink.write(" " + serialize_row(row.values()))
            in_batch += 1
            count += 1
            if in_batch >= self.batch_size:
                self._close_statement()
                in_batch = 0
        if in_batch:
            self._close_statement()
        logger.info("Dumped %d rows from %s", count, name)
        return count

    def _close_statement(self):
        self.sink.write(";\n\n")
        self.sink.flush()
