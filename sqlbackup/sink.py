"""Buffered destination for the generated dump text."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

from .errors import SinkFailure

logger = logging.getLogger(__name__)

FILENAME_TIME_FORMAT = "%Y-%m-%d_%H-%M-%S"


class OutputSink:
    """Accumulates text in memory and writes it to a stream on flush.

    All emitters write through this one interface; whether the stream is a
    file or standard output makes no difference to them.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        owns_stream: bool = False,
        path: Optional[Path] = None,
        opener: Optional[Callable[[], TextIO]] = None,
    ):
        """Initialize the sink.

        Args:
            stream: Writable text stream
            owns_stream: Close the stream when the sink is closed
            path: File behind the stream, if any
            opener: Opens the stream on the first flush when ``stream`` is None
        """
        if stream is None and opener is None:
            raise ValueError("OutputSink needs a stream or an opener")
        self.stream = stream
        self.owns_stream = owns_stream
        self.path = path
        self._opener = opener
        self._buffer: list[str] = []
        self.chars_written = 0

    @property
    def is_open(self) -> bool:
        return self.stream is not None

    def write(self, text: str):
        if text:
            self._buffer.append(text)

    @property
    def pending(self) -> int:
        """Number of characters waiting in the buffer."""
        return sum(len(t) for t in self._buffer)

    def flush(self):
        """Write buffered text to the stream and clear the buffer."""
        if not self._buffer:
            return
        if self.stream is None:
            self.stream = self._opener()
        data = "".join(self._buffer)
        self._buffer = []
        try:
            self.stream.write(data)
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise SinkFailure(f"Cannot write to {self.path or 'output stream'}: {e}") from e
        self.chars_written += len(data)

    def close(self):
        try:
            self.flush()
        finally:
            if self.owns_stream and self.stream is not None:
                try:
                    self.stream.close()
                except OSError as e:
                    raise SinkFailure(f"Cannot close {self.path or 'output stream'}: {e}") from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        elif self.owns_stream:
            # Keep what was flushed; drop the unfinished buffer
            self._buffer = []
            if self.stream is not None:
                self.stream.close()


def backup_path(folder: Union[str, Path], database: str, when: Optional[datetime] = None) -> Path:
    """Path of a backup file: ``<folder>/<database>_<YYYY-mm-dd_HH-MM-SS>.sql``."""
    when = when or datetime.now()
    return Path(folder) / f"{database}_{when.strftime(FILENAME_TIME_FORMAT)}.sql"


def open_file_sink(path: Union[str, Path]) -> OutputSink:
    """Wrap a backup file in a sink.

    The file (and its folder) is created on the first flush, so a run that
    fails before producing any text leaves nothing behind.
    """
    path = Path(path)

    def opener() -> TextIO:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            stream = open(path, "w", encoding="utf-8", newline="\n")
        except OSError as e:
            raise SinkFailure(f"Failed to open {path}: {e}") from e
        logger.debug("Writing backup to %s", path)
        return stream

    return OutputSink(owns_stream=True, path=path, opener=opener)
