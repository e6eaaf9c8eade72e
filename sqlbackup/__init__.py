"""SQL Backup - logical MySQL dumps built from the server's introspection commands."""

from .config import AppConfig, DatabaseConfig, DumpConfig
from .dumper import DatabaseDumper
from .errors import (
    DumpError,
    ConnectionFailure,
    IntrospectionFailure,
    SinkFailure,
    SerializationAmbiguity,
)
from .introspector import Introspector, MySQLIntrospector
from .sink import OutputSink, backup_path, open_file_sink

__version__ = "1.0.0"

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "DumpConfig",
    "DatabaseDumper",
    "DumpError",
    "ConnectionFailure",
    "IntrospectionFailure",
    "SinkFailure",
    "SerializationAmbiguity",
    "Introspector",
    "MySQLIntrospector",
    "OutputSink",
    "backup_path",
    "open_file_sink",
]
