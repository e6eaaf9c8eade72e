"""Error types raised while producing a dump.

Every error is fatal for the run: nothing is retried and output that was
already flushed to the sink is left as it is.
"""


class DumpError(Exception):
    """Base class for all dump failures."""


class ConnectionFailure(DumpError):
    """The database connection could not be established or authenticated."""


class IntrospectionFailure(DumpError):
    """An introspection query failed or returned something unusable."""


class SinkFailure(DumpError):
    """The output destination could not be opened or written."""


class SerializationAmbiguity(DumpError):
    """A CREATE statement could not be rewritten into a valid statement."""
