"""Field value serialization for INSERT statements."""

from datetime import timedelta
from typing import Any

NULL = "NULL"

# MySQL string literal escapes, reversed by the server when the dump is replayed
ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\x1a": "\\Z",
}
_TRANSLATION = str.maketrans(ESCAPES)


def escape_string(text: str) -> str:
    """Backslash-escape text for use inside a single-quoted literal."""
    return text.translate(_TRANSLATION)


def format_timedelta(value: timedelta) -> str:
    """Format a TIME value the way MySQL prints it: [-]HH:MM:SS[.ffffff]."""
    sign = "-" if value < timedelta(0) else ""
    value = abs(value)
    total_seconds = value.days * 86400 + value.seconds
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if value.microseconds:
        text += f".{value.microseconds:06d}"
    return text


def serialize(value: Any) -> str:
    """Turn one field value into its SQL literal.

    Args:
        value: Value as returned by the driver

    Returns:
        ``NULL`` for None, a hex literal for binary data, otherwise the
        escaped text wrapped in single quotes
    """
    if value is None:
        return NULL
    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        return f"X'{data.hex()}'" if data else "''"
    if isinstance(value, bool):
        return "'1'" if value else "'0'"
    if isinstance(value, timedelta):
        return f"'{format_timedelta(value)}'"
    return f"'{escape_string(str(value))}'"


def serialize_row(values) -> str:
    """Serialize an ordered sequence of field values as one value tuple."""
    return "(" + ",".join(serialize(v) for v in values) + ")"
