"""Fixed pieces of dump text: banners, header, footer and identifiers."""

import math
from datetime import datetime

BANNER_WIDTH = 50
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def quote_identifier(name: str) -> str:
    """Wrap a name in backticks, doubling any backtick inside it."""
    return "`" + name.replace("`", "``") + "`"


def banner(label: str) -> str:
    """Comment line ``-- <label> ----`` padded to the banner width."""
    comment = f"-- {label} "
    return comment + "-" * (BANNER_WIDTH - len(comment)) + "\n\n"


def header(database: str, started_at: datetime) -> str:
    return f"/* BACKUP — {database} — {started_at.strftime(TIMESTAMP_FORMAT)} */\n\n"


def seconds_to_time(seconds: float) -> str:
    """Format a duration as HH:MM:SS.ffff (fraction truncated, not rounded)."""
    seconds = max(seconds, 0.0)
    whole = math.floor(seconds)
    fraction = int((seconds - whole) * 10000)
    hours, rest = divmod(whole, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{fraction:04d}"


def footer(elapsed: float) -> str:
    return banner(f"ELAPSED {seconds_to_time(elapsed)}")
