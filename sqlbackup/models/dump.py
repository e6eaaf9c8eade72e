"""Data models describing what a dump run selects and produces."""

from typing import Iterable, Optional, Union
from pydantic import BaseModel, Field
from enum import Enum


class Section(str, Enum):
    """A category of dump content that can be switched on or off."""
    DB = "DB"               # CREATE DATABASE + USE
    TABLES = "TABLES"       # DROP / CREATE TABLE + foreign keys
    VIEWS = "VIEWS"         # CREATE OR REPLACE VIEW
    ROUTINES = "ROUTINES"   # Stored procedures and functions
    DATA = "DATA"           # TRUNCATE + INSERT

    @classmethod
    def parse(cls, name: Union[str, "Section"]) -> "Section":
        """Resolve a section name, accepting the historical aliases."""
        if isinstance(name, Section):
            return name
        key = name.strip().upper()
        key = SECTION_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown section '{name}' (expected one of: {valid})") from None


SECTION_ALIASES = {
    "SCHEMA_OF_DB": "DB",
    "PROCEDURES": "ROUTINES",
    "FUNCTIONS": "ROUTINES",
}


def split_list(value: Union[str, Iterable, None]) -> list:
    """Split a comma-separated string (or list) into trimmed, non-empty items."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    result = []
    for item in items:
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        result.append(item)
    return result


class SectionSelection(BaseModel):
    """The set of enabled sections.

    An empty selection means every section is enabled, never "nothing".
    """
    sections: frozenset[Section] = Field(default_factory=frozenset, description="Explicitly enabled sections")

    @classmethod
    def parse(cls, value: Union[str, Iterable[Union[str, Section]], None]) -> "SectionSelection":
        """Build a selection from a comma-separated string or a list of names."""
        if isinstance(value, SectionSelection):
            return value
        return cls(sections=frozenset(Section.parse(n) for n in split_list(value)))

    @property
    def is_default(self) -> bool:
        """True when no section was chosen, i.e. all of them are on."""
        return not self.sections

    def enabled(self, section: Section) -> bool:
        """Whether the given section should be emitted."""
        if self.is_default:
            return True
        return section in self.sections


class ObjectFilter(BaseModel):
    """Ordered list of name patterns: exact names or prefixes ending in ``*``.

    An empty filter matches every name.
    """
    patterns: list[str] = Field(default_factory=list, description="Exact names or prefix wildcards")

    @classmethod
    def parse(cls, value: Union[str, Iterable[str], None]) -> "ObjectFilter":
        if isinstance(value, ObjectFilter):
            return value
        return cls(patterns=split_list(value))

    @property
    def is_empty(self) -> bool:
        return not self.patterns

    def matches(self, name: str) -> bool:
        """Check a name against every pattern.

        A pattern ending in ``*`` matches by case-sensitive prefix (without the
        trailing stars); any other pattern only matches the identical name.
        """
        if self.is_empty:
            return True
        for pattern in self.patterns:
            if pattern.endswith("*"):
                if name.startswith(pattern.rstrip("*")):
                    return True
            elif name == pattern:
                return True
        return False


class ObjectKind(str, Enum):
    """Catalog type tag of a schema object."""
    TABLE = "TABLE"
    VIEW = "VIEW"


class RoutineKind(str, Enum):
    """Kind of stored program."""
    PROCEDURE = "PROCEDURE"
    FUNCTION = "FUNCTION"


class TableSchema(BaseModel):
    """Schema text for one table plus the foreign keys pulled out of it."""
    name: str = Field(..., description="Table name")
    create_sql: str = Field(..., description="Guarded CREATE TABLE without foreign keys")
    foreign_keys: list[str] = Field(default_factory=list, description="'ADD ...' fragments in encounter order")


class DeferredForeignKeys:
    """Run-scoped map of table name to the foreign keys removed from its CREATE.

    Each table's clauses are handed out once by :meth:`pop`.
    """

    def __init__(self):
        self._clauses: dict[str, list[str]] = {}

    def add(self, table: str, clauses: Iterable[str]):
        """Queue clauses for a table, keeping encounter order."""
        clauses = list(clauses)
        if clauses:
            self._clauses.setdefault(table, []).extend(clauses)

    def get(self, table: str) -> list[str]:
        return list(self._clauses.get(table, []))

    def pop(self, table: str) -> list[str]:
        """Remove and return the clauses of a table (empty if none)."""
        return self._clauses.pop(table, [])

    @property
    def tables(self) -> list[str]:
        return list(self._clauses)

    @property
    def clause_count(self) -> int:
        return sum(len(c) for c in self._clauses.values())

    def __contains__(self, table: str) -> bool:
        return table in self._clauses

    def __len__(self) -> int:
        return len(self._clauses)


class DumpResult(BaseModel):
    """Summary of a finished dump run."""
    database: str = Field(..., description="Database name")
    path: Optional[str] = Field(None, description="Output file, if the dump went to a file")
    tables: list[str] = Field(default_factory=list, description="Tables selected for the dump")
    views: list[str] = Field(default_factory=list, description="Views selected for the dump")
    procedures: list[str] = Field(default_factory=list, description="Stored procedures emitted")
    functions: list[str] = Field(default_factory=list, description="Stored functions emitted")
    foreign_key_count: int = Field(0, description="Foreign key clauses re-attached")
    rows: dict[str, int] = Field(default_factory=dict, description="Rows dumped per table")
    elapsed: float = Field(0.0, description="Run duration in seconds")

    @property
    def row_count(self) -> int:
        """Get total row count across all tables."""
        return sum(self.rows.values())
