"""Parsing and rewriting of the CREATE statements reported by the server.

``SHOW CREATE TABLE`` returns a statement of the form::

    CREATE TABLE `orders` (
      `id` int NOT NULL AUTO_INCREMENT,
      `user_id` int DEFAULT NULL,
      PRIMARY KEY (`id`),
      KEY `fk_user` (`user_id`),
      CONSTRAINT `fk_user` FOREIGN KEY (`user_id`) REFERENCES `users` (`id`)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4

Only the top-level definition list between the outer parentheses is parsed.
Each definition becomes a typed :class:`TableClause`; removing foreign keys is
then a filter over that list and re-joining it cannot leave a stray comma.
"""

import re
from enum import Enum
from typing import Iterator, Optional
from pydantic import BaseModel, Field

from .errors import IntrospectionFailure, SerializationAmbiguity

QUOTES = ("'", '"', "`")

_NAME = r"(?:`(?:[^`]|``)*`|\S+)"
_CONSTRAINT = rf"(?:CONSTRAINT(?:\s+{_NAME})?\s+)?"

_ACCOUNT_PART = r"(?:`(?:[^`]|``)*`|'(?:[^'\\]|\\.|'')*'|[^\s@`']+)"
_ACCOUNT = rf"{_ACCOUNT_PART}(?:@{_ACCOUNT_PART})?"

CLAUSE_PATTERNS = [
    ("foreign_key", re.compile(rf"^{_CONSTRAINT}FOREIGN\s+KEY\b", re.IGNORECASE)),
    ("primary_key", re.compile(rf"^{_CONSTRAINT}PRIMARY\s+KEY\b", re.IGNORECASE)),
    ("unique_key", re.compile(rf"^{_CONSTRAINT}UNIQUE\b", re.IGNORECASE)),
    ("check", re.compile(rf"^{_CONSTRAINT}CHECK\b", re.IGNORECASE)),
    ("key", re.compile(r"^(?:KEY|INDEX|FULLTEXT|SPATIAL)\b", re.IGNORECASE)),
]

CREATE_TABLE_HEAD = re.compile(r"^\s*CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?", re.IGNORECASE)

VIEW_PREFIX = re.compile(
    rf"^\s*CREATE\s+"
    rf"(?:OR\s+REPLACE\s+)?"
    rf"(?:ALGORITHM\s*=\s*\w+\s+)?"
    rf"(?:DEFINER\s*=\s*{_ACCOUNT}\s+)?"
    rf"(?:SQL\s+SECURITY\s+\w+\s+)?"
    rf"(?=VIEW\s)",
    re.IGNORECASE,
)

CLAUSE_INDENT = "  "


class ClauseKind(str, Enum):
    """Kind of entry in a CREATE TABLE definition list."""
    COLUMN = "column"
    PRIMARY_KEY = "primary_key"
    UNIQUE_KEY = "unique_key"
    KEY = "key"
    FOREIGN_KEY = "foreign_key"
    CHECK = "check"


class TableClause(BaseModel):
    """One column or constraint definition, without its separator."""
    text: str = Field(..., description="Definition text, trimmed")
    kind: ClauseKind = Field(..., description="What the definition declares")

    @property
    def is_foreign_key(self) -> bool:
        return self.kind == ClauseKind.FOREIGN_KEY

    def as_alter_fragment(self) -> str:
        """The clause as it is written inside ALTER TABLE."""
        return f"ADD {self.text}"


def classify(text: str) -> ClauseKind:
    for kind, pattern in CLAUSE_PATTERNS:
        if pattern.match(text):
            return ClauseKind(kind)
    return ClauseKind.COLUMN


def structural_chars(sql: str) -> Iterator[tuple[int, str]]:
    """Yield (position, char) for every character outside quotes.

    Strings may use backslash escapes or doubled quotes; backtick identifiers
    only use doubled backticks.
    """
    quote = None
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if quote:
            if ch == "\\" and quote != "`":
                i += 2
                continue
            if ch == quote:
                if i + 1 < n and sql[i + 1] == quote:
                    i += 2
                    continue
                quote = None
            i += 1
            continue
        if ch in QUOTES:
            quote = ch
        else:
            yield i, ch
        i += 1


class CreateTableStatement(BaseModel):
    """A CREATE TABLE statement split into head, definitions and tail."""
    name: str = Field("", description="Table the statement belongs to")
    head: str = Field(..., description="Text up to and including the opening parenthesis")
    clauses: list[TableClause] = Field(default_factory=list, description="Definitions in order")
    tail: str = Field(..., description="Text from the closing parenthesis on")

    @classmethod
    def parse(cls, sql: str, name: str = "") -> "CreateTableStatement":
        """Parse the text returned by ``SHOW CREATE TABLE``.

        Raises:
            IntrospectionFailure: if the text is not a CREATE TABLE statement
                with a balanced definition list
        """
        label = name or "<unknown>"
        if not CREATE_TABLE_HEAD.match(sql):
            raise IntrospectionFailure(f"Not a CREATE TABLE statement for table {label}")

        depth = 0
        opening: Optional[int] = None
        closing: Optional[int] = None
        separators: list[int] = []
        for pos, ch in structural_chars(sql):
            if ch == "(":
                if depth == 0 and opening is None:
                    opening = pos
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0 and opening is not None:
                    closing = pos
                    break
            elif ch == "," and depth == 1:
                separators.append(pos)

        if opening is None or closing is None:
            raise IntrospectionFailure(f"Unbalanced definition list in CREATE TABLE for {label}")

        bounds = [opening] + separators + [closing]
        clauses = []
        for start, end in zip(bounds, bounds[1:]):
            text = sql[start + 1:end].strip()
            if not text:
                raise IntrospectionFailure(f"Empty definition in CREATE TABLE for {label}")
            clauses.append(TableClause(text=text, kind=classify(text)))

        return cls(name=name, head=sql[:opening + 1], clauses=clauses, tail=sql[closing:])

    @property
    def foreign_keys(self) -> list[TableClause]:
        return [c for c in self.clauses if c.is_foreign_key]

    def guarded(self) -> "CreateTableStatement":
        """Copy whose head reads ``CREATE TABLE IF NOT EXISTS``."""
        head = CREATE_TABLE_HEAD.sub("CREATE TABLE IF NOT EXISTS ", self.head, count=1)
        return self.model_copy(update={"head": head})

    def without_foreign_keys(self) -> "CreateTableStatement":
        """Copy with every FOREIGN KEY definition removed.

        Raises:
            SerializationAmbiguity: if no definition would be left
        """
        kept = [c for c in self.clauses if not c.is_foreign_key]
        if not kept:
            raise SerializationAmbiguity(
                f"Removing foreign keys from table {self.name or '<unknown>'} leaves no definitions"
            )
        return self.model_copy(update={"clauses": kept})

    def render(self) -> str:
        body = ",\n".join(CLAUSE_INDENT + c.text for c in self.clauses)
        return f"{self.head.rstrip()}\n{body}\n{self.tail}"


def rewrite_view(sql: str, name: str = "") -> str:
    """Turn ``SHOW CREATE VIEW`` text into ``CREATE OR REPLACE VIEW ...``.

    The ALGORITHM, DEFINER and SQL SECURITY options are dropped so the view
    can be created by any user on any server.
    """
    match = VIEW_PREFIX.match(sql)
    if not match:
        raise IntrospectionFailure(f"Not a CREATE VIEW statement for view {name or '<unknown>'}")
    return "CREATE OR REPLACE " + sql[match.end():]
