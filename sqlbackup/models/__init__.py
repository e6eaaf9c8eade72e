"""Data models for SQL Backup."""

from .dump import (
    Section,
    SectionSelection,
    ObjectFilter,
    ObjectKind,
    RoutineKind,
    TableSchema,
    DeferredForeignKeys,
    DumpResult,
)

__all__ = [
    "Section",
    "SectionSelection",
    "ObjectFilter",
    "ObjectKind",
    "RoutineKind",
    "TableSchema",
    "DeferredForeignKeys",
    "DumpResult",
]
