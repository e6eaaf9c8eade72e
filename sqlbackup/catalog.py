"""Object discovery and name filtering."""

import logging
from typing import Optional

from .introspector import Introspector
from .models.dump import ObjectFilter, ObjectKind, RoutineKind

logger = logging.getLogger(__name__)


class ObjectCatalog:
    """Resolves which tables, views and routines a dump covers."""

    def __init__(self, introspector: Introspector):
        self.introspector = introspector

    def discover(self, kind: ObjectKind, object_filter: Optional[ObjectFilter] = None) -> list[str]:
        """List object names of a kind that pass the filter.

        Args:
            kind: TABLE or VIEW
            object_filter: Name patterns; empty or None keeps everything

        Returns:
            Matching names in the order the server reported them
        """
        names = self.introspector.list_objects(kind)
        if object_filter is None or object_filter.is_empty:
            selected = list(names)
        else:
            selected = [name for name in names if object_filter.matches(name)]
        logger.info("Discovered %d %ss, %d selected", len(names), kind.value.lower(), len(selected))
        return selected

    def list_routines(self, kind: RoutineKind) -> list[str]:
        """Stored procedures or functions of the database (never filtered)."""
        names = self.introspector.list_routines(kind)
        logger.info("Discovered %d %ss", len(names), kind.value.lower())
        return names
