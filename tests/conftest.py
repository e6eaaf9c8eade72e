"""Shared fixtures: an in-memory database behind the Introspector interface."""

import io
from datetime import datetime

import pytest

from sqlbackup.introspector import Introspector
from sqlbackup.models.dump import ObjectKind, RoutineKind
from sqlbackup.sink import OutputSink


class FakeIntrospector(Introspector):
    """Answers introspection calls from plain dictionaries."""

    def __init__(self, database="testdb", tables=None, views=None, routines=None, rows=None):
        self.database = database
        self.tables = tables or {}        # name -> CREATE TABLE text
        self.views = views or {}          # name -> CREATE VIEW text
        self.routines = routines or {}    # (RoutineKind, name) -> CREATE text
        self.rows = rows or {}            # name -> list of dicts
        self.calls = []
        self.closed = False

    def list_objects(self, kind):
        self.calls.append(("list_objects", kind))
        source = self.tables if kind == ObjectKind.TABLE else self.views
        return list(source)

    def show_create(self, kind, name):
        self.calls.append(("show_create", kind, name))
        source = self.tables if kind == ObjectKind.TABLE else self.views
        return source[name]

    def list_routines(self, kind):
        self.calls.append(("list_routines", kind))
        return [name for (k, name) in self.routines if k == kind]

    def show_create_routine(self, kind, name):
        self.calls.append(("show_create_routine", kind, name))
        return self.routines[(kind, name)]

    def stream_rows(self, table):
        self.calls.append(("stream_rows", table))
        for row in self.rows.get(table, []):
            yield dict(row)

    def close(self):
        self.closed = True


USERS_SQL = (
    "CREATE TABLE `users` (\n"
    "  `id` int NOT NULL AUTO_INCREMENT,\n"
    "  `name` varchar(50) DEFAULT NULL,\n"
    "  PRIMARY KEY (`id`)\n"
    ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"
)

ORDERS_SQL = (
    "CREATE TABLE `orders` (\n"
    "  `id` int NOT NULL AUTO_INCREMENT,\n"
    "  `user_id` int DEFAULT NULL,\n"
    "  `product_id` int DEFAULT NULL,\n"
    "  PRIMARY KEY (`id`),\n"
    "  KEY `fk_user` (`user_id`),\n"
    "  CONSTRAINT `fk_user` FOREIGN KEY (`user_id`) REFERENCES `users` (`id`) ON DELETE CASCADE,\n"
    "  CONSTRAINT `fk_product` FOREIGN KEY (`product_id`) REFERENCES `products` (`id`)\n"
    ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"
)

ACTIVE_USERS_SQL = (
    "CREATE ALGORITHM=UNDEFINED DEFINER=`root`@`localhost` SQL SECURITY DEFINER "
    "VIEW `active_users` AS select `users`.`id` AS `id` from `users`"
)

TOUCH_SQL = "CREATE DEFINER=`root`@`localhost` PROCEDURE `touch`()\nBEGIN\n  SELECT 1;\nEND"
DOUBLE_SQL = "CREATE DEFINER=`root`@`localhost` FUNCTION `double_it`(x INT) RETURNS int\nRETURN x * 2"


@pytest.fixture
def shop_db():
    """A small database with a foreign key, a view and two routines."""
    return FakeIntrospector(
        database="shop",
        tables={"users": USERS_SQL, "orders": ORDERS_SQL},
        views={"active_users": ACTIVE_USERS_SQL},
        routines={
            (RoutineKind.PROCEDURE, "touch"): TOUCH_SQL,
            (RoutineKind.FUNCTION, "double_it"): DOUBLE_SQL,
        },
        rows={
            "users": [{"id": 1, "name": "Ann"}, {"id": 2, "name": "O'Brien"}],
            "orders": [{"id": 10, "user_id": 1, "product_id": None}],
        },
    )


@pytest.fixture
def sink():
    return OutputSink(io.StringIO())


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 5, 7, 12, 30, 45)


@pytest.fixture
def fixed_timer():
    """A timer reporting 1.5 seconds between consecutive calls."""
    ticks = iter([100.0, 101.5, 200.0, 201.5, 300.0, 301.5])
    return lambda: next(ticks)
