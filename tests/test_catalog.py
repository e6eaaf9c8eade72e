"""Unit tests for object discovery and filtering."""

import pytest
from sqlbackup.catalog import ObjectCatalog
from sqlbackup.errors import IntrospectionFailure
from sqlbackup.models.dump import ObjectFilter, ObjectKind, RoutineKind

from conftest import FakeIntrospector


class FailingIntrospector(FakeIntrospector):
    def list_objects(self, kind):
        raise IntrospectionFailure("SHOW FULL TABLES failed")


class TestObjectCatalog:
    """Tests for ObjectCatalog.discover()."""

    @pytest.fixture
    def catalog(self):
        db = FakeIntrospector(
            tables={"wp_posts": "", "wp_users": "", "log": "", "audit": ""},
            views={"wp_recent": "", "report": ""},
        )
        return ObjectCatalog(db)

    def test_prefix_and_exact_patterns(self, catalog):
        names = catalog.discover(ObjectKind.TABLE, ObjectFilter.parse(["wp_*", "log"]))
        assert names == ["wp_posts", "wp_users", "log"]

    def test_catalog_order_not_filter_order(self, catalog):
        names = catalog.discover(ObjectKind.TABLE, ObjectFilter.parse("log,audit,wp_*"))
        assert names == ["wp_posts", "wp_users", "log", "audit"]

    def test_empty_filter_returns_everything(self, catalog):
        assert catalog.discover(ObjectKind.TABLE, ObjectFilter()) == ["wp_posts", "wp_users", "log", "audit"]
        assert catalog.discover(ObjectKind.TABLE) == ["wp_posts", "wp_users", "log", "audit"]

    def test_exact_pattern_does_not_match_prefix(self, catalog):
        assert catalog.discover(ObjectKind.TABLE, ObjectFilter.parse("wp_")) == []

    def test_prefix_is_case_sensitive(self, catalog):
        assert catalog.discover(ObjectKind.TABLE, ObjectFilter.parse("WP_*")) == []

    def test_same_filter_applies_to_views(self, catalog):
        assert catalog.discover(ObjectKind.VIEW, ObjectFilter.parse("wp_*,log")) == ["wp_recent"]

    def test_failure_propagates(self):
        catalog = ObjectCatalog(FailingIntrospector())
        with pytest.raises(IntrospectionFailure):
            catalog.discover(ObjectKind.TABLE)

    def test_routines_are_not_filtered(self, shop_db):
        catalog = ObjectCatalog(shop_db)
        assert catalog.list_routines(RoutineKind.PROCEDURE) == ["touch"]
        assert catalog.list_routines(RoutineKind.FUNCTION) == ["double_it"]
