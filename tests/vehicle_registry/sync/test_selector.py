"""
Tests for the staleness selector.
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from src.vehicle_registry.exceptions import SelectionError
from src.vehicle_registry.sync.selector import StalenessSelector, is_stale

NOW = datetime(2024, 6, 1, 12, 0, 0)


def selected_ids(selector, session, **kwargs):
    return [v.id for v in selector.select(session, now=NOW, **kwargs)]


class TestIsStale:

    def test_missing_record_is_stale(self):
        assert is_stale(None, NOW, timedelta(days=7))

    def test_record_without_last_checked_is_stale(self):
        record = MagicMock(last_checked=None)
        assert is_stale(record, NOW, timedelta(days=7))

    def test_exact_threshold_is_fresh(self):
        record = MagicMock(last_checked=NOW - timedelta(days=7))
        assert not is_stale(record, NOW, timedelta(days=7))

    def test_just_past_threshold_is_stale(self):
        record = MagicMock(last_checked=NOW - timedelta(days=7, seconds=1))
        assert is_stale(record, NOW, timedelta(days=7))


class TestStalenessSelector:

    def test_example_selects_old_and_unchecked(self, test_db, add_vehicle, add_record):
        add_vehicle("A", "AA11AAA")
        add_vehicle("B", "BB22BBB")
        add_vehicle("C", "CC33CCC")
        add_record("AA11AAA", NOW - timedelta(days=10))
        add_record("BB22BBB", NOW - timedelta(days=2))

        assert selected_ids(StalenessSelector(7), test_db) == ["A", "C"]

    @pytest.mark.parametrize("threshold", [0, 1, 7, 30])
    def test_vehicle_without_record_always_selected(self, test_db, add_vehicle, threshold):
        add_vehicle("A", "AA11AAA")

        assert selected_ids(StalenessSelector(threshold), test_db) == ["A"]

    @pytest.mark.parametrize("threshold", [1, 7, 30])
    def test_boundary_exactness(self, test_db, add_vehicle, add_record, threshold):
        add_vehicle("old", "OLD1")
        add_vehicle("recent", "NEW1")
        add_record("OLD1", NOW - timedelta(days=threshold + 1))
        add_record("NEW1", NOW - timedelta(days=threshold - 1))

        assert selected_ids(StalenessSelector(threshold), test_db) == ["old"]

    def test_force_all_ignores_staleness(self, test_db, add_vehicle, add_record):
        add_vehicle("A", "AA11AAA")
        add_vehicle("B", "BB22BBB")
        add_record("AA11AAA", NOW)
        add_record("BB22BBB", NOW - timedelta(days=1))

        assert selected_ids(StalenessSelector(7), test_db) == []
        assert selected_ids(StalenessSelector(7), test_db, force_all=True) == ["A", "B"]

    def test_inactive_and_blank_plates_excluded(self, test_db, add_vehicle):
        add_vehicle("active", "AA11AAA")
        add_vehicle("archived", "BB22BBB", is_active=False)
        add_vehicle("no-plate", None)
        add_vehicle("empty-plate", "")
        add_vehicle("space-plate", "   ")

        assert selected_ids(StalenessSelector(7), test_db, force_all=True) == ["active"]

    def test_tenant_filter(self, test_db, add_vehicle):
        add_vehicle("mine", "AA11AAA", tenant_id="dealer-1")
        add_vehicle("theirs", "BB22BBB", tenant_id="dealer-2")

        assert selected_ids(StalenessSelector(7), test_db, tenant_id="dealer-2") == ["theirs"]
        assert sorted(selected_ids(StalenessSelector(7), test_db)) == ["mine", "theirs"]

    def test_oldest_stock_first(self, test_db, add_vehicle):
        add_vehicle("newer", "AA11AAA", created_at=NOW - timedelta(days=1))
        add_vehicle("oldest", "BB22BBB", created_at=NOW - timedelta(days=30))
        add_vehicle("middle", "CC33CCC", created_at=NOW - timedelta(days=10))

        assert selected_ids(StalenessSelector(7), test_db) == ["oldest", "middle", "newer"]

    def test_record_matched_by_normalized_plate(self, test_db, add_vehicle, add_record):
        add_vehicle("A", "ab12 cde")
        add_record("AB12CDE", NOW - timedelta(days=1))

        assert selected_ids(StalenessSelector(7), test_db) == []

    def test_empty_when_nothing_eligible(self, test_db):
        assert selected_ids(StalenessSelector(7), test_db) == []

    def test_storage_failure_raises_selection_error(self):
        session = MagicMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

        with pytest.raises(SelectionError):
            StalenessSelector(7).select(session, now=NOW)
