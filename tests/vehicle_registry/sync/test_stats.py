"""
Tests for registry statistics.
"""
import pytest
from datetime import datetime, timedelta

from src.vehicle_registry.models.sync_results import StatusBucket
from src.vehicle_registry.sync.stats import StatisticsAggregator, classify_status

NOW = datetime(2024, 6, 1, 12, 0, 0)


class TestClassifyStatus:

    @pytest.mark.parametrize("status,bucket", [
        ("Valid", StatusBucket.VALID),
        ("VALID", StatusBucket.VALID),
        ("valid until 2025", StatusBucket.VALID),
        ("Not valid", StatusBucket.EXPIRED),
        ("Invalid", StatusBucket.EXPIRED),
        ("Expired", StatusBucket.EXPIRED),
        ("MOT expired", StatusBucket.EXPIRED),
        ("No details held by DVLA", StatusBucket.UNKNOWN),
        ("", StatusBucket.UNKNOWN),
        (None, StatusBucket.UNKNOWN),
    ])
    def test_buckets(self, status, bucket):
        assert classify_status(status) == bucket


class TestStatisticsAggregator:

    def test_ten_vehicle_example(self, test_db, add_vehicle, add_record):
        statuses = ["Valid", "valid", "VALID", "Expired", "Invalid", "No details held by DVLA", "Unknown"]
        for i, status in enumerate(statuses):
            plate = f"AB{i}1CDE"
            add_vehicle(f"checked-{i}", plate)
            add_record(plate, NOW - timedelta(days=1), mot_status=status)
        for i in range(3):
            add_vehicle(f"never-{i}", f"ZZ{i}9ZZZ")

        stats = StatisticsAggregator(7).stats(test_db, tenant_id="dealer-1", now=NOW)

        assert stats.total == 10
        assert stats.with_data == 7
        assert stats.needing_refresh == 3
        assert stats.valid_status == 3
        assert stats.expired_status == 2
        assert stats.unknown_status == 5

    def test_stale_record_counts_as_data_and_needing_refresh(self, test_db, add_vehicle, add_record):
        add_vehicle("V1", "AA11AAA")
        add_record("AA11AAA", NOW - timedelta(days=30), mot_status="Valid")

        stats = StatisticsAggregator(7).stats(test_db, now=NOW)

        assert stats.with_data == 1
        assert stats.needing_refresh == 1
        assert stats.valid_status == 1

    def test_record_without_last_checked_is_not_data(self, test_db, add_vehicle, add_record):
        add_vehicle("V1", "AA11AAA")
        add_record("AA11AAA", None, mot_status="Valid")

        stats = StatisticsAggregator(7).stats(test_db, now=NOW)

        assert stats.with_data == 0
        assert stats.needing_refresh == 1

    def test_tenant_and_eligibility_filters(self, test_db, add_vehicle):
        add_vehicle("mine", "AA11AAA", tenant_id="dealer-1")
        add_vehicle("archived", "BB22BBB", tenant_id="dealer-1", is_active=False)
        add_vehicle("no-plate", None, tenant_id="dealer-1")
        add_vehicle("theirs", "CC33CCC", tenant_id="dealer-2")

        assert StatisticsAggregator(7).stats(test_db, tenant_id="dealer-1", now=NOW).total == 1
        assert StatisticsAggregator(7).stats(test_db, now=NOW).total == 2

    def test_empty(self, test_db):
        stats = StatisticsAggregator(7).stats(test_db, now=NOW)

        assert stats.total == 0
        assert stats.unknown_status == 0
