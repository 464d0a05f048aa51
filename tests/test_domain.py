"""
Tests for domain converters and models
"""
import math

import pytest

from domain.converters import coerce_region_id, parse_region_ids, safe_float
from domain.enums import ArtifactKind, CachePolicy
from domain.models import AuditReport, HaulingRoute, HealthRecord, HotPair, RegionMarketIndex, RunSummary


class TestConverters:
    @pytest.mark.parametrize("value, expected", [
        ("10000002", 10000002),
        (" 10000043 ", 10000043),
        (10000032.0, 10000032),
        (10000030, 10000030),
        ("abc", None),
        ("", None),
        (None, None),
        (0, None),
        (-5, None),
        (1.5, None),
        (math.nan, None),
        (True, None),
    ])
    def test_coerce_region_id(self, value, expected):
        assert coerce_region_id(value) == expected

    def test_parse_region_ids_keeps_order_and_duplicates(self):
        assert parse_region_ids("10000043, x, 10000002,,10000043") == [10000043, 10000002, 10000043]

    def test_parse_region_ids_from_iterable(self):
        assert parse_region_ids([10000002, "10000043", None]) == [10000002, 10000043]

    def test_parse_region_ids_none(self):
        assert parse_region_ids(None) == []

    @pytest.mark.parametrize("value, expected", [("4.5", 4.5), (None, 0.0), ("n/a", 0.0), (math.nan, 0.0), (3, 3.0)])
    def test_safe_float(self, value, expected):
        assert safe_float(value) == expected


class TestHotPair:
    def test_key(self):
        assert HotPair(10000002, 10000043).key == "10000002-10000043"

    def test_same_region_rejected(self):
        with pytest.raises(ValueError):
            HotPair(10000002, 10000002)

    def test_artifact_paths(self):
        key = HotPair(10000002, 10000043).key
        assert ArtifactKind.HAULING.path_for(key) == "hauling/10000002-10000043.json"
        assert ArtifactKind.REGION_REGION.path_for(key) == "region_region/10000002-10000043.json"


class TestRegionMarketIndex:
    def test_sorted_and_unique(self):
        index = RegionMarketIndex.from_ids([10000043, 10000002, 10000043], "sql_primary")
        assert index.to_list() == [10000002, 10000043]
        assert len(index) == 2


class TestHealthRecord:
    def test_found_record(self):
        record = HealthRecord.found(10000002, {"last_updated": "t", "best_quotes": {"34": {}}})
        assert record.to_dict() == {"region_id": 10000002, "exists": True, "last_updated": "t", "count_types": 1}

    def test_found_record_without_timestamp_omits_key(self):
        record = HealthRecord.found(10000002, {"best_quotes": {}})
        assert record.to_dict() == {"region_id": 10000002, "exists": True, "count_types": 0}

    def test_not_found_has_no_error_key(self):
        assert HealthRecord.not_found(99999999).to_dict() == {"region_id": 99999999, "exists": False}

    def test_failed_carries_error(self):
        assert HealthRecord.failed(1, "status 500").to_dict() == {
            "region_id": 1, "exists": False, "error": "status 500"
        }

    def test_report_from_records(self):
        report = AuditReport.from_records([HealthRecord.not_found(2), HealthRecord.failed(3, "x")])
        assert report.checked == 2
        assert report.missing == [2, 3]
        assert report.cache_control == CachePolicy.NO_STORE.value == "no-store"


class TestHaulingRoute:
    def test_unprofitable_returns_none(self):
        assert HaulingRoute.from_quotes(34, {"price": 10}, {"price": 10}, 1, 2) is None

    def test_zero_sell_price_margin(self):
        route = HaulingRoute.from_quotes(34, {"price": 0}, {"price": 2, "volume_remain": 5}, 1, 2)
        assert route.profit_margin == 0.0
        assert route.max_volume == 0


def test_run_summary_str():
    summary = RunSummary(attempted=3, published=["a", "b"], failed=["c"])
    assert str(summary) == "attempted=3 published=2 failed=1"
