"""
Tests for region-to-region route precompute

- Hub pairs never include a region paired with itself
- Routes are profitable only, sorted by profit per unit and capped
- Missing snapshots publish empty route sets; publish failures propagate
"""
import pytest
from unittest.mock import Mock

from domain.enums import CachePolicy
from domain.errors import PublishError, SourceUnavailableError
from services.route_precompute import (
    RegionRoutePrecomputer,
    compute_routes,
    create_route_precomputer,
    synthesize_hub_pairs,
)


def _quote(price, volume=100, location=60003760):
    return {"price": price, "volume_remain": volume, "location_id": location}


JITA = {
    "best_quotes": {
        "34": {"best_sell": _quote(5.0, 1000)},
        "35": {"best_sell": _quote(10.0, 50)},
        "36": {"best_sell": _quote(100.0, 10)},
    }
}
AMARR = {
    "best_quotes": {
        "34": {"best_buy": _quote(6.0, 400, 60008494)},
        "35": {"best_buy": _quote(30.0, 80, 60008494)},
        "36": {"best_buy": _quote(90.0, 10, 60008494)},
    }
}


class TestSynthesizeHubPairs:
    def test_no_self_pairs(self):
        pairs = synthesize_hub_pairs([10000002, 10000043, 10000032])

        assert len(pairs) == 6
        assert all(p.from_region != p.to_region for p in pairs)

    def test_duplicate_hubs_collapsed(self):
        keys = [p.key for p in synthesize_hub_pairs([10000002, 10000002, 10000043])]
        assert keys == ["10000002-10000043", "10000043-10000002"]

    @pytest.mark.parametrize("hubs", [[], [10000002], [10000002, 10000002]])
    def test_fewer_than_two_distinct_hubs(self, hubs):
        assert synthesize_hub_pairs(hubs) == []


class TestComputeRoutes:
    def test_profitable_routes_sorted_by_profit(self):
        routes = compute_routes(JITA, AMARR, 10000002, 10000043)

        assert [r.type_id for r in routes] == [35, 34]
        top = routes[0].to_dict()
        assert top["profit_per_unit"] == 20.0
        assert top["profit_margin"] == pytest.approx(200.0)
        assert top["max_volume"] == 50
        assert top["origin_id"] == 60003760
        assert top["destination_id"] == 60008494
        assert top["origin_region_id"] == 10000002
        assert top["destination_region_id"] == 10000043

    def test_cap_limits_routes(self):
        routes = compute_routes(JITA, AMARR, 10000002, 10000043, cap=1)
        assert len(routes) == 1
        assert routes[0].type_id == 35

    @pytest.mark.parametrize("origin, destination", [
        (None, AMARR),
        (JITA, None),
        ({}, AMARR),
        ({"best_quotes": []}, AMARR),
    ])
    def test_missing_snapshot_yields_no_routes(self, origin, destination):
        assert compute_routes(origin, destination, 1, 2) == []

    def test_types_without_matching_quote_skipped(self):
        origin = {"best_quotes": {"34": {"best_sell": _quote(5.0)}, "99": {"best_sell": _quote(1.0)}}}
        destination = {"best_quotes": {"34": {"best_sell": _quote(9.0)}}}
        assert compute_routes(origin, destination, 1, 2) == []


class TestRegionRoutePrecomputer:
    def _archive(self, snapshots):
        archive = Mock()
        archive.fetch_snapshot.side_effect = lambda rid: snapshots.get(rid)
        return archive

    def test_publishes_every_hub_pair(self, publisher):
        archive = self._archive({10000002: JITA, 10000043: AMARR})
        precomputer = RegionRoutePrecomputer(archive, publisher, route_cap=100)

        summary = precomputer.run([10000002, 10000043])

        assert summary.published == ["10000002-10000043", "10000043-10000002"]
        assert archive.fetch_snapshot.call_count == 2
        path, body, cache_control = publisher.publish.call_args_list[0].args
        assert path == "region_region/10000002-10000043.json"
        assert cache_control == CachePolicy.HAULING_PAIR
        assert body["from_region_id"] == 10000002
        assert body["to_region_id"] == 10000043
        assert body["count"] == 2
        assert len(body["routes"]) == 2
        assert "last_updated" in body

    def test_missing_snapshot_publishes_empty_routes(self, publisher):
        archive = Mock()
        archive.fetch_snapshot.side_effect = [JITA, SourceUnavailableError("status 500")]
        precomputer = RegionRoutePrecomputer(archive, publisher)

        summary = precomputer.run([10000002, 10000043])

        assert summary.attempted == 2
        for call in publisher.publish.call_args_list:
            assert call.args[1]["count"] == 0
            assert call.args[1]["routes"] == []

    def test_publish_failure_propagates(self, publisher):
        publisher.publish.side_effect = PublishError("region_region/1-2.json", ConnectionError("denied"))
        precomputer = RegionRoutePrecomputer(self._archive({}), publisher)

        with pytest.raises(PublishError):
            precomputer.run([10000002, 10000043])

    def test_factory_uses_configured_cap(self, pipeline_config, publisher):
        precomputer = create_route_precomputer(pipeline_config, publisher)
        assert precomputer._route_cap == pipeline_config.route_cap


class TestMalformedSnapshots:
    @pytest.mark.parametrize("bad_quote", [[10.0], "oops", 42, None])
    def test_non_object_quote_skipped(self, bad_quote):
        origin = {"best_quotes": {
            "34": {"best_sell": bad_quote},
            "35": {"best_sell": _quote(10.0, 50)},
        }}

        routes = compute_routes(origin, AMARR, 10000002, 10000043)

        assert [r.type_id for r in routes] == [35]

    def test_non_object_buy_quote_skipped(self):
        destination = {"best_quotes": {"34": {"best_buy": ["6.0"]}, "35": {"best_buy": _quote(30.0, 80)}}}

        routes = compute_routes(JITA, destination, 10000002, 10000043)

        assert [r.type_id for r in routes] == [35]

    @pytest.mark.parametrize("volume", ["inf", "1e400", float("inf"), "-inf"])
    def test_infinite_volume_does_not_crash(self, volume):
        origin = {"best_quotes": {"35": {"best_sell": _quote(10.0, volume)}}}

        routes = compute_routes(origin, AMARR, 10000002, 10000043)

        assert len(routes) == 1
        assert routes[0].max_volume == 0

    def test_infinite_price_not_treated_as_profit(self):
        destination = {"best_quotes": {"35": {"best_buy": _quote("inf", 80)}}}
        assert compute_routes(JITA, destination, 10000002, 10000043) == []

    def test_malformed_snapshot_still_publishes_every_pair(self, publisher):
        broken = {"best_quotes": {"34": {"best_sell": "oops", "best_buy": [1]}}}
        archive = Mock()
        archive.fetch_snapshot.side_effect = lambda rid: broken if rid == 10000002 else AMARR
        precomputer = RegionRoutePrecomputer(archive, publisher)

        summary = precomputer.run([10000002, 10000043])

        assert summary.published == ["10000002-10000043", "10000043-10000002"]
        assert publisher.publish.call_count == 2
