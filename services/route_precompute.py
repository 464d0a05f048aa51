"""
Region Route Precompute

Publishes hub-to-hub hauling routes without touching SQL: routes are
derived by comparing the best quotes of two archived region snapshots.

For every ordered pair of distinct hub regions the origin's best sell is
matched against the destination's best buy for each type; profitable
matches are sorted by profit per unit and capped. Each pair is published
to ``region_region/<from>-<to>.json`` with a 30 minute cache lifetime.

Failure policy:
- A hub snapshot that cannot be fetched is logged and treated as missing;
  every pair touching it is published with zero routes
- Publish failures raise PublishError and abort the run
"""

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from domain.enums import ArtifactKind, CachePolicy
from domain.models import HaulingRoute, HotPair, RegionID, RunSummary
from domain.pipeline_config import DEFAULT_ROUTE_CAP, PipelineConfig
from logging_config import setup_logging
from services.blob_publisher import BlobPublisher
from services.bounded_runner import BoundedRunner, sequential_runner
from services.upstream_clients import ArchiveClient

logger = setup_logging(__name__, log_file="route_precompute.log")


def synthesize_hub_pairs(hub_regions: Iterable[RegionID]) -> list[HotPair]:
    """
    Every ordered pair of distinct hubs, in hub order.

    Same-region pairs are skipped and duplicate hubs are collapsed, so no
    self-pair is ever produced.

    Example:
        >>> [p.key for p in synthesize_hub_pairs([1, 2, 2])]
        ['1-2', '2-1']
    """
    hubs = list(dict.fromkeys(hub_regions))
    return [
        HotPair(from_region, to_region)
        for from_region in hubs
        for to_region in hubs
        if from_region != to_region
    ]


def compute_routes(
    from_snapshot: Optional[dict],
    to_snapshot: Optional[dict],
    from_region: RegionID,
    to_region: RegionID,
    cap: int = DEFAULT_ROUTE_CAP,
) -> list[HaulingRoute]:
    """
    Profitable origin-sell / destination-buy matches between two snapshots.

    Args:
        from_snapshot: Origin region snapshot with a ``best_quotes`` mapping
        to_snapshot: Destination region snapshot
        from_region: Origin region id
        to_region: Destination region id
        cap: Maximum routes returned

    Returns:
        Routes sorted by profit per unit, highest first. Empty if either
        snapshot is missing or has no quotes.
    """
    origin = (from_snapshot or {}).get("best_quotes") or {}
    destination = (to_snapshot or {}).get("best_quotes") or {}
    if not isinstance(origin, dict) or not isinstance(destination, dict):
        return []

    routes = []
    for type_id, origin_quotes in origin.items():
        destination_quotes = destination.get(type_id)
        if not isinstance(origin_quotes, dict) or not isinstance(destination_quotes, dict):
            continue
        best_sell = origin_quotes.get("best_sell")
        best_buy = destination_quotes.get("best_buy")
        if not isinstance(best_sell, dict) or not isinstance(best_buy, dict):
            continue
        try:
            route = HaulingRoute.from_quotes(type_id, best_sell, best_buy, from_region, to_region)
        except (TypeError, ValueError, OverflowError) as e:
            logger.debug(f"Skipping type {type_id} for {from_region}-{to_region}: {e}")
            continue
        if route is not None:
            routes.append(route)

    routes.sort(key=lambda r: r.profit_per_unit, reverse=True)
    return routes[:cap]


class RegionRoutePrecomputer:
    """Fetch hub snapshots once, then compute and publish every hub pair."""

    def __init__(
        self,
        archive: ArchiveClient,
        publisher: BlobPublisher,
        route_cap: int = DEFAULT_ROUTE_CAP,
        runner: Optional[BoundedRunner] = None,
    ):
        self._archive = archive
        self._publisher = publisher
        self._route_cap = route_cap
        self._runner = runner or sequential_runner()

    def _fetch_snapshot(self, region_id: RegionID) -> Optional[dict]:
        try:
            snapshot = self._archive.fetch_snapshot(region_id)
        except Exception as e:
            logger.error(f"Failed to fetch snapshot {region_id}: {e}")
            return None
        if snapshot is None:
            logger.warning(f"No archived snapshot for region {region_id}")
        return snapshot

    def fetch_snapshots(self, hub_regions: Sequence[RegionID]) -> dict[RegionID, dict]:
        unique = list(dict.fromkeys(hub_regions))
        snapshots = self._runner.map(self._fetch_snapshot, unique)
        return {rid: snap for rid, snap in zip(unique, snapshots) if snap is not None}

    @staticmethod
    def path_for(pair: HotPair) -> str:
        return ArtifactKind.REGION_REGION.path_for(pair.key)

    def run(self, hub_regions: Sequence[RegionID]) -> RunSummary:
        """
        Publish routes for every hub pair.

        Raises:
            PublishError: the blob store rejected an upload
        """
        pairs = synthesize_hub_pairs(hub_regions)
        summary = RunSummary(attempted=len(pairs))
        logger.info(f"region_region precompute tick: pairs={len(pairs)}")

        snapshots = self.fetch_snapshots(hub_regions)
        for pair in pairs:
            routes = compute_routes(
                snapshots.get(pair.from_region),
                snapshots.get(pair.to_region),
                pair.from_region,
                pair.to_region,
                cap=self._route_cap,
            )
            body = {
                "from_region_id": pair.from_region,
                "to_region_id": pair.to_region,
                "last_updated": datetime.now(timezone.utc).isoformat(),
                "count": len(routes),
                "routes": [r.to_dict() for r in routes],
            }
            self._publisher.publish(self.path_for(pair), body, CachePolicy.HAULING_PAIR)
            logger.info(f"Published region_region {pair.key}: {len(routes)} routes")
            summary.published.append(pair.key)

        logger.info(f"region_region precompute done: {summary}")
        return summary


# =============================================================================
# Factory Function
# =============================================================================

def create_route_precomputer(config: PipelineConfig, publisher: BlobPublisher) -> RegionRoutePrecomputer:
    return RegionRoutePrecomputer(
        ArchiveClient.from_pipeline_config(config),
        publisher,
        route_cap=config.route_cap,
    )
