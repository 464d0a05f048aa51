"""
Region Market Index Builder

Rebuilds ``regions/regions_with_markets.json``: the sorted, deduplicated
list of regions with any buy or sell activity.

Two-state fallback chain, resolved by SourceResolver:
- SQL_PRIMARY: distinct region ids from ``aggregated_orders`` with a best buy
  or best sell price. No configured database, a connection or query error,
  and an empty table are all treated the same way: fall through.
- STATIC_FALLBACK: union of region ids from the NPC station list and the
  player structure list. Each collection is fetched independently; one
  that fails contributes nothing.

Both states converge on the same terminal step: sort, dedupe and publish
with a one hour cache lifetime. Publish errors propagate.
"""

from typing import Optional, Sequence

from domain.enums import ArtifactKind, CachePolicy, IndexSource
from domain.models import RegionID, RegionMarketIndex
from domain.pipeline_config import PipelineConfig
from config import DatabaseConfig
from logging_config import setup_logging
from repositories.aggregated_orders_repo import AggregatedOrdersRepository
from services.blob_publisher import BlobPublisher
from services.collection_cache import CollectionCache
from services.source_resolver import ResolveResult, SourceProvider, SourceResolver
from services.upstream_clients import StaticCollectionClient

logger = setup_logging(__name__, log_file="region_index_builder.log")

REGION_INDEX_PATH = ArtifactKind.REGIONS.path_for("regions_with_markets")


class SqlAggregateSource:
    """SQL_PRIMARY: region ids from the aggregated_orders table."""

    name = IndexSource.SQL_PRIMARY.value

    def __init__(self, repo: AggregatedOrdersRepository):
        self._repo = repo

    def attempt(self) -> Optional[list[RegionID]]:
        if not self._repo.db.is_configured:
            logger.info("SQL not configured, skipping aggregated_orders")
            return None
        return self._repo.get_regions_with_markets()


class StaticCollectionsSource:
    """STATIC_FALLBACK: region ids referenced by static JSON collections."""

    name = IndexSource.STATIC_FALLBACK.value

    def __init__(self, client: StaticCollectionClient, paths: Sequence[str]):
        self._client = client
        self._paths = list(paths)

    def attempt(self) -> set[RegionID]:
        region_ids: set[RegionID] = set()
        for path in self._paths:
            try:
                found = self._client.fetch_region_ids(path)
            except Exception as e:
                logger.warning(f"Static collection {path} unavailable: {e}")
                continue
            logger.info(f"Static collection {path}: {len(found)} records with a region")
            region_ids.update(found)
        return region_ids


class RegionMarketIndexBuilder:
    """Resolve the regions-with-markets index and publish it."""

    def __init__(
        self,
        sources: Sequence[SourceProvider],
        publisher: BlobPublisher,
        resolver: Optional[SourceResolver] = None,
    ):
        self._sources = list(sources)
        self._publisher = publisher
        self._resolver = resolver or SourceResolver("regions_with_markets")
        self.last_resolution: Optional[ResolveResult] = None

    def build(self) -> RegionMarketIndex:
        """Resolve the index without publishing. Never raises for source failure."""
        resolution = self._resolver.resolve(self._sources)
        self.last_resolution = resolution
        source = resolution.source or IndexSource.NONE.value
        return RegionMarketIndex.from_ids(resolution.values, source=source)

    def run(self) -> tuple[RegionMarketIndex, str]:
        """
        Build and publish the index.

        Returns:
            (index, public URL of the published blob)

        Raises:
            PublishError: the blob store rejected the upload
        """
        logger.info("regions_with_markets started")
        index = self.build()
        if len(index) == 0:
            logger.warning("No region ids from any source; publishing an empty index")
        url = self._publisher.publish(REGION_INDEX_PATH, index.to_list(), CachePolicy.REGION_INDEX)
        logger.info(
            f"Uploaded {REGION_INDEX_PATH} to {url} with {len(index)} regions "
            f"(source={index.source})"
        )
        return index, url


# =============================================================================
# Factory Function
# =============================================================================

def create_region_index_builder(
    config: PipelineConfig,
    publisher: BlobPublisher,
    db: Optional[DatabaseConfig] = None,
    cache: Optional[CollectionCache] = None,
) -> RegionMarketIndexBuilder:
    """Wire the SQL-first, static-fallback chain described by config."""
    db = db or DatabaseConfig.from_pipeline_config(config)
    client = StaticCollectionClient(config.static_base_url, timeout=config.http_timeout, cache=cache)
    sources = [
        SqlAggregateSource(AggregatedOrdersRepository(db)),
        StaticCollectionsSource(
            client, [config.station_collection_path, config.structure_collection_path]
        ),
    ]
    return RegionMarketIndexBuilder(sources, publisher)
