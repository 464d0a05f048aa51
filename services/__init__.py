"""
Services Package

This package contains the service modules that implement the snapshot jobs.

Each service module follows these principles:
1. Single Responsibility - one job or one collaborator per module
2. Dependency Injection - clients, publishers and runners passed in
3. Protocol - SourceProvider lets tests inject stub sources
4. Factory functions - ``create_*`` wires a service from PipelineConfig

Available Services:
- BlobPublisher: JSON uploads with cache-control, returns public URL
- SourceResolver: ordered fallback across SourceProviders
- WarmSetPopulator: hot hauling pair warm set
- RegionMarketIndexBuilder: regions-with-markets index (SQL first, static fallback)
- SnapshotHealthAuditor: read-only archive freshness audit
- RegionRoutePrecomputer: hub-to-hub routes from archived snapshots
"""

from services.blob_publisher import BlobPublisher
from services.bounded_runner import BoundedRunner, sequential_runner
from services.collection_cache import CollectionCache
from services.health_auditor import SnapshotHealthAuditor, create_health_auditor
from services.region_index_builder import (
    RegionMarketIndexBuilder,
    SqlAggregateSource,
    StaticCollectionsSource,
    create_region_index_builder,
)
from services.route_precompute import (
    RegionRoutePrecomputer,
    compute_routes,
    create_route_precomputer,
    synthesize_hub_pairs,
)
from services.source_resolver import (
    FunctionSource,
    ResolveResult,
    SourceProvider,
    SourceResolver,
)
from services.upstream_clients import ArchiveClient, HaulingApiClient, StaticCollectionClient
from services.warm_set_populator import WarmSetPopulator, create_warm_set_populator

__all__ = [
    # Publishing
    'BlobPublisher',

    # Resolution
    'SourceResolver',
    'SourceProvider',
    'FunctionSource',
    'ResolveResult',

    # Concurrency and caching
    'BoundedRunner',
    'sequential_runner',
    'CollectionCache',

    # Upstream clients
    'ArchiveClient',
    'HaulingApiClient',
    'StaticCollectionClient',

    # Jobs
    'WarmSetPopulator',
    'create_warm_set_populator',
    'RegionMarketIndexBuilder',
    'SqlAggregateSource',
    'StaticCollectionsSource',
    'create_region_index_builder',
    'SnapshotHealthAuditor',
    'create_health_auditor',
    'RegionRoutePrecomputer',
    'compute_routes',
    'create_route_precomputer',
    'synthesize_hub_pairs',
]
