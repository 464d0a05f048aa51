"""
Pipeline Configuration Domain Model

Pure Python dataclass holding everything the snapshot jobs read at run
start. No infrastructure dependencies; built by settings_service.
"""

from dataclasses import dataclass
from typing import Optional

from domain.models import HotPair, RegionID


DEFAULT_PUBLIC_API_BASE = "https://evedatafunc01.azurewebsites.net/api"
DEFAULT_HUB_REGIONS: tuple[RegionID, ...] = (10000002, 10000043, 10000032, 10000030, 10000042)
DEFAULT_HOT_PAIRS: tuple[HotPair, ...] = (
    HotPair(10000002, 10000043),  # The Forge -> Domain
    HotPair(10000002, 10000064),  # The Forge -> Essence
    HotPair(10000043, 10000002),  # Domain -> The Forge
)
DEFAULT_GH_RAW_BASE = "https://raw.githubusercontent.com"
DEFAULT_GITHUB_OWNER = "sidarthus89"
DEFAULT_GITHUB_REPO = "EVE-Data-Site"
DEFAULT_GITHUB_BRANCH_DATA = "gh-pages"
DEFAULT_BLOB_BUCKET = "public"
DEFAULT_BLOB_REGION = "us-east-1"
DEFAULT_STATION_COLLECTION_PATH = "public/stations/stations_npc.json"
DEFAULT_STRUCTURE_COLLECTION_PATH = "public/structures/structures.json"
DEFAULT_HTTP_TIMEOUT = 15.0
DEFAULT_HAULING_LIMIT = 200
DEFAULT_ROUTE_CAP = 5000
MIN_ROUTE_CAP = 100
MAX_AUDIT_CONCURRENCY = 4


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable run configuration for the snapshot jobs.

    Attributes:
        public_api_base: Base URL of the live region hauling API
        hub_regions: Hub region ids; default audit targets and route hubs
        hot_pairs: Curated hauling pairs warmed on every run
        archive_raw_base: Raw content host of the canonical archive
        archive_owner: Archive repository owner
        archive_repo: Archive repository name
        archive_branch: Archive branch holding published data
        static_base_url: Public base URL of the static station/structure collections
        station_collection_path: NPC station list path under static_base_url
        structure_collection_path: Player structure list path under static_base_url
        blob_bucket: Bucket (container) receiving published artifacts
        blob_endpoint_url: S3-compatible endpoint, None for AWS
        blob_region: Region name passed to the blob client
        blob_public_base: Public URL prefix for published artifacts
        db_url: SQLAlchemy URL of the relational aggregate, None if unconfigured
        http_timeout: Timeout in seconds for every outbound HTTP call
        hauling_limit: ``limit`` parameter for the live hauling API
        route_cap: Maximum routes kept per region-to-region artifact
        audit_concurrency: Audit worker cap (1 keeps the audit sequential)
        log_level: Logging level name
    """

    public_api_base: str = DEFAULT_PUBLIC_API_BASE
    hub_regions: tuple[RegionID, ...] = DEFAULT_HUB_REGIONS
    hot_pairs: tuple[HotPair, ...] = DEFAULT_HOT_PAIRS
    archive_raw_base: str = DEFAULT_GH_RAW_BASE
    archive_owner: str = DEFAULT_GITHUB_OWNER
    archive_repo: str = DEFAULT_GITHUB_REPO
    archive_branch: str = DEFAULT_GITHUB_BRANCH_DATA
    static_base_url: str = ""
    blob_bucket: str = DEFAULT_BLOB_BUCKET
    blob_endpoint_url: Optional[str] = None
    blob_region: str = DEFAULT_BLOB_REGION
    blob_public_base: str = ""
    station_collection_path: str = DEFAULT_STATION_COLLECTION_PATH
    structure_collection_path: str = DEFAULT_STRUCTURE_COLLECTION_PATH
    db_url: Optional[str] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    hauling_limit: int = DEFAULT_HAULING_LIMIT
    route_cap: int = DEFAULT_ROUTE_CAP
    audit_concurrency: int = 1
    log_level: str = "INFO"

    @property
    def archive_base_url(self) -> str:
        """Base URL of the region_orders snapshots in the canonical archive."""
        return (
            f"{self.archive_raw_base.rstrip('/')}/{self.archive_owner}/"
            f"{self.archive_repo}/{self.archive_branch}/data/region_orders"
        )

    def archive_url_for(self, region_id: RegionID) -> str:
        return f"{self.archive_base_url}/{region_id}.json"
