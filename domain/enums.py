"""
Domain Enums

Enumerations for the snapshot pipeline. These replace magic strings for
artifact kinds, cache lifetimes and resolver states.
"""

from enum import Enum


class CachePolicy(str, Enum):
    """
    Cache-control directives attached to published artifacts.

    Lifetimes are policy constants and are never derived from the data:
    - HAULING_PAIR: 30 minutes for hot hauling pairs and hub routes
    - REGION_INDEX: 1 hour for the regions-with-markets index
    - NO_STORE: audit reports are always fresh
    """
    HAULING_PAIR = "public, max-age=1800"
    REGION_INDEX = "public, max-age=3600"
    NO_STORE = "no-store"


class ArtifactKind(str, Enum):
    """Top-level path segment of a published snapshot blob."""
    HAULING = "hauling"
    REGIONS = "regions"
    REGION_REGION = "region_region"

    def path_for(self, key: str) -> str:
        """Return the deterministic blob path ``<kind>/<key>.json``."""
        return f"{self.value}/{key}.json"


class IndexSource(Enum):
    """
    Resolver states for the regions-with-markets index.

    SQL_PRIMARY is always attempted first; STATIC_FALLBACK derives region
    ids from the NPC station and player structure collections. NONE means
    every source came back empty.
    """
    SQL_PRIMARY = "sql_primary"
    STATIC_FALLBACK = "static_fallback"
    NONE = "none"
