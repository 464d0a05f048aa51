"""
Domain Models

Dataclasses representing the entities the snapshot jobs produce and consume.
These models give typed structure to the JSON documents that flow between
the upstream sources, the blob store and the audit report.

Design Principles:
1. Immutability (frozen=True) - Safe to share across a run and hashable
2. Factory methods - Clean construction from raw upstream payloads
3. Serialization - ``to_dict()`` produces the exact published JSON shape
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from domain.converters import safe_float
from domain.enums import CachePolicy


# Type aliases for clarity
RegionID = int
TypeID = int


# =============================================================================
# HotPair - curated origin/destination region pair
# =============================================================================

@dataclass(frozen=True)
class HotPair:
    """
    A curated, high-traffic (origin, destination) region pair.

    Hot pairs are directional; a pair whose origin equals its destination
    is meaningless for hauling and cannot be constructed.

    Attributes:
        from_region: Origin region ID
        to_region: Destination region ID
    """
    from_region: RegionID
    to_region: RegionID

    def __post_init__(self):
        if self.from_region == self.to_region:
            raise ValueError(
                f"Hot pair origin and destination must differ (got {self.from_region})"
            )

    @property
    def key(self) -> str:
        """Blob key ``<from>-<to>`` used for hauling and route artifacts."""
        return f"{self.from_region}-{self.to_region}"


# =============================================================================
# RegionMarketIndex - regions with any market activity
# =============================================================================

@dataclass(frozen=True)
class RegionMarketIndex:
    """
    Sorted, deduplicated set of regions with buy or sell orders.

    Attributes:
        region_ids: Region IDs in ascending order, no duplicates
        source: Name of the source that produced the ids
    """
    region_ids: tuple[RegionID, ...]
    source: str

    @classmethod
    def from_ids(cls, region_ids, source: str) -> "RegionMarketIndex":
        """Build an index from any iterable of ids, sorting and deduplicating."""
        return cls(region_ids=tuple(sorted(set(region_ids))), source=source)

    def to_list(self) -> list[RegionID]:
        return list(self.region_ids)

    def __len__(self) -> int:
        return len(self.region_ids)


# =============================================================================
# Health audit
# =============================================================================

@dataclass(frozen=True)
class HealthRecord:
    """
    Result of checking one region snapshot in the canonical archive.

    Optional fields are left out of the serialized record when they are
    None, so a plain not-found record carries no ``error`` key.
    """
    region_id: RegionID
    exists: bool
    last_updated: Optional[str] = None
    count_types: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, region_id: RegionID, snapshot: dict) -> "HealthRecord":
        best_quotes = snapshot.get("best_quotes")
        count_types = len(best_quotes) if isinstance(best_quotes, dict) else 0
        return cls(
            region_id=region_id,
            exists=True,
            last_updated=snapshot.get("last_updated"),
            count_types=count_types,
        )

    @classmethod
    def not_found(cls, region_id: RegionID) -> "HealthRecord":
        return cls(region_id=region_id, exists=False)

    @classmethod
    def failed(cls, region_id: RegionID, error: str) -> "HealthRecord":
        return cls(region_id=region_id, exists=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        record: dict[str, Any] = {"region_id": self.region_id, "exists": self.exists}
        if self.exists:
            if self.last_updated is not None:
                record["last_updated"] = self.last_updated
            record["count_types"] = self.count_types
        if self.error is not None:
            record["error"] = self.error
        return record


@dataclass(frozen=True)
class AuditReport:
    """Aggregated health audit: how many were checked and which are missing.

    Reports are served fresh on every request, never cached.
    """
    cache_control: ClassVar[str] = CachePolicy.NO_STORE.value

    checked: int
    missing: list[RegionID] = field(default_factory=list)
    results: list[HealthRecord] = field(default_factory=list)

    @classmethod
    def from_records(cls, records: list[HealthRecord]) -> "AuditReport":
        return cls(
            checked=len(records),
            missing=[r.region_id for r in records if not r.exists],
            results=list(records),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "checked": self.checked,
            "missing": list(self.missing),
            "results": [r.to_dict() for r in self.results],
        }


# =============================================================================
# HaulingRoute - one profitable type between two regions
# =============================================================================

@dataclass(frozen=True)
class HaulingRoute:
    """
    A buy-low/sell-high opportunity for one type between two regions.

    The origin side is the best sell order in the origin region, the
    destination side is the best buy order in the destination region.
    """
    type_id: TypeID
    origin_id: int
    destination_id: int
    sell_price: float
    buy_price: float
    profit_per_unit: float
    profit_margin: float
    max_volume: int
    origin_region_id: RegionID
    destination_region_id: RegionID

    @classmethod
    def from_quotes(
        cls,
        type_id: TypeID,
        best_sell: dict,
        best_buy: dict,
        origin_region_id: RegionID,
        destination_region_id: RegionID,
    ) -> Optional["HaulingRoute"]:
        """
        Build a route from an origin best_sell and destination best_buy quote.

        Returns None when the trade is not profitable.
        """
        sell_price = safe_float(best_sell.get("price"))
        buy_price = safe_float(best_buy.get("price"))
        profit = buy_price - sell_price
        if profit <= 0:
            return None
        max_volume = int(min(
            safe_float(best_sell.get("volume_remain")),
            safe_float(best_buy.get("volume_remain")),
        ))
        margin = (profit / sell_price) * 100 if sell_price > 0 else 0.0
        return cls(
            type_id=int(type_id),
            origin_id=int(safe_float(best_sell.get("location_id"))),
            destination_id=int(safe_float(best_buy.get("location_id"))),
            sell_price=sell_price,
            buy_price=buy_price,
            profit_per_unit=profit,
            profit_margin=margin,
            max_volume=max_volume,
            origin_region_id=origin_region_id,
            destination_region_id=destination_region_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type_id": self.type_id,
            "origin_id": self.origin_id,
            "destination_id": self.destination_id,
            "sell_price": self.sell_price,
            "buy_price": self.buy_price,
            "profit_per_unit": self.profit_per_unit,
            "profit_margin": self.profit_margin,
            "max_volume": self.max_volume,
            "origin_region_id": self.origin_region_id,
            "destination_region_id": self.destination_region_id,
        }


# =============================================================================
# Run summaries
# =============================================================================

@dataclass
class RunSummary:
    """Per-run bookkeeping for the batch jobs (logs and CLI output only)."""
    attempted: int = 0
    published: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"attempted={self.attempted} published={len(self.published)} "
            f"failed={len(self.failed)}"
        )
