"""
Domain Models Package

This package contains the core domain models for the snapshot pipeline.
These dataclasses provide typed, immutable structures for the artifacts
the jobs publish and the reports they return.

Key Components:
- Enums: CachePolicy, ArtifactKind, IndexSource
- Models: HotPair, RegionMarketIndex, HealthRecord, AuditReport, HaulingRoute
- Config: PipelineConfig with documented defaults
- Errors: PublishError and the data-source error types
"""

from domain.enums import ArtifactKind, CachePolicy, IndexSource
from domain.errors import (
    ConfigurationError,
    MalformedPayloadError,
    PublishError,
    SnapshotPipelineError,
    SourceUnavailableError,
)
from domain.models import (
    AuditReport,
    HaulingRoute,
    HealthRecord,
    HotPair,
    RegionID,
    RegionMarketIndex,
    RunSummary,
)
from domain.pipeline_config import PipelineConfig

__all__ = [
    # Enums
    "ArtifactKind",
    "CachePolicy",
    "IndexSource",
    # Errors
    "ConfigurationError",
    "MalformedPayloadError",
    "PublishError",
    "SnapshotPipelineError",
    "SourceUnavailableError",
    # Models
    "AuditReport",
    "HaulingRoute",
    "HealthRecord",
    "HotPair",
    "RegionID",
    "RegionMarketIndex",
    "RunSummary",
    # Config
    "PipelineConfig",
]
