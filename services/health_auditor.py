"""
Snapshot Health Auditor

Read-only freshness check of the canonical region_orders archive. For each
target region the archived snapshot is fetched and summarized into a
HealthRecord; the records are aggregated into an AuditReport listing the
regions that are missing.

Design:
- Targets: an explicit list is used exactly as given (an empty list means
  nothing to check); None means the configured hub regions
- Sequential by policy: the archive host rate limits bursts, so requests go
  through a BoundedRunner with one worker unless configured otherwise
  (never more than MAX_AUDIT_CONCURRENCY)
- 404 is an answer, not an error: ``exists: false`` with no error field
- Any other failure is reported inline with an error message; audit()
  itself never raises for a per-region failure
"""

from typing import Optional, Sequence

from domain.models import AuditReport, HealthRecord, RegionID
from domain.pipeline_config import MAX_AUDIT_CONCURRENCY, PipelineConfig
from logging_config import setup_logging
from services.bounded_runner import BoundedRunner, sequential_runner
from services.upstream_clients import ArchiveClient

logger = setup_logging(__name__, log_file="health_auditor.log")


class SnapshotHealthAuditor:
    """Checks existence and staleness of archived region snapshots."""

    def __init__(
        self,
        archive: ArchiveClient,
        default_targets: Sequence[RegionID] = (),
        runner: Optional[BoundedRunner] = None,
    ):
        self._archive = archive
        self._default_targets = list(default_targets)
        self._runner = runner or sequential_runner()

    def select_targets(self, target_region_ids: Optional[Sequence[RegionID]] = None) -> list[RegionID]:
        if target_region_ids is None:
            return list(self._default_targets)
        return list(target_region_ids)

    def check(self, region_id: RegionID) -> HealthRecord:
        """Fetch one snapshot and summarize it. Never raises."""
        try:
            snapshot = self._archive.fetch_snapshot(region_id)
        except Exception as e:
            logger.warning(f"Region {region_id} snapshot check failed: {e}")
            return HealthRecord.failed(region_id, str(e))

        if snapshot is None:
            logger.info(f"Region {region_id} has no snapshot in the archive")
            return HealthRecord.not_found(region_id)
        return HealthRecord.found(region_id, snapshot)

    def audit(self, target_region_ids: Optional[Sequence[RegionID]] = None) -> AuditReport:
        targets = self.select_targets(target_region_ids)
        logger.info(f"Auditing {len(targets)} region snapshots")

        records = self._runner.map(self.check, targets)
        report = AuditReport.from_records(records)

        if report.missing:
            logger.warning(f"Missing region snapshots: {report.missing}")
        logger.info(f"Audit done: checked={report.checked} missing={len(report.missing)}")
        return report


# =============================================================================
# Factory Function
# =============================================================================

def create_health_auditor(config: PipelineConfig) -> SnapshotHealthAuditor:
    """Wire an auditor to the configured archive and hub list."""
    runner = BoundedRunner(config.audit_concurrency, max_cap=MAX_AUDIT_CONCURRENCY)
    return SnapshotHealthAuditor(
        ArchiveClient.from_pipeline_config(config),
        default_targets=config.hub_regions,
        runner=runner,
    )
