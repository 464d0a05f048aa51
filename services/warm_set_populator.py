"""
Warm Set Populator

Pre-warms the blob cache for the configured hot hauling pairs. For each
pair the live hauling API is queried and a successful response is published
to ``hauling/<from>-<to>.json`` with a 30 minute cache lifetime.

Failure policy:
- Fetch failures (transport error, non-success status, payload without a
  ``routes`` array) are logged as a cache miss for that pair; the run moves
  on to the next pair
- Publish failures raise PublishError and abort the run, since they mean
  the blob store itself is unavailable

Pairs are processed through a BoundedRunner capped at one worker, so the
upstream API and the blob store see at most one request at a time.
"""

from typing import Callable, Optional, Sequence

from domain.enums import ArtifactKind, CachePolicy
from domain.models import HotPair, RunSummary
from domain.pipeline_config import PipelineConfig
from logging_config import setup_logging
from services.blob_publisher import BlobPublisher
from services.bounded_runner import BoundedRunner, sequential_runner
from services.upstream_clients import HaulingApiClient

logger = setup_logging(__name__, log_file="warm_set_populator.log")


class WarmSetPopulator:
    """Fetch-and-publish loop over the hot pair warm set."""

    def __init__(
        self,
        fetch: Callable[[HotPair], dict],
        publisher: BlobPublisher,
        runner: Optional[BoundedRunner] = None,
        cache_control: str = CachePolicy.HAULING_PAIR.value,
    ):
        self._fetch = fetch
        self._publisher = publisher
        self._runner = runner or sequential_runner()
        self._cache_control = cache_control

    @staticmethod
    def path_for(pair: HotPair) -> str:
        return ArtifactKind.HAULING.path_for(pair.key)

    def _populate_one(self, pair: HotPair) -> Optional[str]:
        try:
            data = self._fetch(pair)
        except Exception as e:
            logger.warning(f"cache miss for {pair.key}: {e}")
            return None

        # Outside the try: a publish failure must reach the caller
        url = self._publisher.publish(self.path_for(pair), data, self._cache_control)
        logger.info(f"Cached {self.path_for(pair)}")
        return url

    def populate(self, hot_pairs: Sequence[HotPair]) -> RunSummary:
        """
        Attempt every pair exactly once, in list order.

        Returns:
            RunSummary with the keys published and the keys that missed

        Raises:
            PublishError: the blob store rejected an upload
        """
        summary = RunSummary(attempted=len(hot_pairs))
        logger.info(f"hauling warm set started: {len(hot_pairs)} pairs")

        urls = self._runner.map(self._populate_one, hot_pairs)
        for pair, url in zip(hot_pairs, urls):
            if url is None:
                summary.failed.append(pair.key)
            else:
                summary.published.append(pair.key)

        logger.info(f"hauling warm set done: {summary}")
        return summary


# =============================================================================
# Factory Function
# =============================================================================

def create_warm_set_populator(config: PipelineConfig, publisher: BlobPublisher) -> WarmSetPopulator:
    """Wire a WarmSetPopulator to the live hauling API described by config."""
    client = HaulingApiClient.from_pipeline_config(config)
    return WarmSetPopulator(fetch=client.fetch, publisher=publisher)
