"""
Upstream Clients

HTTP clients for the three read-only sources the jobs depend on:

- HaulingApiClient: the live region hauling API (hot pair warm set)
- StaticCollectionClient: static NPC station / player structure JSON lists
- ArchiveClient: canonical per-region order snapshots

Design:
- Every request goes through requests.get with an explicit timeout
- Non-success statuses and transport errors raise SourceUnavailableError;
  a body of the wrong shape raises MalformedPayloadError. Callers decide
  whether that is per-item tolerable.
- ArchiveClient reports 404 as None, since "no snapshot yet" is an answer,
  not a failure
"""

from typing import Any, Optional

import requests

from domain.errors import MalformedPayloadError, SourceUnavailableError
from domain.models import HotPair, RegionID
from domain.converters import coerce_region_id
from domain.pipeline_config import PipelineConfig
from logging_config import setup_logging
from services.collection_cache import CollectionCache

logger = setup_logging(__name__, log_file="upstream_clients.log")

USER_AGENT = "EVE-Data-Site-Snapshots"


def get_json(
    url: str,
    timeout: float,
    params: Optional[dict] = None,
    allow_not_found: bool = False,
) -> Any:
    """GET a URL and decode its JSON body.

    Args:
        url: Absolute URL
        timeout: Seconds before the request is abandoned
        params: Optional query parameters
        allow_not_found: Return None on 404 instead of raising

    Raises:
        SourceUnavailableError: transport failure or non-success status
        MalformedPayloadError: body is not valid JSON
    """
    headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
    try:
        response = requests.get(url, params=params, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise SourceUnavailableError(f"timeout after {timeout}s: {url}") from e
    except requests.exceptions.RequestException as e:
        raise SourceUnavailableError(f"request failed: {e}") from e

    if response.status_code == 404 and allow_not_found:
        return None
    if not 200 <= response.status_code < 300:
        raise SourceUnavailableError(f"status {response.status_code}")

    try:
        return response.json()
    except ValueError as e:
        raise MalformedPayloadError(f"invalid JSON from {url}: {e}") from e


class HaulingApiClient:
    """Client for ``GET <base>/region_hauling?from_region=&to_region=&limit=``."""

    def __init__(self, api_base: str, limit: int = 200, timeout: float = 15.0):
        self.api_base = api_base.rstrip("/")
        self.limit = limit
        self.timeout = timeout

    @classmethod
    def from_pipeline_config(cls, config: PipelineConfig) -> "HaulingApiClient":
        return cls(config.public_api_base, limit=config.hauling_limit, timeout=config.http_timeout)

    def fetch(self, pair: HotPair) -> dict:
        """Fetch live hauling routes for one pair.

        Raises:
            SourceUnavailableError: request failed
            MalformedPayloadError: response lacks a ``routes`` array
        """
        data = get_json(
            f"{self.api_base}/region_hauling",
            timeout=self.timeout,
            params={
                "from_region": pair.from_region,
                "to_region": pair.to_region,
                "limit": self.limit,
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("routes"), list):
            raise MalformedPayloadError(f"hauling response for {pair.key} has no routes array")
        return data


class StaticCollectionClient:
    """Client for static JSON collections whose records carry ``region_id``."""

    def __init__(self, base_url: str, timeout: float = 15.0, cache: Optional[CollectionCache] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache if cache is not None else CollectionCache()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def fetch_collection(self, path: str) -> list:
        """Fetch one collection as a list of records.

        Raises:
            SourceUnavailableError: no base URL configured, or request failed
            MalformedPayloadError: body is not a JSON array
        """
        if not self.base_url:
            raise SourceUnavailableError("static collection base URL is not configured")

        def _load() -> list:
            data = get_json(self.url_for(path), timeout=self.timeout)
            if not isinstance(data, list):
                raise MalformedPayloadError(f"{path} is not a JSON array")
            return data

        return self.cache.get(path, _load)

    def fetch_region_ids(self, path: str) -> list[RegionID]:
        """Region ids referenced by a collection; records without one are skipped."""
        region_ids = []
        for record in self.fetch_collection(path):
            if not isinstance(record, dict):
                continue
            region_id = coerce_region_id(record.get("region_id"))
            if region_id is not None:
                region_ids.append(region_id)
        return region_ids


class ArchiveClient:
    """Client for canonical ``<archive base>/<region id>.json`` snapshots."""

    def __init__(self, base_url: str, timeout: float = 15.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_pipeline_config(cls, config: PipelineConfig) -> "ArchiveClient":
        return cls(config.archive_base_url, timeout=config.http_timeout)

    def url_for(self, region_id: RegionID) -> str:
        return f"{self.base_url}/{region_id}.json"

    def fetch_snapshot(self, region_id: RegionID) -> Optional[dict]:
        """Fetch one region snapshot, or None when the archive has none.

        Raises:
            SourceUnavailableError: non-404 failure status or transport error
            MalformedPayloadError: body is not a JSON object
        """
        data = get_json(self.url_for(region_id), timeout=self.timeout, allow_not_found=True)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise MalformedPayloadError(f"snapshot for region {region_id} is not a JSON object")
        return data
