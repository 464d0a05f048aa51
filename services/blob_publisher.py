"""
Blob Publisher

Uploads JSON-serializable values to the public blob store with an explicit
cache-control directive and returns the resulting public URL.

Every snapshot job terminates here. A failure is an infrastructure problem
rather than a bad upstream key, so it is raised as PublishError and never
swallowed.
"""

import json
from typing import Any

from config import BlobStoreConfig
from domain.enums import CachePolicy
from domain.errors import PublishError
from logging_config import setup_logging

logger = setup_logging(__name__, log_file="blob_publisher.log")

CONTENT_TYPE = "application/json; charset=utf-8"


def validate_blob_path(path: str) -> str:
    """Blob paths are relative, slash separated and end in ``.json``."""
    if not path or path.startswith("/") or "\\" in path:
        raise ValueError(f"Blob path must be relative and slash separated: {path!r}")
    if any(part in ("", ".", "..") for part in path.split("/")):
        raise ValueError(f"Blob path has an empty or dot segment: {path!r}")
    if not path.endswith(".json"):
        raise ValueError(f"Blob path must end in .json: {path!r}")
    return path


class BlobPublisher:
    """Writes JSON documents to the blob store, last writer wins."""

    def __init__(self, store: BlobStoreConfig):
        self._store = store

    def publish(self, path: str, value: Any, cache_control: str | CachePolicy) -> str:
        """
        Upload ``value`` as JSON to ``path`` and return its public URL.

        Args:
            path: Relative blob path, e.g. ``hauling/10000002-10000043.json``
            value: Any JSON-serializable value
            cache_control: HTTP Cache-Control directive for the object

        Raises:
            ValueError: path is not a valid relative blob path
            PublishError: serialization or upload failed
        """
        validate_blob_path(path)
        if isinstance(cache_control, CachePolicy):
            cache_control = cache_control.value

        try:
            body = json.dumps(value, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise PublishError(path, e) from e

        try:
            self._store.client.put_object(
                Bucket=self._store.bucket,
                Key=path,
                Body=body,
                ContentType=CONTENT_TYPE,
                CacheControl=cache_control,
            )
        except Exception as e:
            logger.error(f"Upload of {path} to bucket {self._store.bucket} failed: {e}")
            raise PublishError(path, e) from e

        url = self._store.public_url(path)
        logger.info(f"Published {path} ({len(body)} bytes, {cache_control}) -> {url}")
        return url

