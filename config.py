"""Infrastructure handles for the snapshot jobs.

DatabaseConfig wraps the SQLAlchemy engine for the relational aggregate;
BlobStoreConfig wraps the boto3 client for the public blob store. Both are
built from a PipelineConfig and created once per run.
"""

from contextlib import suppress

import boto3
from botocore.config import Config
from sqlalchemy import NullPool, create_engine
from sqlalchemy.engine import make_url

from domain.errors import ConfigurationError
from domain.pipeline_config import PipelineConfig
from logging_config import setup_logging

logger = setup_logging(__name__)


class DatabaseConfig:
    """Relational aggregate connection settings and lazily created engine.

    Engines use NullPool: each scheduled run opens a connection, runs one
    query and exits, so long-lived pooled handles only leak.
    """

    def __init__(self, url: str | None, connect_timeout: float = 15.0):
        self.url = url
        self.connect_timeout = connect_timeout
        self._engine = None

    @classmethod
    def from_pipeline_config(cls, config: PipelineConfig) -> "DatabaseConfig":
        return cls(config.db_url, connect_timeout=config.http_timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    @property
    def dialect(self) -> str:
        if not self.url:
            return ""
        return make_url(self.url).get_backend_name()

    def _connect_args(self) -> dict:
        # pyodbc and sqlite3 both take a ``timeout`` keyword, in seconds
        if self.dialect in ("mssql", "sqlite"):
            return {"timeout": int(self.connect_timeout)}
        if self.dialect == "postgresql":
            return {"connect_timeout": int(self.connect_timeout)}
        return {}

    @property
    def engine(self):
        if not self.url:
            raise ConfigurationError(
                "No relational database configured. Provide DB_CONNECTION_STRING, "
                "SQLCONNSTR_* or DB_SERVER/DB_NAME."
            )
        if self._engine is None:
            self._engine = create_engine(
                self.url,
                poolclass=NullPool,
                connect_args=self._connect_args(),
            )
        return self._engine

    def dispose(self):
        if self._engine is not None:
            with suppress(Exception):
                self._engine.dispose()
            self._engine = None


class BlobStoreConfig:
    """S3-compatible blob store settings and lazily created client."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        region: str = "us-east-1",
        public_base: str = "",
        timeout: float = 15.0,
    ):
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.region = region
        self.public_base = public_base.rstrip("/")
        self.timeout = timeout
        self._client = None

    @classmethod
    def from_pipeline_config(cls, config: PipelineConfig) -> "BlobStoreConfig":
        return cls(
            bucket=config.blob_bucket,
            endpoint_url=config.blob_endpoint_url,
            region=config.blob_region,
            public_base=config.blob_public_base,
            timeout=config.http_timeout,
        )

    @property
    def client(self):
        if self._client is None:
            client_kwargs = {
                "service_name": "s3",
                "region_name": self.region,
                "config": Config(
                    signature_version="s3v4",
                    connect_timeout=self.timeout,
                    read_timeout=self.timeout,
                    retries={"max_attempts": 1},
                ),
            }
            if self.endpoint_url:
                client_kwargs["endpoint_url"] = self.endpoint_url
            # Credentials come from the standard AWS_* environment / profile chain
            self._client = boto3.client(**client_kwargs)
            logger.info(
                f"Blob client initialized bucket={self.bucket} "
                f"endpoint={self.endpoint_url} region={self.region}"
            )
        return self._client

    def public_url(self, path: str) -> str:
        """Public URL of an object: ``<base>/<bucket>/<path>``."""
        if self.public_base:
            return f"{self.public_base}/{self.bucket}/{path}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{path}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{path}"
