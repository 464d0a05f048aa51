"""
Pytest configuration file for the snapshot pipeline.
This file sets up the Python path so tests can import modules from the project root,
and provides shared fakes for HTTP responses, the blob store and the aggregate database.
"""
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine, text

# Add the project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from config import DatabaseConfig  # noqa: E402
from domain.pipeline_config import PipelineConfig  # noqa: E402


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, json_data=None, json_error=None):
        self.status_code = status_code
        self._json = json_data
        self._json_error = json_error

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._json


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def publisher():
    """A BlobPublisher double that records calls and returns a URL per path."""
    pub = Mock()
    pub.publish.side_effect = lambda path, value, cache_control: f"https://blob.test/public/{path}"
    return pub


@pytest.fixture
def pipeline_config():
    return PipelineConfig(
        public_api_base="https://api.test/api",
        hub_regions=(10000002, 10000043, 10000032),
        archive_raw_base="https://raw.test",
        static_base_url="https://static.test",
        blob_public_base="https://blob.test",
        http_timeout=5.0,
    )


def _make_aggregate_db(path: Path, rows) -> DatabaseConfig:
    url = f"sqlite:///{path}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE aggregated_orders ("
            " region_id INTEGER, type_id INTEGER,"
            " best_buy_price REAL, best_sell_price REAL)"
        ))
        for row in rows:
            conn.execute(
                text("INSERT INTO aggregated_orders VALUES (:r, :t, :b, :s)"),
                {"r": row[0], "t": row[1], "b": row[2], "s": row[3]},
            )
    engine.dispose()
    return DatabaseConfig(url, connect_timeout=5)


@pytest.fixture
def aggregate_db(tmp_path):
    """Factory: build a SQLite aggregated_orders table from (region, type, buy, sell) rows."""
    def _factory(rows):
        return _make_aggregate_db(tmp_path / "aggregate.db", rows)
    return _factory
