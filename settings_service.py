"""Centralized settings loader for the snapshot jobs.

Infrastructure-level module: must not import from services/, repositories/,
config.py, or logging_config.py to avoid circular imports.

Resolution order for every value: built-in defaults (domain.pipeline_config),
then settings.toml, then environment variables. Everything is read once at
run start by load_pipeline_config().
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import quote_plus

from sqlalchemy.engine import URL

from domain.converters import coerce_region_id, parse_region_ids
from domain.models import HotPair
from domain.pipeline_config import (
    DEFAULT_HOT_PAIRS,
    DEFAULT_HUB_REGIONS,
    MAX_AUDIT_CONCURRENCY,
    MIN_ROUTE_CAP,
    PipelineConfig,
)

logger = logging.getLogger(__name__)

SETTINGS_PATH = Path(__file__).resolve().parent / "settings.toml"
PREFERRED_CONNECTION_NAMES = ("evedata", "evedatadb", "defaultconnection")
ODBC_DRIVER = "ODBC Driver 18 for SQL Server"

_cached_settings: dict[Path, dict] = {}


def _load_settings(settings_path: Path = SETTINGS_PATH) -> dict:
    """Load and cache settings from the TOML file.

    A missing file is not an error: the built-in defaults apply.
    """
    cached = _cached_settings.get(settings_path)
    if cached is not None:
        return cached
    if not settings_path.exists():
        logger.debug("No settings file at %s, using built-in defaults", settings_path)
        _cached_settings[settings_path] = {}
        return _cached_settings[settings_path]
    try:
        with open(settings_path, "rb") as f:
            _cached_settings[settings_path] = tomllib.load(f)
            return _cached_settings[settings_path]
    except Exception as e:
        logger.error("Failed to load settings from %s: %s", settings_path, e)
        raise


def clear_settings_cache() -> None:
    """Forget the cached settings.toml contents (tests and log-level edits)."""
    _cached_settings.clear()


def _parse_hot_pairs(raw_pairs) -> tuple[HotPair, ...]:
    """Build HotPairs from ``[[hot_pairs]]`` tables, dropping invalid entries."""
    pairs = []
    for entry in raw_pairs or []:
        from_region = coerce_region_id(entry.get("from"))
        to_region = coerce_region_id(entry.get("to"))
        if from_region is None or to_region is None:
            logger.warning(f"Skipping hot pair with invalid region ids: {entry}")
            continue
        if from_region == to_region:
            logger.warning(f"Skipping same-region hot pair {from_region}-{to_region}")
            continue
        pairs.append(HotPair(from_region, to_region))
    return tuple(pairs)


def _odbc_url(connection_string: str) -> str:
    return f"mssql+pyodbc:///?odbc_connect={quote_plus(connection_string)}"


def resolve_db_url(env: Mapping[str, str]) -> Optional[str]:
    """Work out the relational aggregate URL from the environment.

    1. DB_CONNECTION_STRING: a SQLAlchemy URL, or a raw ODBC string
    2. SQLAZURECONNSTR_* / SQLCONNSTR_*: hosting-platform connection strings,
       preferring the EveData / DefaultConnection names
    3. DB_SERVER + DB_NAME (+ DB_USER / DB_PASSWORD): discrete settings

    Returns None when nothing is configured; the index builder then goes
    straight to its static fallback.
    """
    direct = env.get("DB_CONNECTION_STRING")
    if direct:
        return direct if "://" in direct else _odbc_url(direct)

    candidates = {}
    for key, value in env.items():
        if not value:
            continue
        for prefix in ("SQLAZURECONNSTR_", "SQLCONNSTR_"):
            if key.startswith(prefix):
                candidates[key[len(prefix):].lower()] = value
    if candidates:
        for name in PREFERRED_CONNECTION_NAMES:
            if name in candidates:
                return _odbc_url(candidates[name])
        return _odbc_url(next(iter(candidates.values())))

    server = env.get("DB_SERVER")
    database = env.get("DB_NAME")
    if server and database:
        url = URL.create(
            "mssql+pyodbc",
            username=env.get("DB_USER"),
            password=env.get("DB_PASSWORD"),
            host=server,
            database=database,
            query={"driver": ODBC_DRIVER, "Encrypt": "yes"},
        )
        return url.render_as_string(hide_password=False)
    return None


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key}={raw!r}")
        return default


def load_pipeline_config(
    settings_path: Path = SETTINGS_PATH,
    env: Optional[Mapping[str, str]] = None,
) -> PipelineConfig:
    """Build the run configuration from defaults, settings.toml and environment."""
    env = os.environ if env is None else env
    settings = _load_settings(Path(settings_path))

    upstream = settings.get("upstream", {})
    archive = settings.get("archive", {})
    blob = settings.get("blob", {})
    static = settings.get("static_collections", {})
    precompute = settings.get("precompute", {})
    audit = settings.get("audit", {})
    env_section = settings.get("env", {})

    hub_regions = tuple(parse_region_ids(settings.get("hubs", {}).get("regions"))) or DEFAULT_HUB_REGIONS
    if env.get("HUB_REGIONS"):
        hub_regions = tuple(parse_region_ids(env["HUB_REGIONS"])) or hub_regions

    hot_pairs = DEFAULT_HOT_PAIRS
    if "hot_pairs" in settings:
        hot_pairs = _parse_hot_pairs(settings["hot_pairs"])

    route_cap = int(_env_float(env, "REGION_REGION_MAX", precompute.get("route_cap", 5000)))
    audit_concurrency = int(_env_float(env, "AUDIT_CONCURRENCY", audit.get("concurrency", 1)))

    defaults = PipelineConfig()
    return PipelineConfig(
        public_api_base=env.get("PUBLIC_API_BASE") or upstream.get("public_api_base", defaults.public_api_base),
        hub_regions=hub_regions,
        hot_pairs=hot_pairs,
        archive_raw_base=env.get("GH_RAW_BASE") or archive.get("raw_base", defaults.archive_raw_base),
        archive_owner=env.get("GITHUB_OWNER") or archive.get("owner", defaults.archive_owner),
        archive_repo=env.get("GITHUB_REPO") or archive.get("repo", defaults.archive_repo),
        archive_branch=env.get("GITHUB_BRANCH_DATA") or archive.get("branch", defaults.archive_branch),
        static_base_url=env.get("BLOB_PUBLIC_HTTP_BASE") or static.get("base_url", defaults.static_base_url),
        station_collection_path=static.get("stations", defaults.station_collection_path),
        structure_collection_path=static.get("structures", defaults.structure_collection_path),
        blob_bucket=(
            env.get("BLOB_BUCKET")
            or env.get("BLOB_PUBLIC_CONTAINER")
            or blob.get("bucket", defaults.blob_bucket)
        ),
        blob_endpoint_url=env.get("BLOB_ENDPOINT_URL") or blob.get("endpoint_url") or None,
        blob_region=env.get("BLOB_REGION") or blob.get("region", defaults.blob_region),
        blob_public_base=env.get("BLOB_PUBLIC_HTTP_BASE") or blob.get("public_base", defaults.blob_public_base),
        db_url=resolve_db_url(env),
        http_timeout=_env_float(env, "HTTP_TIMEOUT_SECONDS", upstream.get("http_timeout", defaults.http_timeout)),
        hauling_limit=int(upstream.get("hauling_limit", defaults.hauling_limit)),
        route_cap=max(MIN_ROUTE_CAP, route_cap),
        audit_concurrency=min(MAX_AUDIT_CONCURRENCY, max(1, audit_concurrency)),
        log_level=env.get("LOG_LEVEL") or env_section.get("log_level", defaults.log_level),
    )


class SettingsService:
    """Read-only accessor for raw settings.toml values.

    Settings are cached at module level after the first read.
    """

    def __init__(self, settings_path: str | Path = SETTINGS_PATH):
        self.settings = _load_settings(Path(settings_path))

    @property
    def settings_dict(self) -> dict:
        return self.settings

    @property
    def log_level(self) -> str:
        return self.settings.get("env", {}).get("log_level", "INFO")

    @property
    def env(self) -> str:
        return self.settings.get("env", {}).get("env", "prod")
