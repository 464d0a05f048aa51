"""Command line entry points for the scheduled snapshot jobs.

Usage:
    snapshots warm-hauling            # refresh hot hauling pairs
    snapshots regions-with-markets    # rebuild the regions-with-markets index
    snapshots health                  # audit archived hub snapshots
    snapshots health --regions 10000002,10000043
    snapshots precompute-routes       # publish hub-to-hub routes
    snapshots log-level DEBUG         # set log level in settings.toml

Each invocation is one run: configuration is read once at start and nothing
is shared with other runs. Publish failures exit 1 so the scheduler records
the run as failed.
"""

import argparse
import json
import logging
import re
import sys
from time import perf_counter

from settings_service import SETTINGS_PATH, SettingsService, clear_settings_cache, load_pipeline_config

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _build_publisher(config):
    from config import BlobStoreConfig
    from services.blob_publisher import BlobPublisher

    return BlobPublisher(BlobStoreConfig.from_pipeline_config(config))


def _run_job(name: str, job) -> int:
    """Run a publishing job, turning fatal errors into exit code 1."""
    from domain.errors import SnapshotPipelineError

    t0 = perf_counter()
    try:
        result = job()
    except SnapshotPipelineError as e:
        elapsed = round((perf_counter() - t0) * 1000)
        print(f"{name} failed ({elapsed} ms): {e}")
        return 1
    elapsed = round((perf_counter() - t0) * 1000)
    print(f"{name} ok ({elapsed} ms): {result}")
    return 0


def cmd_warm_hauling(args: argparse.Namespace) -> int:
    from services.warm_set_populator import create_warm_set_populator

    config = load_pipeline_config()
    populator = create_warm_set_populator(config, _build_publisher(config))
    return _run_job("warm-hauling", lambda: populator.populate(config.hot_pairs))


def cmd_regions_with_markets(args: argparse.Namespace) -> int:
    from config import DatabaseConfig
    from services.region_index_builder import create_region_index_builder

    config = load_pipeline_config()
    db = DatabaseConfig.from_pipeline_config(config)
    builder = create_region_index_builder(config, _build_publisher(config), db=db)

    def _job():
        index, url = builder.run()
        return f"{len(index)} regions from {index.source} -> {url}"

    try:
        return _run_job("regions-with-markets", _job)
    finally:
        db.dispose()


def cmd_health(args: argparse.Namespace) -> int:
    """Print the audit report as JSON. Always exits 0: the report is best effort."""
    from domain.converters import parse_region_ids
    from services.health_auditor import create_health_auditor

    config = load_pipeline_config()
    auditor = create_health_auditor(config)

    targets = parse_region_ids(args.regions) if args.regions else []
    # An empty or fully invalid --regions falls back to the hub list
    report = auditor.audit(targets or None)
    print(json.dumps(report.to_dict(), indent=2))
    return 0


def cmd_precompute_routes(args: argparse.Namespace) -> int:
    from services.route_precompute import create_route_precomputer

    config = load_pipeline_config()
    precomputer = create_route_precomputer(config, _build_publisher(config))
    return _run_job("precompute-routes", lambda: precomputer.run(config.hub_regions))


def cmd_log_level(args: argparse.Namespace) -> int:
    """Get or set the log level in settings.toml."""
    current = SettingsService(SETTINGS_PATH).log_level

    if args.level is None:
        print(current)
        return 0

    level = args.level.upper()
    if level not in VALID_LOG_LEVELS:
        print(f"invalid level: {args.level} (expected one of {', '.join(VALID_LOG_LEVELS)})")
        return 1

    if level == current:
        print(f"already {level}")
        return 0

    if not SETTINGS_PATH.exists():
        print(f"no settings file at {SETTINGS_PATH}")
        return 1

    content = SETTINGS_PATH.read_text()
    updated = re.sub(
        r'(log_level\s*=\s*)"[^"]*"',
        rf'\1"{level}"',
        content,
    )
    SETTINGS_PATH.write_text(updated)
    clear_settings_cache()
    print(f"{current} → {level}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snapshots", description="EVE market snapshot jobs")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("warm-hauling", help="Refresh the hot hauling pair warm set")
    sub.add_parser("regions-with-markets", help="Rebuild the regions-with-markets index")

    health_parser = sub.add_parser("health", help="Audit archived region snapshots")
    health_parser.add_argument(
        "--regions", default=None, help="Comma separated region ids (default: hub regions)"
    )

    sub.add_parser("precompute-routes", help="Publish hub-to-hub routes from archived snapshots")

    ll_parser = sub.add_parser("log-level", help="Get or set the log level in settings.toml")
    ll_parser.add_argument("level", nargs="?", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    return parser


COMMANDS = {
    "warm-hauling": cmd_warm_hauling,
    "regions-with-markets": cmd_regions_with_markets,
    "health": cmd_health,
    "precompute-routes": cmd_precompute_routes,
    "log-level": cmd_log_level,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        # Suppress INFO logs before service imports set up handlers
        logging.disable(logging.INFO)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
