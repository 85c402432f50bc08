# cli.py

"""Command-line interface for District Stats."""

import argparse
import json
import logging
import sys

from .config import DEFAULT_THRESHOLD, DEFAULT_WAIT, config_from_env
from .exceptions import StatsError
from .stats import Stats, StatsResult, missing_nodes
from .utils import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CAPACITY_ALERT = 2

def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Report gear capacity and usage by node, district and profile"
    )
    parser.add_argument(
        "--broker-url",
        help="Broker REST URL (default: $DISTRICT_STATS_BROKER_URL)"
    )
    parser.add_argument(
        "--wait", "-w",
        type=float,
        help=f"Seconds to wait for node facts (default: {DEFAULT_WAIT})"
    )
    parser.add_argument(
        "--db",
        action="store_true",
        help="Also count applications, gears and cartridges in the broker's records"
    )
    parser.add_argument(
        "--profile", "-p",
        help="Profile to check against the threshold"
    )
    parser.add_argument(
        "--threshold", "-t",
        type=float,
        help=f"Active gear usage percentage that raises a capacity alert (default: {DEFAULT_THRESHOLD})"
    )
    parser.add_argument(
        "--level", "-l",
        choices=["profile", "district", "node"],
        default="profile",
        help="Most detailed level to show in text output"
    )
    parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    return parser.parse_args(argv)

def print_text(result: StatsResult, level: str) -> None:
    """Print a plain text report, one block per profile."""
    for profile, summary in sorted(result.profile_summaries.items()):
        print(f"Profile '{profile}': {summary.district_count} districts, "
              f"{summary.nodes_count} nodes ({summary.nodes_active} active)")
        print(f"  Gears: {summary.total_gears} total, {summary.total_active_gears} active, "
              f"{summary.effective_available_gears} effectively available")
        print(f"  Active usage: avg {summary.avg_active_usage_pct:.1f}% "
              f"(min {summary.lowest_active_usage_pct:.1f}%, max {summary.highest_active_usage_pct:.1f}%)")
        if summary.total_db_gears is not None:
            print(f"  Records: {summary.total_db_apps} applications, {summary.total_db_gears} gears")
        if level == "profile":
            continue

        for district in sorted(summary.districts, key=lambda d: d.name):
            print(f"  District '{district.name}' ({district.uuid}): "
                  f"{district.nodes_count} nodes, {district.total_active_gears} active gears, "
                  f"{district.effective_available_gears} available, "
                  f"avg {district.avg_active_usage_pct:.1f}%")
            if level != "node":
                continue
            for node in sorted(district.node_entries, key=lambda n: n.name):
                print(f"    Node {node.name}: {node.active_gears}/{node.max_active_gears} active "
                      f"({node.gears_active_usage_pct:.1f}%), {node.total_gears} total")

    missing = missing_nodes(result)
    if missing:
        print(f"WARNING: {len(missing)} nodes did not respond: {', '.join(missing)}")

    if result.count_all is not None:
        print(f"Records: {result.count_all.users} users, {result.count_all.apps} applications, "
              f"{result.count_all.gears} gears")
        for name, count in result.count_all.cartridges_short.most_common():
            print(f"  {name}: {count}")

def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = config_from_env(
            broker_url=args.broker_url,
            wait=args.wait,
            db_stats=args.db or None,
            profile=args.profile,
            threshold=args.threshold,
        )
        stats = Stats(config)
        result = stats.gather_statistics()

        if args.format == "json":
            print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
        else:
            print_text(result, args.level)

        if config.profile:
            alert = stats.check_capacity(result)
            if alert is not None:
                return EXIT_CAPACITY_ALERT
        return EXIT_OK

    except StatsError as e:
        logger.error(f"Stats error: {e}")
        return EXIT_ERROR
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return EXIT_ERROR

if __name__ == "__main__":
    sys.exit(main())
