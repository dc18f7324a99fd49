"""Region Query Module Entry Point

This module serves as the command-line interface and main entry point for the
region query module.
"""

import argparse
import sys
from typing import Optional

from inspection.config import ConfigLoader
from inspection.exceptions import RQBaseException
from inspection.utils import setup_logging
from .processor import RegionQueryProcessor

DEFAULT_OUTPUT_PATH = "output.txt"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspection Region Query - Select inspection points with crop/and/or predicates"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--environment",
        choices=["development", "production"],
        default="development",
        help="Environment to run against (default: development)"
    )
    common.add_argument(
        "--config-dir",
        default=None,
        help="Directory containing environment_config.json (default: config/)"
    )
    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the configured logging level"
    )

    query_parser = subparsers.add_parser("query", parents=[common],
                                         help="Evaluate a query and write matching points")
    query_parser.add_argument(
        "--query",
        required=True,
        help="Path of the JSON query description"
    )
    query_parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_PATH,
        help=f"Path of the result file (default: {DEFAULT_OUTPUT_PATH})"
    )
    query_parser.add_argument(
        "--data-directory",
        default=None,
        help="Directory with points.txt, categories.txt and groups.txt for the memory store"
    )
    query_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Evaluate the query without writing the output file"
    )

    load_parser = subparsers.add_parser("load", parents=[common],
                                        help="Bulk-load inspection point files into PostgreSQL")
    load_parser.add_argument(
        "--data-directory",
        required=True,
        help="Directory with points.txt, categories.txt and groups.txt"
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the region query module.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parsed_args = build_parser().parse_args(args)
    config_loader = ConfigLoader(parsed_args.config_dir)

    try:
        logging_config = config_loader.get_section(parsed_args.environment, "logging")
    except RQBaseException as e:
        print(f"Error: configure stage failed: {e}", file=sys.stderr)
        return 1

    setup_logging(
        environment=parsed_args.environment,
        log_level=parsed_args.log_level or logging_config.get("level", "INFO"),
        log_dir=logging_config.get("log_dir")
    )

    processor = RegionQueryProcessor(
        config_loader,
        environment=parsed_args.environment,
        store_overrides={"data_directory": parsed_args.data_directory}
    )

    if parsed_args.command == "load":
        result = processor.load_data(parsed_args.data_directory)
    else:
        result = processor.process(parsed_args.query, parsed_args.output, parsed_args.dry_run)

    if not result.success:
        for error in result.errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
