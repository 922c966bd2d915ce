"""
Command-line entry point.

    listing-harvester scrape  [--output NAME]
    listing-harvester process INPUT [--output NAME]
    listing-harvester serve   [--host HOST] [--port PORT]
"""

import argparse
import asyncio
import json
import os
import sys

from pydantic import ValidationError

from .errors import ScrapeError
from .listings import flatten_payload, listings_frame
from .logging_config import configure_logging, get_logger
from .server import serve
from .service import FetchService
from .settings import HarvestConfig, load_harvest_config
from .storage import load_json, save_df, save_json

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="listing-harvester",
        description="Capture the listings search API payload from the map page.",
    )
    parser.add_argument("--config", help="Path to harvest_config.yaml")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--console-logs", action="store_true", help="Human-readable logs instead of JSON")

    sub = parser.add_subparsers(dest="command", required=True)

    scrape = sub.add_parser("scrape", help="Run one harvest and save the raw payload")
    scrape.add_argument("--output", default="realtor_listings", help="Output name under the results dir")

    process = sub.add_parser("process", help="Flatten a saved payload into a report")
    process.add_argument("input", help="Path to a saved raw payload")
    process.add_argument("--output", default="listing_report", help="Output name under the results dir")

    srv = sub.add_parser("serve", help="Expose /run-scrape and /health over HTTP")
    srv.add_argument("--host")
    srv.add_argument("--port", type=int)

    return parser


async def run_scrape(config: HarvestConfig, output: str) -> int:
    try:
        outcome = await FetchService.from_config(config).fetch()
    except ScrapeError as e:
        logger.error("scrape_failed", kind=e.kind, error=str(e))
        return 1

    if not outcome.ok:
        return 1

    save_json(outcome.payload, output, results_dir=config.output_path)
    results = outcome.payload.get("Results") if isinstance(outcome.payload, dict) else None
    logger.info("listings_found", count=len(results or []))
    return 0


def run_process(config: HarvestConfig, input_path: str, output: str) -> int:
    try:
        payload = load_json(input_path)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("payload_unreadable", path=input_path, error=str(e))
        return 1

    if not isinstance(payload, dict) or not isinstance(payload.get("Results"), list):
        logger.error("payload_missing_results", path=input_path)
        return 1

    records = flatten_payload(payload, base_url=config.listing_base_url)
    if not records:
        logger.info("no_listings", path=input_path)
        return 0

    save_json([r.to_dict() for r in records], output, results_dir=config.output_path)
    save_df(listings_frame(records), output, results_dir=config.output_path)
    logger.info("listings_processed", count=len(records))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, json_format=not args.console_logs)
    try:
        config = load_harvest_config(args.config)
    except ValidationError as e:
        logger.error("config_invalid", path=args.config, error=str(e))
        return 2

    if args.command == "scrape":
        return asyncio.run(run_scrape(config, args.output))
    if args.command == "process":
        return run_process(config, args.input, args.output)

    port = args.port or int(os.environ.get("PORT", config.server_port))
    asyncio.run(serve(config, host=args.host, port=port))
    return 0


if __name__ == "__main__":
    sys.exit(main())
