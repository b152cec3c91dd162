"""
Script to build the snapshot of one monthly price period
"""

import argparse
import asyncio
import sys
import logging
from typing import List, Optional
from core.config import settings
from core.exceptions import ETLException
from core.logging import setup_logging
from ingestion.periods import available_periods, select_period
from ingestion.runner import PipelineRunner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Download price datasets and build a queryable snapshot for one period"
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--period",
        help="Period token (YYYY-MM) or explicit revision label to process"
    )
    target.add_argument(
        "--index",
        type=int,
        default=-1,
        help="Position in the list of available periods (default: -1, the latest)"
    )
    parser.add_argument(
        "--list-periods",
        action="store_true",
        help="Print the available periods with their index and exit"
    )
    return parser


async def run_etl(period: str) -> dict:
    """Run the pipeline for one period"""
    runner = PipelineRunner()
    result = await runner.run(period)
    logger.info(
        f"Snapshot completed for {result['period']}: "
        f"Loaded={result['rows_loaded']}, "
        f"Latest prices={result['latest_prices']}, "
        f"Archive={result['archive_path']}"
    )
    return result


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        periods = available_periods()

        if args.list_periods:
            for index, period in enumerate(periods):
                print(f"{index:>4}  {period}")
            return 0

        period = args.period or select_period(periods, args.index)
        logger.info(f"Selected period {period} (output: {settings.OUTPUT_DIR})")
        asyncio.run(run_etl(period))
        return 0

    except ETLException as e:
        logger.error(f"Snapshot pipeline error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
