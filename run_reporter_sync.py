#!/usr/bin/env python3
"""
NIH RePORTER State Sync

Downloads award records for every U.S. state and project-end year chunk
into paginated JSON files. Pages already on disk are skipped, so an
interrupted or partially failed run is resumed by running it again.

Usage:
    # Full sync
    python run_reporter_sync.py --outdir data/reporter

    # One partition per invocation (re-run until everything converges)
    python run_reporter_sync.py --outdir data/reporter --first-partition-only
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from reporter_sync.core.domain_models import MAX_RESULT_WINDOW
from reporter_sync.ingest.reporter_client import ReporterClient
from reporter_sync.ingest.state_sync import (
    PartitionTooLargeError,
    StateSync,
    SyncConfig,
    SyncReport,
)
from reporter_sync.storage.page_store import PageStore


logger = logging.getLogger(__name__)


EXIT_OK = 0
EXIT_PAGE_FAILURES = 1
EXIT_FATAL = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='NIH RePORTER State Sync')
    parser.add_argument(
        '--outdir', '-o',
        type=Path,
        required=True,
        help='Directory to write {state}/{year}/{offset}-{end}.json files into'
    )
    parser.add_argument(
        '--start-year',
        type=int,
        default=2025,
        help='First project-end year; the fifth chunk after it is open-ended'
    )
    parser.add_argument(
        '--delay',
        type=float,
        default=0.1,
        help='Minimum seconds between page requests'
    )
    parser.add_argument(
        '--first-partition-only',
        action='store_true',
        help='Stop after the first state/year with any records'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging verbosity'
    )
    return parser.parse_args(argv)


def log_summary(report: SyncReport):
    logger.info("=" * 70)
    logger.info("SYNC COMPLETE" if not report.stopped_early else "SYNC STOPPED EARLY")
    logger.info("=" * 70)
    logger.info(f"Partitions probed: {len(report.partitions)}")
    logger.info(f"Empty partitions:  {report.empty_partitions}")
    logger.info(f"Pages written:     {report.pages_written}")
    logger.info(f"Pages skipped:     {report.pages_skipped}")
    logger.info(f"Pages failed:      {len(report.failed_files)}")
    logger.info(f"Pages on disk:     {report.pages_on_disk}")

    for path in report.failed_files:
        logger.info(f"  ❌ {path}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    config = SyncConfig(
        outdir=args.outdir,
        start_year=args.start_year,
        request_delay=args.delay,
        stop_after_first_partition=args.first_partition_only,
    )

    client = ReporterClient()
    sync = StateSync(client, PageStore(config.outdir), config)

    try:
        report = sync.run()
    except PartitionTooLargeError as e:
        logger.error(f"❌ {e}")
        logger.error(f"Partitions above {MAX_RESULT_WINDOW} records cannot be paged; aborting run")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"❌ Sync aborted: {type(e).__name__}: {e}")
        return EXIT_FATAL
    finally:
        client.close()

    log_summary(report)

    return EXIT_PAGE_FAILURES if report.failed_files else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
