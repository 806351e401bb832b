"""
Pagination and resume loop for syncing RePORTER awards to disk.

For every (state, year chunk) partition:
1. Probe with limit=0 to read the partition total
2. Skip empty partitions without touching the filesystem
3. Walk offsets in steps of the page limit, skipping pages already on disk
4. Fetch, write and throttle each missing page; a failed page is logged and
   left for the next run
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from tqdm import tqdm

from reporter_sync.core.domain_models import (
    MAX_PAGE_LIMIT,
    MAX_RESULT_WINDOW,
    US_STATES,
    PageRequest,
    SearchCriteria,
    year_chunks,
)
from reporter_sync.core.time_utils import Throttle
from reporter_sync.ingest.reporter_client import ReporterClient
from reporter_sync.storage.page_store import PageStore


logger = logging.getLogger(__name__)


class PartitionTooLargeError(RuntimeError):
    """Raised when a partition holds more records than offset paging can reach."""

    def __init__(self, criteria: SearchCriteria, total: int, max_total: int):
        super().__init__(
            f"State {criteria.state} ({criteria.chunk.year}) exceeds pagination limit, "
            f"got {total} (max {max_total})."
        )
        self.criteria = criteria
        self.total = total
        self.max_total = max_total


@dataclass
class SyncConfig:
    """Settings for one sync run."""
    outdir: Path
    states: Sequence[str] = US_STATES
    start_year: int = 2025
    chunk_count: int = 5
    page_limit: int = MAX_PAGE_LIMIT
    max_total: int = MAX_RESULT_WINDOW
    request_delay: float = 0.1

    # Stop the whole run after the first partition that has records
    stop_after_first_partition: bool = False


@dataclass
class PartitionResult:
    """Outcome of syncing one partition."""
    state: str
    year: int
    total: int = 0
    written: int = 0
    skipped: int = 0
    failed_files: List[str] = field(default_factory=list)
    pages_on_disk: int = 0

    @property
    def failed(self) -> int:
        return len(self.failed_files)


@dataclass
class SyncReport:
    """Aggregated outcome of a run."""
    partitions: List[PartitionResult] = field(default_factory=list)
    stopped_early: bool = False

    @property
    def empty_partitions(self) -> int:
        return sum(1 for p in self.partitions if p.total == 0)

    @property
    def pages_written(self) -> int:
        return sum(p.written for p in self.partitions)

    @property
    def pages_skipped(self) -> int:
        return sum(p.skipped for p in self.partitions)

    @property
    def pages_on_disk(self) -> int:
        return sum(p.pages_on_disk for p in self.partitions)

    @property
    def failed_files(self) -> List[str]:
        return [f for p in self.partitions for f in p.failed_files]


class StateSync:
    """
    Drive probe → paginate → persist for every partition.

    Usage:
        sync = StateSync(ReporterClient(), PageStore(outdir), SyncConfig(outdir))
        report = sync.run()
    """

    def __init__(
        self,
        client: ReporterClient,
        store: PageStore,
        config: SyncConfig,
        throttle: Optional[Throttle] = None,
    ):
        self.client = client
        self.store = store
        self.config = config
        self.throttle = throttle or Throttle(config.request_delay)
        self.chunks = year_chunks(config.start_year, config.chunk_count)

    def run(self, progress: bool = True) -> SyncReport:
        """
        Sync every partition in fixed order: states as configured, chunks by
        increasing year, pages by increasing offset.

        Raises:
            PartitionTooLargeError: A partition cannot be fully paged (fatal)
        """
        report = SyncReport()

        for state in tqdm(self.config.states, desc="States", disable=not progress):
            logger.info(f"Fetching data for state: {state}")

            for chunk in self.chunks:
                result = self.sync_partition(SearchCriteria(state=state, chunk=chunk))
                report.partitions.append(result)

                if result.total > 0 and self.config.stop_after_first_partition:
                    logger.info(
                        f"Stopping after first non-empty partition ({state} {chunk.year}); "
                        f"re-run to continue"
                    )
                    report.stopped_early = True
                    return report

        return report

    def sync_partition(self, criteria: SearchCriteria) -> PartitionResult:
        """
        Probe one partition and fetch whichever of its pages are missing.

        Probe failures propagate; page failures are logged and counted.
        """
        result = PartitionResult(state=criteria.state, year=criteria.chunk.year)

        # probes share the interval with page fetches
        self.throttle.wait()
        total = self.client.probe_total(criteria)
        result.total = total

        if total > self.config.max_total:
            raise PartitionTooLargeError(criteria, total, self.config.max_total)

        if total == 0:
            logger.info(f"No records found for {criteria.state} ({criteria.chunk.year})")
            return result

        logger.info(f"{criteria.state} {criteria.chunk.year}: {total} records")

        for request in PageRequest.pages(criteria, total, self.config.page_limit):
            target = self.store.path_for(request)

            if self.store.exists(target):
                logger.debug(f"Skipping existing {target}")
                result.skipped += 1
                continue

            if self._fetch_and_write(request, target):
                result.written += 1
            else:
                result.failed_files.append(str(target))

        result.pages_on_disk = len(self.store.list_pages(criteria.state, criteria.chunk.year))
        return result

    def _fetch_and_write(self, request: PageRequest, target: Path) -> bool:
        """Fetch one page and persist it. Returns False if anything failed."""
        self.throttle.wait()

        try:
            page = self.client.fetch_page(request)
            self.store.write(target, page.results)
        except Exception as e:
            logger.error(f"{type(e).__name__}: {e}")
            logger.error(f"❌ Failed to get {request.file_name} for {request.criteria.state}")
            return False

        logger.info(f"✅ Wrote {target}")
        self.throttle.mark()
        return True
