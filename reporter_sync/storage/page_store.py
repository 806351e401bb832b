"""
Flat-file storage for fetched pages.

Layout:
    {root}/{state}/{year}/{offset}-{offset+limit-1}.json

A page file is written once and never updated. Its existence is the resume
marker; there is no separate manifest.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Sequence, Union

from reporter_sync.core.domain_models import PageRequest
from reporter_sync.normalize.reporter import AwardRecord, records_to_json


PAGE_FILE_RE = re.compile(r"^(\d+)-(\d+)\.json\Z")


logger = logging.getLogger(__name__)


class PageStore:
    """
    Persistent storage for pages of award records.

    Usage:
        store = PageStore("data/reporter")
        path = store.path_for(request)
        if not store.exists(path):
            store.write(path, records)
    """

    def __init__(self, root: Union[str, Path]):
        """
        Initialize page store.

        Args:
            root: Output directory; created lazily on first write
        """
        self.root = Path(root)

    def partition_dir(self, state: str, year: int) -> Path:
        return self.root / state / str(year)

    def path_for(self, request: PageRequest) -> Path:
        """Target file for a page request."""
        criteria = request.criteria
        return self.partition_dir(criteria.state, criteria.chunk.year) / request.file_name

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def write(self, path: Path, records: Sequence[AwardRecord]) -> Path:
        """
        Write a page of records.

        The content goes to a temporary sibling first and is renamed into
        place, so a crash mid-write never leaves a file that looks complete.

        Args:
            path: Target file (parent directories are created as needed)
            records: Decoded records for the page

        Returns:
            The written path
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(records_to_json(records))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Stored {len(records)} records: {path}")
        return path

    def list_pages(self, state: str, year: int) -> List[str]:
        """
        List completed page files for a partition, ordered by offset.

        Files not named like a page (e.g. notes.json) are ignored.

        Returns:
            File names like ['0-499.json', '500-999.json']
        """
        directory = self.partition_dir(state, year)
        if not directory.is_dir():
            return []

        pages = []
        for path in directory.glob("*.json"):
            match = PAGE_FILE_RE.match(path.name)
            if match:
                pages.append((int(match.group(1)), path.name))

        return [name for _, name in sorted(pages)]
