"""
Domain models for the NIH RePORTER state sync.

These models describe *what* gets fetched: which state, which window of
project end dates, and which slice (offset/limit) of the result set.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple


# Hard ceilings imposed by the RePORTER search API
MAX_PAGE_LIMIT = 500
MAX_RESULT_WINDOW = 14999

DEFAULT_SORT_FIELD = "project_start_date"

US_STATES: Tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)


class PageLimitError(ValueError):
    """Raised when a page request falls outside what the API accepts."""


@dataclass(frozen=True)
class YearChunk:
    """
    Window of project end dates.

    A regular chunk covers one calendar year. The final chunk is open-ended
    and captures every project ending in `year` or later.
    """
    year: int
    is_final: bool = False

    @property
    def from_date(self) -> str:
        return f"{self.year}-01-01"

    @property
    def to_date(self) -> Optional[str]:
        if self.is_final:
            return None
        return f"{self.year}-12-31"


def year_chunks(start_year: int = 2025, count: int = 5) -> Tuple[YearChunk, ...]:
    """
    Build the ordered year chunks for a run.

    Args:
        start_year: First calendar year to cover
        count: Number of chunks; the last one is open-ended

    Returns:
        Tuple of YearChunk in increasing year order

    Examples:
        >>> [c.year for c in year_chunks(2025, 3)]
        [2025, 2026, 2027]
        >>> year_chunks(2025, 3)[-1].is_final
        True
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    return tuple(
        YearChunk(year=start_year + i, is_final=(i == count - 1))
        for i in range(count)
    )


@dataclass(frozen=True)
class SearchCriteria:
    """One partition: a single state within a single year chunk."""
    state: str
    chunk: YearChunk

    def __post_init__(self):
        if self.state not in US_STATES:
            raise ValueError(f"Unknown state code: {self.state!r}")

    def to_payload(self) -> Dict[str, Any]:
        """Criteria object as expected by the search endpoint."""
        project_end_date = {"from_date": self.chunk.from_date}
        if self.chunk.to_date is not None:
            project_end_date["to_date"] = self.chunk.to_date

        return {
            "project_end_date": project_end_date,
            "org_states": [self.state],
        }


@dataclass(frozen=True)
class PageRequest:
    """
    A bounded slice of a partition's result set.

    Validated on construction so an out-of-range request never reaches the
    network.
    """
    criteria: SearchCriteria
    offset: int
    limit: int

    def __post_init__(self):
        if self.limit > MAX_PAGE_LIMIT:
            raise PageLimitError(f"max limit is {MAX_PAGE_LIMIT}, got {self.limit}")
        if self.limit < 0:
            raise PageLimitError(f"limit must be non-negative, got {self.limit}")
        if self.offset < 0:
            raise PageLimitError(f"offset must be non-negative, got {self.offset}")

    @property
    def file_name(self) -> str:
        """Output file name for this page, e.g. '500-999.json'."""
        return f"{self.offset}-{self.offset + self.limit - 1}.json"

    @classmethod
    def probe(cls, criteria: SearchCriteria) -> "PageRequest":
        """Zero-limit request used only to read the partition total."""
        return cls(criteria=criteria, offset=0, limit=0)

    @classmethod
    def pages(
        cls,
        criteria: SearchCriteria,
        total: int,
        limit: int = MAX_PAGE_LIMIT,
    ) -> Iterator["PageRequest"]:
        """
        Yield page requests covering `total` records, offset ascending.

        The last page keeps the full limit, so its file name spans past
        `total` (e.g. 1000-1499.json for a total of 1200).
        """
        if limit < 1:
            raise PageLimitError(f"page limit must be positive, got {limit}")

        offset = 0
        while offset < total:
            yield cls(criteria=criteria, offset=offset, limit=limit)
            offset += limit
