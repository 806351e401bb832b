"""
Client for the NIH RePORTER project search API.

One call to `fetch_page` is exactly one POST; retry and skip policy lives
with the caller.
"""

import logging
from typing import Any, Dict, Optional

import requests

from reporter_sync.core.domain_models import (
    DEFAULT_SORT_FIELD,
    PageRequest,
    SearchCriteria,
)
from reporter_sync.normalize.reporter import SearchResponse, parse_search_response


logger = logging.getLogger(__name__)


REPORTER_SEARCH_URL = "https://api.reporter.nih.gov/v2/projects/search"

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "User-Agent": "reporter-state-sync/0.1 (+https://reporter.nih.gov)",
}


def build_search_body(request: PageRequest, sort_field: str = DEFAULT_SORT_FIELD) -> Dict[str, Any]:
    """
    Build the JSON body for one search call.

    Examples:
        >>> from reporter_sync.core.domain_models import SearchCriteria, YearChunk
        >>> req = PageRequest(SearchCriteria("WY", YearChunk(2025)), 0, 0)
        >>> build_search_body(req)["criteria"]["org_states"]
        ['WY']
    """
    return {
        "criteria": request.criteria.to_payload(),
        "offset": request.offset,
        "limit": request.limit,
        "sort_field": sort_field,
    }


class ReporterClient:
    """
    Fetch pages of project search results.

    Usage:
        client = ReporterClient()
        total = client.probe_total(criteria)
        page = client.fetch_page(PageRequest(criteria, offset=0, limit=500))
    """

    def __init__(
        self,
        endpoint: str = REPORTER_SEARCH_URL,
        timeout: Optional[float] = 60,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize client.

        Args:
            endpoint: Search endpoint URL
            timeout: Per-request timeout in seconds (None waits indefinitely)
            session: Optional pre-configured requests session
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    def fetch_page(self, request: PageRequest) -> SearchResponse:
        """
        Fetch and decode one page.

        Raises:
            requests.RequestException: On network failure or non-2xx status
            ResponseValidationError: If the body does not match the schema
        """
        body = build_search_body(request)

        logger.debug(
            f"POST {self.endpoint} state={request.criteria.state} "
            f"year={request.criteria.chunk.year} offset={request.offset} limit={request.limit}"
        )

        response = self.session.post(self.endpoint, json=body, timeout=self.timeout)
        response.raise_for_status()

        return parse_search_response(response.json())

    def probe_total(self, criteria: SearchCriteria) -> int:
        """Return the number of records matching `criteria` without fetching any."""
        page = self.fetch_page(PageRequest.probe(criteria))
        return page.meta.total

    def close(self):
        self.session.close()
