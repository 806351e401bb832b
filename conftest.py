"""
Shared pytest fixtures: realistic RePORTER payloads and a scripted client.
"""

from typing import Dict, List, Optional, Tuple

import pytest

from reporter_sync.core.domain_models import PageRequest, SearchCriteria
from reporter_sync.normalize.reporter import SearchResponse, parse_search_response


def award_payload(appl_id: int = 11111111, **overrides) -> Dict:
    """One project as the search endpoint returns it (nested organization)."""
    payload = {
        "appl_id": appl_id,
        "subproject_id": None,
        "fiscal_year": 2025,
        "project_num": f"5R01CA{str(appl_id)[-6:]:0>6}-03",
        "award_amount": 412350,
        "is_active": True,
        "contact_pi_name": "DOE, JANE",
        "budget_start": "2025-04-01T00:00:00Z",
        "budget_end": "2026-03-31T00:00:00Z",
        "project_title": "Tumor microenvironment signalling in pancreatic cancer",
        "project_detail_url": f"https://reporter.nih.gov/project-details/{appl_id}",
        "project_start_date": "2023-04-01T00:00:00Z",
        "project_end_date": "2028-03-31T00:00:00Z",
        "date_added": "2025-03-15T00:00:00Z",
        "organization": {
            "org_name": "UNIVERSITY OF CALIFORNIA, SAN DIEGO",
            "org_city": "LA JOLLA",
            "org_state": "CA",
            "org_country": "UNITED STATES",
        },
        "terms": "<><>Cancer<><>Pancreas<><>",
        "abstract_text": "Pancreatic ductal adenocarcinoma remains lethal.",
        "pref_terms": "Cancer;Pancreas",
    }
    payload.update(overrides)
    return payload


def search_payload(results: List[Dict], total: int, offset: int = 0, limit: int = 500) -> Dict:
    return {
        "meta": {
            "search_id": "xYz123AbC",
            "total": total,
            "offset": offset,
            "limit": limit,
            "sort_field": "project_start_date",
            "sort_order": "asc",
        },
        "results": results,
    }


class ScriptedClient:
    """
    Stand-in for ReporterClient that serves canned totals per partition.

    Pages are generated to match what the real API would return: at most
    `limit` records, fewer on the last page.
    """

    def __init__(self, totals: Optional[Dict[Tuple[str, int], int]] = None,
                 failing_offsets: Optional[Dict[Tuple[str, int], List[int]]] = None):
        self.totals = totals or {}
        self.failing_offsets = failing_offsets or {}
        self.probes: List[SearchCriteria] = []
        self.fetches: List[PageRequest] = []

    def _key(self, criteria: SearchCriteria) -> Tuple[str, int]:
        return (criteria.state, criteria.chunk.year)

    def probe_total(self, criteria: SearchCriteria) -> int:
        self.probes.append(criteria)
        return self.totals.get(self._key(criteria), 0)

    def fetch_page(self, request: PageRequest) -> SearchResponse:
        self.fetches.append(request)
        key = self._key(request.criteria)

        if request.offset in self.failing_offsets.get(key, []):
            raise ConnectionError(f"connection reset at offset {request.offset}")

        total = self.totals.get(key, 0)
        count = max(0, min(request.limit, total - request.offset))
        results = [award_payload(appl_id=10000000 + request.offset + i) for i in range(count)]
        return parse_search_response(
            search_payload(results, total, offset=request.offset, limit=request.limit)
        )


@pytest.fixture
def make_award():
    return award_payload


@pytest.fixture
def make_search():
    return search_payload


@pytest.fixture
def scripted_client():
    return ScriptedClient
