"""
Schema and decoder for NIH RePORTER project search responses.

Converts a raw search response (parsed JSON) → SearchResponse with
flattened AwardRecords. Validation is strict: one bad field rejects the
whole page, nothing is coerced.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from reporter_sync.core.utils import is_http_url, parse_timestamp_maybe


logger = logging.getLogger(__name__)


class ResponseValidationError(ValueError):
    """Raised when a search response does not match the expected shape."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class SearchMeta(BaseModel):
    """Paging metadata returned with every search response."""
    model_config = ConfigDict(frozen=True)

    search_id: StrictStr
    total: StrictInt
    offset: StrictInt
    limit: StrictInt
    sort_field: StrictStr


class Organization(BaseModel):
    """Nested organization block; only lives long enough to be flattened."""
    model_config = ConfigDict(frozen=True)

    org_name: Optional[StrictStr]
    org_city: Optional[StrictStr]
    org_state: Optional[StrictStr]


class AwardRecord(BaseModel):
    """
    One funded project, with organization fields lifted to the top level.

    Nullable fields are still required keys in the response. Timestamps are
    kept as the server sent them once they pass the ISO 8601 check.
    """
    model_config = ConfigDict(frozen=True)

    appl_id: StrictInt
    fiscal_year: StrictInt
    project_num: StrictStr
    award_amount: Optional[Union[StrictInt, StrictFloat]]
    is_active: StrictBool
    contact_pi_name: Optional[StrictStr]
    budget_start: Optional[StrictStr]
    budget_end: Optional[StrictStr]
    project_title: StrictStr
    project_detail_url: StrictStr
    project_start_date: Optional[StrictStr]
    project_end_date: StrictStr
    date_added: StrictStr
    terms: Optional[StrictStr]
    abstract_text: Optional[StrictStr]
    pref_terms: Optional[StrictStr]

    # Flattened from `organization`
    org_name: Optional[StrictStr]
    org_city: Optional[StrictStr]
    org_state: Optional[StrictStr]

    @model_validator(mode="before")
    @classmethod
    def flatten_organization(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        if "organization" not in data:
            raise ValueError("organization is required")

        organization = Organization.model_validate(data["organization"])

        flat = {key: value for key, value in data.items() if key != "organization"}
        flat.update(organization.model_dump())
        return flat

    @field_validator(
        "budget_start",
        "budget_end",
        "project_start_date",
        "project_end_date",
        "date_added",
    )
    @classmethod
    def check_timestamp(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and parse_timestamp_maybe(v) is None:
            raise ValueError(f"not an ISO 8601 date-time: {v!r}")
        return v

    @field_validator("project_detail_url")
    @classmethod
    def check_url(cls, v: str) -> str:
        if not is_http_url(v):
            raise ValueError(f"not a URL: {v!r}")
        return v


class SearchResponse(BaseModel):
    """Decoded search response: paging meta plus the page of records."""
    model_config = ConfigDict(frozen=True)

    meta: SearchMeta
    results: List[AwardRecord]


def parse_search_response(payload: Any) -> SearchResponse:
    """
    Validate and decode a raw search response.

    Args:
        payload: Parsed JSON body from the search endpoint

    Returns:
        SearchResponse with flattened records

    Raises:
        ResponseValidationError: If any field is missing, mistyped or malformed
    """
    try:
        response = SearchResponse.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"Search response failed validation: {e.error_count()} error(s)")
        raise ResponseValidationError(
            f"Invalid search response: {e}",
            errors=e.errors(include_url=False),
        ) from e

    return response


def records_to_json(records: Sequence[AwardRecord]) -> str:
    """
    Serialize a page of records for storage.

    Produces a pretty-printed (2-space) JSON array. Keys follow the field
    order of AwardRecord, with org_name/org_city/org_state last.
    """
    return json.dumps(
        [record.model_dump() for record in records],
        indent=2,
        ensure_ascii=False,
    )
