"""
Tests for search response validation and organization flattening.
"""

import json

import pytest

from reporter_sync.normalize.reporter import (
    AwardRecord,
    ResponseValidationError,
    parse_search_response,
    records_to_json,
)


EXPECTED_KEYS = [
    "appl_id", "fiscal_year", "project_num", "award_amount", "is_active",
    "contact_pi_name", "budget_start", "budget_end", "project_title",
    "project_detail_url", "project_start_date", "project_end_date",
    "date_added", "terms", "abstract_text", "pref_terms",
    "org_name", "org_city", "org_state",
]


def test_valid_response_decodes(make_award, make_search):
    response = parse_search_response(make_search([make_award(), make_award(22222222)], total=2))

    assert response.meta.total == 2
    assert response.meta.sort_field == "project_start_date"
    assert [r.appl_id for r in response.results] == [11111111, 22222222]


def test_organization_is_flattened(make_award, make_search):
    record = parse_search_response(make_search([make_award()], total=1)).results[0]
    dumped = record.model_dump()

    assert "organization" not in dumped
    assert dumped["org_name"] == "UNIVERSITY OF CALIFORNIA, SAN DIEGO"
    assert dumped["org_city"] == "LA JOLLA"
    assert dumped["org_state"] == "CA"
    assert list(dumped) == EXPECTED_KEYS


def test_unknown_keys_are_dropped(make_award, make_search):
    record = parse_search_response(make_search([make_award()], total=1)).results[0]

    assert "subproject_id" not in record.model_dump()
    assert "org_country" not in record.model_dump()


def test_nullable_fields_accept_null(make_award, make_search):
    award = make_award(
        award_amount=None,
        contact_pi_name=None,
        budget_start=None,
        budget_end=None,
        project_start_date=None,
        terms=None,
        abstract_text=None,
        pref_terms=None,
        organization={"org_name": None, "org_city": None, "org_state": None},
    )
    record = parse_search_response(make_search([award], total=1)).results[0]

    assert record.award_amount is None
    assert record.org_name is None


def test_fractional_award_amount_kept(make_award):
    record = AwardRecord.model_validate(make_award(award_amount=1250.5))
    assert record.award_amount == 1250.5


def test_empty_probe_response(make_search):
    response = parse_search_response(make_search([], total=1200, limit=0))

    assert response.meta.total == 1200
    assert response.results == []


@pytest.mark.parametrize("field", ["appl_id", "project_end_date", "organization", "terms"])
def test_missing_field_fails_whole_page(make_award, make_search, field):
    bad = make_award()
    del bad[field]

    with pytest.raises(ResponseValidationError):
        parse_search_response(make_search([make_award(), bad], total=2))


def test_missing_organization_subfield_fails(make_award, make_search):
    award = make_award(organization={"org_name": "X", "org_city": "Y"})

    with pytest.raises(ResponseValidationError):
        parse_search_response(make_search([award], total=1))


@pytest.mark.parametrize("overrides", [
    {"appl_id": "11111111"},
    {"fiscal_year": 2025.0},
    {"is_active": 1},
    {"project_title": None},
    {"award_amount": "412350"},
])
def test_mistyped_field_is_not_coerced(make_award, make_search, overrides):
    with pytest.raises(ResponseValidationError):
        parse_search_response(make_search([make_award(**overrides)], total=1))


@pytest.mark.parametrize("value", [
    "2028-03-31",
    "2028-03-31T00:00:00",
    "31/03/2028",
    "not a date",
    "2028-03-31T00Z",
    "2028-03-31T00:00Z",
    "20280331T000000Z",
    "2028-02-30T00:00:00Z",
    " 2028-03-31T00:00:00Z",
])
def test_malformed_timestamp_rejected(make_award, make_search, value):
    with pytest.raises(ResponseValidationError):
        parse_search_response(make_search([make_award(project_end_date=value)], total=1))


def test_offset_timestamp_rejected(make_award, make_search):
    with pytest.raises(ResponseValidationError):
        parse_search_response(make_search([make_award(date_added="2025-03-15T08:00:00-05:00")], total=1))


def test_fractional_seconds_accepted(make_award):
    record = AwardRecord.model_validate(make_award(date_added="2025-03-15T08:00:00.123Z"))
    assert record.date_added == "2025-03-15T08:00:00.123Z"


def test_string_appl_id_not_coerced(make_award, make_search):
    award = make_award()
    award["appl_id"] = "11111111"

    with pytest.raises(ResponseValidationError) as exc_info:
        parse_search_response(make_search([award], total=1))

    assert exc_info.value.errors[0]["loc"][-1] == "appl_id"


def test_non_url_detail_rejected(make_award, make_search):
    with pytest.raises(ResponseValidationError) as exc_info:
        parse_search_response(make_search([make_award(project_detail_url="project 11111111")], total=1))

    assert exc_info.value.errors
    assert exc_info.value.errors[0]["loc"][-1] == "project_detail_url"


def test_missing_meta_rejected(make_award):
    with pytest.raises(ResponseValidationError):
        parse_search_response({"results": [make_award()]})


def test_records_are_immutable(make_award):
    record = AwardRecord.model_validate(make_award())

    with pytest.raises(Exception):
        record.project_title = "changed"


def test_records_to_json_pretty_prints(make_award):
    record = AwardRecord.model_validate(make_award(contact_pi_name="MÜLLER, ANNA"))
    text = records_to_json([record])

    assert text.startswith('[\n  {\n    "appl_id": 11111111,')
    assert "MÜLLER, ANNA" in text
    assert json.loads(text)[0]["org_state"] == "CA"


def test_records_to_json_empty_page():
    assert records_to_json([]) == "[]"
