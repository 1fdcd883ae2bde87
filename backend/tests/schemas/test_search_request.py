"""Search Request — boundary validation of the search query.

Invariants:
    - page >= 1, 1 <= pageSize <= 100; out-of-range values are rejected
    - Unknown filter fields and operators are rejected
    - Word-search and paragraph fields accept only the contains operator
    - Unknown sortBy values are accepted (resolved later)
    - canonical_payload is independent of input key order
"""

import pytest
from pydantic import ValidationError

from app.core.domain_types import FilterField, FilterOperator
from app.schemas.search import FieldFilter, SearchRequest


def test_defaults():
    req = SearchRequest()
    assert req.page == 1
    assert req.page_size == 20
    assert req.sort_by == "srNo"
    assert req.filters == []


@pytest.mark.parametrize("body", [
    {"page": 0},
    {"page": -3},
    {"pageSize": 0},
    {"pageSize": 101},
])
def test_out_of_range_pagination_rejected(body):
    with pytest.raises(ValidationError):
        SearchRequest.model_validate(body)


def test_page_size_bounds_accepted():
    assert SearchRequest.model_validate({"pageSize": 1}).page_size == 1
    assert SearchRequest.model_validate({"pageSize": 100}).page_size == 100


def test_unknown_filter_field_rejected():
    with pytest.raises(ValidationError):
        SearchRequest.model_validate({"filters": [{"field": "summary", "value": "x"}]})


def test_unknown_operator_rejected():
    with pytest.raises(ValidationError):
        FieldFilter.model_validate({"field": "title", "operator": "regex", "value": "x"})


def test_camel_case_filter_parsed():
    f = FieldFilter.model_validate(
        {"field": "footNote", "operator": "contains", "value": 42, "caseSensitive": True},
    )
    assert f.field == FilterField.FOOT_NOTE
    assert f.operator == FilterOperator.CONTAINS
    assert f.text_value == "42"
    assert f.case_sensitive is True


@pytest.mark.parametrize("field", ["title", "remark", "footNote", "relevantParagraph"])
def test_word_fields_reject_non_contains_operator(field):
    with pytest.raises(ValidationError, match="only support the contains operator"):
        FieldFilter.model_validate({"field": field, "operator": "equals", "value": "x"})


@pytest.mark.parametrize("operator", ["notEquals", "startsWith", "gt", "lte"])
def test_removed_comparison_operators_rejected(operator):
    with pytest.raises(ValidationError):
        FieldFilter.model_validate({"field": "title", "operator": operator, "value": "x"})


def test_information_rating_takes_either_operator():
    for operator in ("contains", "equals"):
        f = FieldFilter.model_validate(
            {"field": "informationRating", "operator": operator, "value": "High"},
        )
        assert f.operator == FilterOperator(operator)


def test_null_value_reads_as_empty_text():
    f = FieldFilter.model_validate({"field": "informationRating", "value": None})
    assert f.text_value == ""


def test_unknown_sort_by_accepted():
    assert SearchRequest.model_validate({"sortBy": "bogus"}).sort_by == "bogus"


def test_global_search_stripped():
    assert SearchRequest.model_validate({"globalSearch": "  heat  "}).global_search == "heat"


def test_canonical_payload_independent_of_key_order():
    a = SearchRequest.model_validate(
        {"page": 2, "globalSearch": "x", "filters": [{"field": "title", "value": "y"}]},
    )
    b = SearchRequest.model_validate(
        {"filters": [{"value": "y", "field": "title"}], "globalSearch": "x", "page": 2},
    )
    assert a.canonical_payload() == b.canonical_payload()
    assert "pageSize" in a.canonical_payload()
