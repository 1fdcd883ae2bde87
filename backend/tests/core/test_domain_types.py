"""Domain Types — verifies closed vocabularies used by search.

Tests:
    - Enum values are the camelCase wire names
    - Word-search fields exclude informationRating and relevantParagraph
    - Sort allow-list and default
"""

from app.core.domain_types import (
    DEFAULT_SORT_FIELD, PARAGRAPH_LANGUAGES, WORD_SEARCH_FIELDS,
    FilterField, FilterOperator, MatchType, SortField, SubjectTextOperator,
)


def test_filter_fields_use_wire_names():
    assert {f.value for f in FilterField} == {
        "title", "informationRating", "remark", "footNote", "relevantParagraph",
    }


def test_word_search_fields():
    assert WORD_SEARCH_FIELDS == {
        FilterField.TITLE, FilterField.REMARK, FilterField.FOOT_NOTE,
    }


def test_operators():
    assert {o.value for o in FilterOperator} == {"contains", "equals"}
    assert SubjectTextOperator("word") == SubjectTextOperator.WORD


def test_sort_allow_list_and_default():
    assert {s.value for s in SortField} == {
        "srNo", "title", "createdAt", "updatedAt", "pageNo",
    }
    assert DEFAULT_SORT_FIELD == SortField.SR_NO


def test_match_types_and_languages():
    assert MatchType("AND") == MatchType.AND
    assert PARAGRAPH_LANGUAGES == ("english", "hindi", "gujarati", "sanskrit")
