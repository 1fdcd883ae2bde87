"""Search Terms — word splitting, subject filter resolution, paragraph matching.

Tests:
    - split_words drops empty fragments from any whitespace
    - Subject mode/match type defaults (exact→OR, text→AND)
    - searchTextFilters takes precedence over searchTexts/searchText
    - paragraph_matches: AND across words, OR across languages
"""

from app.core.domain_types import MatchType, SubjectSearchMode, SubjectTextOperator
from app.core.search_terms import (
    SubjectTextEntry,
    paragraph_matches,
    paragraph_values,
    resolve_match_type,
    resolve_subject_mode,
    resolve_subject_text_entries,
    split_words,
)
from app.schemas.search import SubjectFilter


def test_split_words_handles_mixed_whitespace():
    assert split_words("  heat\tenergy \n flow ") == ["heat", "energy", "flow"]
    assert split_words("") == []
    assert split_words(None) == []


def test_mode_defaults_to_exact_without_text():
    assert resolve_subject_mode(SubjectFilter()) == SubjectSearchMode.EXACT
    assert resolve_subject_mode(SubjectFilter(search_text="  ")) == SubjectSearchMode.EXACT


def test_mode_becomes_text_when_text_present():
    assert resolve_subject_mode(SubjectFilter(search_texts=["phys"])) == SubjectSearchMode.TEXT


def test_explicit_mode_wins():
    f = SubjectFilter(mode=SubjectSearchMode.EXACT, search_text="phys")
    assert resolve_subject_mode(f) == SubjectSearchMode.EXACT


def test_match_type_defaults_per_mode():
    f = SubjectFilter()
    assert resolve_match_type(f, SubjectSearchMode.EXACT) == MatchType.OR
    assert resolve_match_type(f, SubjectSearchMode.TEXT) == MatchType.AND
    f = SubjectFilter(match_type=MatchType.AND)
    assert resolve_match_type(f, SubjectSearchMode.EXACT) == MatchType.AND


def test_text_entries_from_texts_and_text_share_base_operator():
    f = SubjectFilter(
        search_texts=["alpha", " ", "beta"], search_text="gamma",
        operator=SubjectTextOperator.STARTS_WITH,
    )
    assert resolve_subject_text_entries(f) == [
        SubjectTextEntry("alpha", SubjectTextOperator.STARTS_WITH),
        SubjectTextEntry("beta", SubjectTextOperator.STARTS_WITH),
        SubjectTextEntry("gamma", SubjectTextOperator.STARTS_WITH),
    ]


def test_text_filters_take_precedence_and_keep_own_operator():
    f = SubjectFilter.model_validate({
        "searchText": "ignored",
        "operator": "endsWith",
        "searchTextFilters": [
            {"text": "one", "operator": "word"},
            {"text": "two"},
            {"text": "   "},
        ],
    })
    assert resolve_subject_text_entries(f) == [
        SubjectTextEntry("one", SubjectTextOperator.WORD),
        SubjectTextEntry("two", SubjectTextOperator.ENDS_WITH),
    ]


def test_text_entries_default_operator_is_contains():
    f = SubjectFilter(search_text="x")
    assert resolve_subject_text_entries(f)[0].operator == SubjectTextOperator.CONTAINS


def test_paragraph_values_shapes():
    assert paragraph_values(None) == []
    assert paragraph_values("plain") == ["plain"]
    assert paragraph_values({"english": "a", "hindi": None, "other": "x"}) == ["a"]
    assert paragraph_values(["a"]) == []


def test_paragraph_matches_words_across_languages():
    value = {"english": "kinetic energy", "gujarati": "ગતિ ઊર્જા"}
    assert paragraph_matches(value, ["kinetic", "ઊર્જા"])
    assert not paragraph_matches(value, ["kinetic", "heat"])


def test_paragraph_matches_case_flag():
    value = {"english": "Heat flows"}
    assert paragraph_matches(value, ["heat"])
    assert not paragraph_matches(value, ["heat"], case_sensitive=True)
    assert paragraph_matches("Heat flows", ["Heat"], case_sensitive=True)


def test_paragraph_matches_without_words_is_true():
    assert paragraph_matches(None, [])
