"""Search Terms — pure text helpers shared by the filter compiler and post-filter.

Invariants:
    - Pure functions: no IO, no async, no DB
    - split_words splits on any whitespace and drops empty fragments
    - Subject text entries never contain blank text
    - paragraph_matches: every word must appear in SOME language value
      (AND across words, OR across languages per word)

Design Decisions:
    - Subject filter normalization lives here, not in the compiler: the compiler
      only turns already-resolved entries into SQL
    - paragraph_values accepts a bare string as a single-language paragraph
"""

from dataclasses import dataclass

from app.core.domain_types import (
    MatchType,
    PARAGRAPH_LANGUAGES,
    SubjectSearchMode,
    SubjectTextOperator,
)


@dataclass(frozen=True)
class SubjectTextEntry:
    """A resolved name fragment with the operator that applies to it."""
    text: str
    operator: SubjectTextOperator


def split_words(text: str) -> list[str]:
    """Whitespace-separated words of text, empties removed."""
    return [w for w in (text or "").split() if w]


def resolve_subject_mode(subject_filter) -> SubjectSearchMode:
    """Explicit mode, else text when any text is present, else exact."""
    if subject_filter.mode is not None:
        return subject_filter.mode
    has_text = (
        bool(subject_filter.search_text_filters)
        or bool(subject_filter.search_texts)
        or bool((subject_filter.search_text or "").strip())
    )
    return SubjectSearchMode.TEXT if has_text else SubjectSearchMode.EXACT


def resolve_match_type(subject_filter, mode: SubjectSearchMode) -> MatchType:
    """Exact mode defaults to OR, text mode to AND."""
    if subject_filter.match_type is not None:
        return subject_filter.match_type
    return MatchType.OR if mode == SubjectSearchMode.EXACT else MatchType.AND


def resolve_subject_text_entries(subject_filter) -> list[SubjectTextEntry]:
    """Collect name fragments from a subject filter.

    searchTextFilters wins when present (each entry may carry its own
    operator); otherwise searchTexts followed by searchText, all using the
    filter-level operator. Blank fragments are dropped.
    """
    base_operator = subject_filter.operator or SubjectTextOperator.CONTAINS
    entries: list[SubjectTextEntry] = []

    if subject_filter.search_text_filters:
        for item in subject_filter.search_text_filters:
            text = (item.text or "").strip()
            if text:
                entries.append(
                    SubjectTextEntry(text, item.operator or base_operator),
                )
        return entries

    for raw in subject_filter.search_texts:
        text = (raw or "").strip()
        if text:
            entries.append(SubjectTextEntry(text, base_operator))
    text = (subject_filter.search_text or "").strip()
    if text:
        entries.append(SubjectTextEntry(text, base_operator))
    return entries


def paragraph_values(value) -> list[str]:
    """All language strings of a relevant paragraph."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        return [
            value[lang] for lang in PARAGRAPH_LANGUAGES
            if isinstance(value.get(lang), str)
        ]
    return []


def paragraph_matches(value, words: list[str], case_sensitive: bool = False) -> bool:
    """True when every word occurs in at least one language variant."""
    if not words:
        return True
    texts = paragraph_values(value)
    if not case_sensitive:
        texts = [t.lower() for t in texts]
        words = [w.lower() for w in words]
    return all(any(word in text for text in texts) for word in words)
