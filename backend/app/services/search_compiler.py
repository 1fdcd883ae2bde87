"""Search Filter Compiler — turns a SearchRequest into a SQLAlchemy predicate.

Invariants:
    - The first condition is always user_id == requesting user; nothing in the
      request can remove or widen it
    - Word-search fields (title, remark, footNote) split the value on whitespace
      and require every word as a substring (AND of per-word conditions); the
      request schema only admits the contains operator for them
    - informationRating with an empty or "null" value compiles to IS NULL
    - relevantParagraph: every word must appear in at least one language value
      (AND across words, OR across languages per word)
    - Global search is an OR over the fixed field list plus paragraph languages,
      always case-insensitive, and is ANDed with the per-field filters
      (including a relevantParagraph filter)
    - Unknown sortBy values fall back to srNo; id is always the tiebreaker
    - Case-insensitive unless a filter sets caseSensitive

Design Decisions:
    - Paragraph matching is pushed into the store with JSON path expressions
      (column["english"].as_string()), portable across PostgreSQL and SQLite
    - json_pushdown=False moves paragraph and global-search matching into a
      post-filter closure; the caller must then fetch every candidate row and
      paginate in memory
    - All LIKE patterns use autoescape so % and _ in user text match literally
"""

from dataclasses import dataclass
from typing import Callable
from uuid import UUID

from sqlalchemy import and_, func, or_
from sqlalchemy.sql.elements import ColumnElement

from app.core.domain_types import (
    DEFAULT_SORT_FIELD,
    FilterField,
    MatchType,
    PARAGRAPH_LANGUAGES,
    SortField,
    SortOrder,
    SubjectKind,
    SubjectSearchMode,
    SubjectTextOperator,
)
from app.core.search_terms import (
    paragraph_matches,
    paragraph_values,
    resolve_match_type,
    resolve_subject_mode,
    resolve_subject_text_entries,
    split_words,
)
from app.models.subject import GenericSubject, Tag
from app.models.summary_transaction import SummaryTransaction
from app.schemas.search import FieldFilter, SearchRequest, SubjectFilter

PostFilter = Callable[[SummaryTransaction], bool]

_WORD_SEARCH_COLUMNS = {
    FilterField.TITLE: SummaryTransaction.title,
    FilterField.REMARK: SummaryTransaction.remark,
    FilterField.FOOT_NOTE: SummaryTransaction.foot_note,
}

_SORT_COLUMNS = {
    SortField.SR_NO: SummaryTransaction.sr_no,
    SortField.TITLE: SummaryTransaction.title,
    SortField.CREATED_AT: SummaryTransaction.created_at,
    SortField.UPDATED_AT: SummaryTransaction.updated_at,
    SortField.PAGE_NO: SummaryTransaction.page_no,
}

# Attribute names searched by the global term, in addition to the paragraph
GLOBAL_SEARCH_ATTRIBUTES = (
    "title", "information_rating", "remark", "foot_note", "keywords",
    "summary", "conclusion", "page_no", "paragraph_no",
)

_NULL_RATING_VALUES = {"", "null"}


@dataclass(frozen=True)
class CompiledSearch:
    """Everything the executor needs to run one search."""
    predicate: ColumnElement[bool]
    post_filter: PostFilter | None
    order_by: tuple
    sort_field: SortField


# ─── String conditions ──────────────────────────────────────────

def _contains(column, value: str, case_sensitive: bool) -> ColumnElement[bool]:
    if case_sensitive:
        return column.contains(value, autoescape=True)
    return column.icontains(value, autoescape=True)


def _string_condition(
    column, operator: SubjectTextOperator, value: str, case_sensitive: bool,
) -> ColumnElement[bool]:
    """Single name comparison for a non-word subject text operator."""
    if operator == SubjectTextOperator.STARTS_WITH:
        if case_sensitive:
            return column.startswith(value, autoescape=True)
        return column.istartswith(value, autoescape=True)
    if operator == SubjectTextOperator.ENDS_WITH:
        if case_sensitive:
            return column.endswith(value, autoescape=True)
        return column.iendswith(value, autoescape=True)
    if operator == SubjectTextOperator.EQUALS:
        if case_sensitive:
            return column == value
        return func.lower(column) == value.lower()
    return _contains(column, value, case_sensitive)


def _all_words(column, words: list[str], case_sensitive: bool) -> ColumnElement[bool]:
    return and_(*(_contains(column, w, case_sensitive) for w in words))


# ─── Paragraph (multi-language JSON) ────────────────────────────

def _paragraph_language_columns():
    return [
        SummaryTransaction.relevant_paragraph[lang].as_string()
        for lang in PARAGRAPH_LANGUAGES
    ]


def _paragraph_words_condition(
    words: list[str], case_sensitive: bool,
) -> ColumnElement[bool]:
    languages = _paragraph_language_columns()
    return and_(*(
        or_(*(_contains(col, word, case_sensitive) for col in languages))
        for word in words
    ))


# ─── Per-field filters ──────────────────────────────────────────

def _information_rating_condition(f: FieldFilter) -> ColumnElement[bool]:
    value = f.text_value.strip()
    column = SummaryTransaction.information_rating
    if value.lower() in _NULL_RATING_VALUES:
        return column.is_(None)
    if f.case_sensitive:
        return column == value
    return func.lower(column) == value.lower()


def _field_condition(f: FieldFilter) -> ColumnElement[bool] | None:
    """SQL condition for one non-paragraph filter, or None when it is empty."""
    if f.field == FilterField.INFORMATION_RATING:
        return _information_rating_condition(f)

    words = split_words(f.text_value)
    if not words:
        return None
    return _all_words(_WORD_SEARCH_COLUMNS[f.field], words, f.case_sensitive)


# ─── Subject / tag relation filters ─────────────────────────────

def normalize_subject_filter(
    subject_filter: SubjectFilter | None, fallback_ids: list[UUID],
) -> SubjectFilter | None:
    """Structured filter when given, else legacy id list as exact-OR."""
    if subject_filter is not None:
        return subject_filter
    if not fallback_ids:
        return None
    return SubjectFilter(
        mode=SubjectSearchMode.EXACT,
        match_type=MatchType.OR,
        selected_ids=fallback_ids,
    )


def subject_conditions(
    subject_filter: SubjectFilter | None, kind: SubjectKind,
) -> list[ColumnElement[bool]]:
    """Relation-existence conditions for one subject/tag filter."""
    if subject_filter is None:
        return []
    if kind == SubjectKind.GENERIC:
        relation, model = SummaryTransaction.generic_subjects, GenericSubject
    else:
        relation, model = SummaryTransaction.specific_tags, Tag

    mode = resolve_subject_mode(subject_filter)
    match_type = resolve_match_type(subject_filter, mode)

    if mode == SubjectSearchMode.EXACT:
        ids = list(dict.fromkeys(subject_filter.selected_ids))
        if not ids:
            return []
        if match_type == MatchType.AND:
            return [relation.any(model.id == i) for i in ids]
        return [relation.any(model.id.in_(ids))]

    case_sensitive = subject_filter.case_sensitive
    conditions = []
    for entry in resolve_subject_text_entries(subject_filter):
        if entry.operator == SubjectTextOperator.WORD:
            words = split_words(entry.text)
            if not words:
                continue
            conditions.append(
                relation.any(_all_words(model.name, words, case_sensitive)),
            )
        else:
            conditions.append(relation.any(_string_condition(
                model.name, entry.operator, entry.text, case_sensitive,
            )))

    if not conditions:
        return []
    if match_type == MatchType.AND:
        return conditions
    return [or_(*conditions)]


# ─── Global search ──────────────────────────────────────────────

def _global_condition(term: str) -> ColumnElement[bool]:
    fields = [
        getattr(SummaryTransaction, attr).icontains(term, autoescape=True)
        for attr in GLOBAL_SEARCH_ATTRIBUTES
    ]
    paragraph = [
        col.icontains(term, autoescape=True)
        for col in _paragraph_language_columns()
    ]
    return or_(*fields, *paragraph)


def global_matches(row: SummaryTransaction, term: str) -> bool:
    """In-process equivalent of the global search condition."""
    needle = term.lower()
    for attr in GLOBAL_SEARCH_ATTRIBUTES:
        value = getattr(row, attr)
        if value is not None and needle in str(value).lower():
            return True
    return any(needle in text.lower() for text in paragraph_values(row.relevant_paragraph))


# ─── Sorting ────────────────────────────────────────────────────

def resolve_sort_field(sort_by: str | None) -> SortField:
    """Allow-listed sort field, default srNo for anything unknown."""
    try:
        return SortField(sort_by)
    except ValueError:
        return DEFAULT_SORT_FIELD


def _order_by(sort_field: SortField, sort_order: SortOrder) -> tuple:
    column = _SORT_COLUMNS[sort_field]
    primary = column.desc() if sort_order == SortOrder.DESC else column.asc()
    return (primary, SummaryTransaction.id.asc())


# ─── Entry point ────────────────────────────────────────────────

def compile_search(
    request: SearchRequest, user_id: UUID, json_pushdown: bool = True,
) -> CompiledSearch:
    """Compile a SearchRequest into predicate, optional post-filter and ordering."""
    conditions: list[ColumnElement[bool]] = [SummaryTransaction.user_id == user_id]
    in_process: list[PostFilter] = []

    if request.book_ids:
        conditions.append(SummaryTransaction.book_id.in_(request.book_ids))

    conditions.extend(subject_conditions(
        normalize_subject_filter(
            request.generic_subject_filter, request.generic_subject_ids,
        ),
        SubjectKind.GENERIC,
    ))
    conditions.extend(subject_conditions(
        normalize_subject_filter(
            request.specific_tag_filter, request.specific_tag_ids,
        ),
        SubjectKind.SPECIFIC,
    ))

    for f in request.filters:
        if f.field == FilterField.RELEVANT_PARAGRAPH:
            words = split_words(f.text_value)
            if not words:
                continue
            if json_pushdown:
                conditions.append(_paragraph_words_condition(words, f.case_sensitive))
            else:
                in_process.append(_paragraph_post_filter(words, f.case_sensitive))
            continue
        condition = _field_condition(f)
        if condition is not None:
            conditions.append(condition)

    term = request.global_search
    if term:
        if json_pushdown:
            conditions.append(_global_condition(term))
        else:
            in_process.append(lambda row, term=term: global_matches(row, term))

    sort_field = resolve_sort_field(request.sort_by)
    return CompiledSearch(
        predicate=and_(*conditions),
        post_filter=_combine(in_process),
        order_by=_order_by(sort_field, request.sort_order),
        sort_field=sort_field,
    )


def _paragraph_post_filter(words: list[str], case_sensitive: bool) -> PostFilter:
    def _matches(row: SummaryTransaction) -> bool:
        return paragraph_matches(row.relevant_paragraph, words, case_sensitive)
    return _matches


def _combine(filters: list[PostFilter]) -> PostFilter | None:
    if not filters:
        return None
    return lambda row: all(f(row) for f in filters)
