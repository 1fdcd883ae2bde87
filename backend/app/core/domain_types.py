"""Domain Types — closed vocabularies for search fields, operators and sorting.

Invariants:
    - Every searchable field, operator and sort key is an Enum member, no raw
      string matching in the compiler
    - Enum values are the camelCase names used on the wire
    - PARAGRAPH_LANGUAGES is the full set of keys a relevant paragraph may carry

Design Decisions:
    - str Enums: serialize to JSON without custom encoders, and pydantic rejects
      unknown values at the boundary
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class FilterField(str, Enum):
    """Transaction fields accepted in per-field search filters."""
    TITLE = "title"
    INFORMATION_RATING = "informationRating"
    REMARK = "remark"
    FOOT_NOTE = "footNote"
    RELEVANT_PARAGRAPH = "relevantParagraph"


# Word-search fields: value split on whitespace, every word must appear
WORD_SEARCH_FIELDS = frozenset({
    FilterField.TITLE, FilterField.REMARK, FilterField.FOOT_NOTE,
})


class FilterOperator(str, Enum):
    """Per-field filter operators.

    Word-search fields and relevantParagraph only take CONTAINS;
    informationRating is always an equality match and takes either.
    """
    CONTAINS = "contains"
    EQUALS = "equals"


class SubjectTextOperator(str, Enum):
    """Name-matching operators for subject/tag text filters."""
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    EQUALS = "equals"
    WORD = "word"


class SubjectSearchMode(str, Enum):
    """Subject/tag filter mode: by identifier set or by name text."""
    EXACT = "exact"
    TEXT = "text"


class MatchType(str, Enum):
    """How several subject/tag conditions combine."""
    AND = "AND"
    OR = "OR"


class SubjectKind(str, Enum):
    """Which taxonomy a subject filter or replace request targets."""
    GENERIC = "generic"
    SPECIFIC = "specific"


class SortField(str, Enum):
    """Allow-listed sort keys for transaction search."""
    SR_NO = "srNo"
    TITLE = "title"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    PAGE_NO = "pageNo"


DEFAULT_SORT_FIELD = SortField.SR_NO


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


PARAGRAPH_LANGUAGES = ("english", "hindi", "gujarati", "sanskrit")
