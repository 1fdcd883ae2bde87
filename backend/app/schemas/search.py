"""Search Schemas — the search query accepted by POST /transactions/search.

Invariants:
    - page >= 1 and 1 <= pageSize <= 100, enforced before any store access
    - Per-field filter names and operators are closed enums: unknown values
      are a 400 validation error, never silently dropped
    - Word-search fields and relevantParagraph accept only "contains"
    - sortBy is free text; the compiler falls back to srNo for unknown keys
    - All identifier lists are UUIDs

Design Decisions:
    - genericSubjectIds / specificTagIds kept as the legacy shorthand for an
      exact-mode OR subject filter (used when no structured filter is given)
    - canonical_payload() is the fingerprint input: model_dump fixes key order,
      so two bodies differing only in key order produce the same payload
"""

from uuid import UUID

from pydantic import Field, field_validator, model_validator

from app.core.domain_types import (
    WORD_SEARCH_FIELDS,
    FilterField,
    FilterOperator,
    MatchType,
    SortOrder,
    SubjectSearchMode,
    SubjectTextOperator,
)
from app.schemas.base import CamelModel


class FieldFilter(CamelModel):
    """One per-field condition."""
    field: FilterField
    operator: FilterOperator = FilterOperator.CONTAINS
    value: str | int | float | None = ""
    case_sensitive: bool = False

    @property
    def text_value(self) -> str:
        return "" if self.value is None else str(self.value)

    @model_validator(mode="after")
    def _operator_fits_field(self):
        contains_only = (
            self.field in WORD_SEARCH_FIELDS
            or self.field == FilterField.RELEVANT_PARAGRAPH
        )
        if contains_only and self.operator != FilterOperator.CONTAINS:
            raise ValueError(
                f"{self.field.value} filters only support the contains operator",
            )
        return self


class SubjectTextFilter(CamelModel):
    """One name fragment with its own operator."""
    text: str = Field(max_length=500)
    operator: SubjectTextOperator | None = None


class SubjectFilter(CamelModel):
    """Relation filter on generic subjects or specific tags."""
    mode: SubjectSearchMode | None = None
    match_type: MatchType | None = None
    selected_ids: list[UUID] = Field(default_factory=list)
    search_text: str | None = Field(None, max_length=500)
    search_texts: list[str] = Field(default_factory=list)
    search_text_filters: list[SubjectTextFilter] = Field(default_factory=list)
    operator: SubjectTextOperator | None = None
    case_sensitive: bool = False


class SearchRequest(CamelModel):
    """Search query for the faceted transaction search."""
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)
    filters: list[FieldFilter] = Field(default_factory=list)
    book_ids: list[UUID] = Field(default_factory=list)
    generic_subject_ids: list[UUID] = Field(default_factory=list)
    specific_tag_ids: list[UUID] = Field(default_factory=list)
    global_search: str = Field("", max_length=500)
    sort_by: str = "srNo"
    sort_order: SortOrder = SortOrder.ASC
    generic_subject_filter: SubjectFilter | None = None
    specific_tag_filter: SubjectFilter | None = None

    @field_validator("global_search")
    @classmethod
    def strip_global_search(cls, v: str) -> str:
        return v.strip()

    def canonical_payload(self) -> dict:
        """JSON-ready dict with a fixed key set, used for cache fingerprints."""
        return self.model_dump(mode="json", by_alias=True)
