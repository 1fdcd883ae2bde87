"""Transaction Schemas — summary transaction write bodies and payload shape.

Invariants:
    - srNo is a positive integer, unique per book (checked in the route)
    - relevantParagraph is an object keyed by language or a bare string
    - Subject and tag links are given as identifier lists; on update a present
      list replaces the existing links
    - TransactionOut is the single payload shape for search results, lists and
      detail views
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.book import BookBrief
from app.schemas.subject import GenericSubjectOut, TagOut


class UserSummary(CamelModel):
    id: UUID
    name: str | None = None
    email: str


class TransactionCreate(CamelModel):
    book_id: UUID
    sr_no: int = Field(ge=1)
    title: str | None = None
    keywords: str | None = None
    relevant_paragraph: dict[str, str | None] | str | None = None
    paragraph_no: str | None = Field(None, max_length=50)
    page_no: str | None = Field(None, max_length=50)
    information_rating: str | None = Field(None, max_length=50)
    remark: str | None = None
    foot_note: str | None = None
    summary: str | None = None
    conclusion: str | None = None
    generic_subject_ids: list[UUID] = Field(default_factory=list)
    specific_tag_ids: list[UUID] = Field(default_factory=list)


class TransactionUpdate(CamelModel):
    sr_no: int | None = Field(None, ge=1)
    title: str | None = None
    keywords: str | None = None
    relevant_paragraph: dict[str, str | None] | str | None = None
    paragraph_no: str | None = Field(None, max_length=50)
    page_no: str | None = Field(None, max_length=50)
    information_rating: str | None = Field(None, max_length=50)
    remark: str | None = None
    foot_note: str | None = None
    summary: str | None = None
    conclusion: str | None = None
    generic_subject_ids: list[UUID] | None = None
    specific_tag_ids: list[UUID] | None = None


class TransactionOut(CamelModel):
    """Transaction with book header, owner summary and resolved subjects."""
    id: UUID
    sr_no: int
    title: str | None = None
    keywords: str | None = None
    relevant_paragraph: dict | str | None = None
    paragraph_no: str | None = None
    page_no: str | None = None
    information_rating: str | None = None
    remark: str | None = None
    foot_note: str | None = None
    summary: str | None = None
    conclusion: str | None = None
    book_id: UUID
    user_id: UUID
    created_at: datetime
    updated_at: datetime
    book: BookBrief
    user: UserSummary
    generic_subjects: list[GenericSubjectOut] = Field(default_factory=list)
    specific_tags: list[TagOut] = Field(default_factory=list)
