"""Book Schemas — book master records with their editors.

Invariants:
    - libraryNumber and bookName are required, stripped and non-empty on create
    - BookUpdate only touches fields present in the body (exclude_unset)
    - editors on update replace the whole editor list when present
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from app.schemas.base import CamelModel


class EditorIn(CamelModel):
    name: str = Field(min_length=1, max_length=300)
    role: str | None = Field("Editor", max_length=100)


class EditorOut(CamelModel):
    id: UUID
    name: str
    role: str | None = None


class BookCreate(CamelModel):
    """Book creation; library number must be unique per owner."""
    library_number: str = Field(min_length=1, max_length=100)
    book_name: str = Field(min_length=1, max_length=500)
    book_summary: str | None = None
    page_numbers: str | None = Field(None, max_length=100)
    grade: str | None = Field(None, max_length=50)
    remark: str | None = None
    edition: str | None = Field(None, max_length=100)
    publisher_name: str | None = Field(None, max_length=300)
    editors: list[EditorIn] = Field(default_factory=list)

    @field_validator("library_number", "book_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty or whitespace")
        return v


class BookUpdate(CamelModel):
    library_number: str | None = Field(None, min_length=1, max_length=100)
    book_name: str | None = Field(None, min_length=1, max_length=500)
    book_summary: str | None = None
    page_numbers: str | None = Field(None, max_length=100)
    grade: str | None = Field(None, max_length=50)
    remark: str | None = None
    edition: str | None = Field(None, max_length=100)
    publisher_name: str | None = Field(None, max_length=300)
    editors: list[EditorIn] | None = None


class BookBrief(CamelModel):
    """Book header embedded in transaction payloads."""
    id: UUID
    book_name: str
    library_number: str
    book_summary: str | None = None
    page_numbers: str | None = None
    editors: list[EditorOut] = Field(default_factory=list)


class BookOut(BookBrief):
    grade: str | None = None
    remark: str | None = None
    edition: str | None = None
    publisher_name: str | None = None
    created_at: datetime
    updated_at: datetime
