"""Subject Schemas — generic subjects, specific tags and the replace request.

Invariants:
    - Names are stripped and non-empty
    - Replace requires two different identifiers of the same kind
"""

from uuid import UUID

from pydantic import Field, field_validator, model_validator

from app.core.domain_types import SubjectKind
from app.schemas.base import CamelModel


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class GenericSubjectWrite(CamelModel):
    """Create/update body for a generic subject."""
    name: str = Field(min_length=1, max_length=300)
    description: str | None = Field(None, max_length=5000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)


class TagWrite(CamelModel):
    """Create/update body for a specific tag."""
    name: str = Field(min_length=1, max_length=300)
    category: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)


class GenericSubjectOut(CamelModel):
    id: UUID
    name: str
    description: str | None = None


class TagOut(CamelModel):
    id: UUID
    name: str
    category: str | None = None
    description: str | None = None


class SubjectReplace(CamelModel):
    """Move the caller's transactions from a wrong subject/tag to the right one."""
    type: SubjectKind
    wrong_id: UUID
    right_id: UUID

    @model_validator(mode="after")
    def check_distinct(self):
        if self.wrong_id == self.right_id:
            raise ValueError("Choose different subjects for replace")
        return self
