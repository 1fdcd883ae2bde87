"""Subject Taxonomy ORM — generic subjects, specific tags, and their transaction links.

Invariants:
    - GenericSubject.name and Tag.name are unique across the catalog
    - Taxonomy is shared by all users; links to transactions are per transaction
    - Link rows are removed with either side (ON DELETE CASCADE)

Design Decisions:
    - Plain association tables (no link model): links carry no payload, and
      relationship(secondary=...) gives .any() for relation-existence filters
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Table
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


transaction_generic_subjects = Table(
    "summary_transaction_generic_subjects",
    Base.metadata,
    Column(
        "transaction_id", UUID(as_uuid=True),
        ForeignKey("summary_transactions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "generic_subject_id", UUID(as_uuid=True),
        ForeignKey("generic_subjects.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

transaction_specific_tags = Table(
    "summary_transaction_specific_tags",
    Base.metadata,
    Column(
        "transaction_id", UUID(as_uuid=True),
        ForeignKey("summary_transactions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id", UUID(as_uuid=True),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class GenericSubject(Base):
    """Broad subject heading (e.g. "Physics")."""
    __tablename__ = "generic_subjects"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class Tag(Base):
    """Specific subject tag, optionally grouped by category."""
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)
    category: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
