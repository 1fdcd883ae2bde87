"""SummaryTransaction ORM — an annotated excerpt tied to a book, page and subjects.

Invariants:
    - Always belongs to a User (user_id) and a Book (book_id)
    - sr_no is unique per book (uq_summary_transactions_book_sr_no)
    - relevant_paragraph is a JSON object keyed by language
      (english, hindi, gujarati, sanskrit); a bare JSON string is tolerated
    - generic_subjects / specific_tags are many-to-many through association tables

Design Decisions:
    - user_id denormalized (also reachable via book): tenant filter without a join
    - JSON column for relevant_paragraph: searched per language with JSON path
      expressions in services/search_compiler.py
    - selectin loading for subjects/tags/book/user: search results always need them
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Integer, DateTime, JSON, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base
from app.models.subject import (
    transaction_generic_subjects, transaction_specific_tags,
)


class SummaryTransaction(Base):
    """Summary transaction entity: one excerpt with its annotations."""
    __tablename__ = "summary_transactions"
    __table_args__ = (
        UniqueConstraint(
            "book_id", "sr_no", name="uq_summary_transactions_book_sr_no",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    sr_no: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    keywords: Mapped[str | None] = mapped_column(Text, nullable=True)
    relevant_paragraph: Mapped[dict | str | None] = mapped_column(
        JSON, nullable=True,
    )
    paragraph_no: Mapped[str | None] = mapped_column(String(50), nullable=True)
    page_no: Mapped[str | None] = mapped_column(String(50), nullable=True)
    information_rating: Mapped[str | None] = mapped_column(
        String(50), nullable=True,
    )
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)
    foot_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    conclusion: Mapped[str | None] = mapped_column(Text, nullable=True)
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

    # Relationships
    book: Mapped["Book"] = relationship(
        "Book", back_populates="transactions", lazy="selectin",
    )
    user: Mapped["User"] = relationship("User", lazy="selectin")
    generic_subjects: Mapped[list["GenericSubject"]] = relationship(
        "GenericSubject", secondary=transaction_generic_subjects,
        lazy="selectin", order_by="GenericSubject.name",
    )
    specific_tags: Mapped[list["Tag"]] = relationship(
        "Tag", secondary=transaction_specific_tags,
        lazy="selectin", order_by="Tag.name",
    )
