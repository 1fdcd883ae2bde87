"""Book ORM — a catalogued book and its editors.

Invariants:
    - Always belongs to a User (user_id FK)
    - library_number is unique per owner (uq_books_user_library_number)
    - Deleting a book deletes its editors and summary transactions

Design Decisions:
    - Editors in their own table: a book can list several, each with a role
    - selectin loading for editors: every book payload includes them
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Book(Base):
    """Book master record."""
    __tablename__ = "books"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "library_number",
            name="uq_books_user_library_number",
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
    library_number: Mapped[str] = mapped_column(String(100), nullable=False)
    book_name: Mapped[str] = mapped_column(String(500), nullable=False)
    book_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    page_numbers: Mapped[str | None] = mapped_column(String(100), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(50), nullable=True)
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)
    edition: Mapped[str | None] = mapped_column(String(100), nullable=True)
    publisher_name: Mapped[str | None] = mapped_column(String(300), nullable=True)
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
    editors: Mapped[list["BookEditor"]] = relationship(
        "BookEditor", back_populates="book",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="BookEditor.name",
    )
    transactions: Mapped[list["SummaryTransaction"]] = relationship(
        "SummaryTransaction", back_populates="book",
        cascade="all, delete-orphan", passive_deletes=True,
    )


class BookEditor(Base):
    """Editor credited on a book."""
    __tablename__ = "book_editors"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    role: Mapped[str | None] = mapped_column(
        String(100), nullable=True, default="Editor",
    )

    book: Mapped["Book"] = relationship("Book", back_populates="editors")
