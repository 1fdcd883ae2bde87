"""Initial schema — users, books, editors, taxonomy, summary transactions.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        *_timestamps(),
    )

    op.create_table(
        "books",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("library_number", sa.String(100), nullable=False),
        sa.Column("book_name", sa.String(500), nullable=False),
        sa.Column("book_summary", sa.Text, nullable=True),
        sa.Column("page_numbers", sa.String(100), nullable=True),
        sa.Column("grade", sa.String(50), nullable=True),
        sa.Column("remark", sa.Text, nullable=True),
        sa.Column("edition", sa.String(100), nullable=True),
        sa.Column("publisher_name", sa.String(300), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "library_number", name="uq_books_user_library_number"),
    )
    op.create_index("ix_books_user_id", "books", ["user_id"])

    op.create_table(
        "book_editors",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("book_id", UUID(as_uuid=True), sa.ForeignKey("books.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("role", sa.String(100), nullable=True, server_default="Editor"),
    )
    op.create_index("ix_book_editors_book_id", "book_editors", ["book_id"])

    op.create_table(
        "generic_subjects",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(300), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "tags",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(300), nullable=False, unique=True),
        sa.Column("category", sa.String(200), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "summary_transactions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("book_id", UUID(as_uuid=True), sa.ForeignKey("books.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sr_no", sa.Integer, nullable=False),
        sa.Column("title", sa.Text, nullable=True),
        sa.Column("keywords", sa.Text, nullable=True),
        sa.Column("relevant_paragraph", sa.JSON, nullable=True),
        sa.Column("paragraph_no", sa.String(50), nullable=True),
        sa.Column("page_no", sa.String(50), nullable=True),
        sa.Column("information_rating", sa.String(50), nullable=True),
        sa.Column("remark", sa.Text, nullable=True),
        sa.Column("foot_note", sa.Text, nullable=True),
        sa.Column("summary", sa.Text, nullable=True),
        sa.Column("conclusion", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("book_id", "sr_no", name="uq_summary_transactions_book_sr_no"),
    )
    op.create_index("ix_summary_transactions_user_id", "summary_transactions", ["user_id"])
    op.create_index("ix_summary_transactions_book_id", "summary_transactions", ["book_id"])

    op.create_table(
        "summary_transaction_generic_subjects",
        sa.Column("transaction_id", UUID(as_uuid=True), sa.ForeignKey("summary_transactions.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("generic_subject_id", UUID(as_uuid=True), sa.ForeignKey("generic_subjects.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "summary_transaction_specific_tags",
        sa.Column("transaction_id", UUID(as_uuid=True), sa.ForeignKey("summary_transactions.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("tag_id", UUID(as_uuid=True), sa.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("summary_transaction_specific_tags")
    op.drop_table("summary_transaction_generic_subjects")
    op.drop_index("ix_summary_transactions_book_id", table_name="summary_transactions")
    op.drop_index("ix_summary_transactions_user_id", table_name="summary_transactions")
    op.drop_table("summary_transactions")
    op.drop_table("tags")
    op.drop_table("generic_subjects")
    op.drop_index("ix_book_editors_book_id", table_name="book_editors")
    op.drop_table("book_editors")
    op.drop_index("ix_books_user_id", table_name="books")
    op.drop_table("books")
    op.drop_table("users")
