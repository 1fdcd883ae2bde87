"""Payload Shaping — ORM rows to JSON-ready camelCase dicts.

Invariants:
    - Output is plain JSON types (UUIDs and datetimes as strings), safe to
      store in the search cache and return from any route
    - Every transaction payload carries book (with editors), user summary,
      genericSubjects and specificTags
"""

from app.models.book import Book
from app.models.subject import GenericSubject, Tag
from app.models.summary_transaction import SummaryTransaction
from app.schemas.book import BookOut
from app.schemas.subject import GenericSubjectOut, TagOut
from app.schemas.transaction import TransactionOut


def transaction_payload(tx: SummaryTransaction) -> dict:
    return TransactionOut.model_validate(tx).model_dump(mode="json", by_alias=True)


def book_payload(book: Book) -> dict:
    return BookOut.model_validate(book).model_dump(mode="json", by_alias=True)


def generic_subject_payload(subject: GenericSubject) -> dict:
    return GenericSubjectOut.model_validate(subject).model_dump(
        mode="json", by_alias=True,
    )


def tag_payload(tag: Tag) -> dict:
    return TagOut.model_validate(tag).model_dump(mode="json", by_alias=True)
