"""Transaction Routes — owner-scoped CRUD for summary transactions.

Invariants:
    - Every query is filtered by the requesting user's id; another user's
      transaction is indistinguishable from a missing one (404)
    - A transaction can only be created in a book the caller owns
    - srNo is unique per book (409 on conflict)
    - Every successful write invalidates the search cache after commit

Design Decisions:
    - Reloads use populate_existing so relationships are fresh after a write
      without lazy loading in async context
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_search_cache
from app.core.errors import (
    DuplicateRecordError, InvalidRequestError, ResourceNotFoundError,
)
from app.core.pagination import list_pagination, offset_for
from app.infrastructure.database import commit_or_conflict, get_db
from app.models.book import Book
from app.models.subject import GenericSubject, Tag
from app.models.summary_transaction import SummaryTransaction
from app.schemas.book import BookBrief
from app.schemas.transaction import TransactionCreate, TransactionUpdate
from app.services.payloads import transaction_payload
from app.services.search_cache import SearchResultCache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])

SR_NO_TAKEN = "Serial number already exists for this book"


# ─── Helpers ────────────────────────────────────────────────────

async def get_transaction_or_404(
    db: AsyncSession, transaction_id: UUID, user_id: UUID,
) -> SummaryTransaction:
    result = await db.execute(
        select(SummaryTransaction)
        .where(
            SummaryTransaction.id == transaction_id,
            SummaryTransaction.user_id == user_id,
        )
        .execution_options(populate_existing=True),
    )
    tx = result.scalar_one_or_none()
    if tx is None:
        raise ResourceNotFoundError("Transaction", str(transaction_id))
    return tx


async def get_owned_book(
    db: AsyncSession, book_id: UUID, user_id: UUID,
) -> Book | None:
    result = await db.execute(
        select(Book).where(Book.id == book_id, Book.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def _load_by_ids(db: AsyncSession, model, ids: list[UUID], label: str) -> list:
    unique = list(dict.fromkeys(ids))
    if not unique:
        return []
    result = await db.execute(select(model).where(model.id.in_(unique)))
    found = list(result.scalars().all())
    if len(found) != len(unique):
        missing = set(unique) - {row.id for row in found}
        raise InvalidRequestError(
            f"Unknown {label} id(s): {', '.join(sorted(str(m) for m in missing))}",
            field=label,
        )
    return found


async def _ensure_sr_no_free(
    db: AsyncSession, book_id: UUID, sr_no: int, exclude_id: UUID | None = None,
) -> None:
    query = select(SummaryTransaction.id).where(
        SummaryTransaction.book_id == book_id,
        SummaryTransaction.sr_no == sr_no,
    )
    if exclude_id is not None:
        query = query.where(SummaryTransaction.id != exclude_id)
    if await db.scalar(query) is not None:
        raise DuplicateRecordError(SR_NO_TAKEN)


def _text_search(term: str):
    return or_(
        SummaryTransaction.title.icontains(term, autoescape=True),
        SummaryTransaction.keywords.icontains(term, autoescape=True),
        SummaryTransaction.remark.icontains(term, autoescape=True),
    )


# ─── Routes ─────────────────────────────────────────────────────

@router.get("")
async def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    book_id: UUID | None = Query(None, alias="bookId"),
    generic_subject_id: UUID | None = Query(None, alias="genericSubjectId"),
    specific_tag_id: UUID | None = Query(None, alias="specificTagId"),
    search: str = Query("", max_length=500),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's transactions ordered by book and serial number."""
    conditions = [SummaryTransaction.user_id == user_id]
    if book_id:
        conditions.append(SummaryTransaction.book_id == book_id)
    if generic_subject_id:
        conditions.append(SummaryTransaction.generic_subjects.any(
            GenericSubject.id == generic_subject_id,
        ))
    if specific_tag_id:
        conditions.append(SummaryTransaction.specific_tags.any(
            Tag.id == specific_tag_id,
        ))
    if search.strip():
        conditions.append(_text_search(search.strip()))

    total = await db.scalar(
        select(func.count(SummaryTransaction.id)).where(*conditions),
    )
    result = await db.execute(
        select(SummaryTransaction)
        .where(*conditions)
        .order_by(SummaryTransaction.book_id.asc(), SummaryTransaction.sr_no.asc())
        .offset(offset_for(page, limit))
        .limit(limit),
    )
    return {
        "transactions": [transaction_payload(t) for t in result.scalars().all()],
        "pagination": list_pagination(page, limit, total or 0),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: TransactionCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    """Create a transaction in one of the caller's books."""
    if await get_owned_book(db, body.book_id, user_id) is None:
        raise InvalidRequestError("Book not found or access denied", field="bookId")
    await _ensure_sr_no_free(db, body.book_id, body.sr_no)

    data = body.model_dump(exclude={"generic_subject_ids", "specific_tag_ids"})
    tx = SummaryTransaction(user_id=user_id, **data)
    tx.generic_subjects = await _load_by_ids(
        db, GenericSubject, body.generic_subject_ids, "genericSubjectIds",
    )
    tx.specific_tags = await _load_by_ids(
        db, Tag, body.specific_tag_ids, "specificTagIds",
    )
    db.add(tx)
    await commit_or_conflict(db, SR_NO_TAKEN)
    cache.invalidate()
    logger.info(
        f"Transaction created (book={body.book_id}, srNo={body.sr_no})",
        extra={"user_id": str(user_id)},
    )
    tx = await get_transaction_or_404(db, tx.id, user_id)
    return transaction_payload(tx)


@router.get("/book/{book_id}")
async def list_book_transactions(
    book_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    search: str = Query("", max_length=500),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Book header plus its transactions in serial-number order."""
    book = await get_owned_book(db, book_id, user_id)
    if book is None:
        raise ResourceNotFoundError("Book", str(book_id))

    conditions = [
        SummaryTransaction.book_id == book_id,
        SummaryTransaction.user_id == user_id,
    ]
    if search.strip():
        conditions.append(_text_search(search.strip()))

    total = await db.scalar(
        select(func.count(SummaryTransaction.id)).where(*conditions),
    )
    result = await db.execute(
        select(SummaryTransaction)
        .where(*conditions)
        .order_by(SummaryTransaction.sr_no.asc())
        .offset(offset_for(page, limit))
        .limit(limit),
    )
    return {
        "book": BookBrief.model_validate(book).model_dump(mode="json", by_alias=True),
        "transactions": [transaction_payload(t) for t in result.scalars().all()],
        "pagination": list_pagination(page, limit, total or 0),
    }


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    tx = await get_transaction_or_404(db, transaction_id, user_id)
    return transaction_payload(tx)


@router.put("/{transaction_id}")
async def update_transaction(
    transaction_id: UUID,
    body: TransactionUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    """Update fields present in the body; subject lists replace existing links."""
    tx = await get_transaction_or_404(db, transaction_id, user_id)
    changes = body.model_dump(
        exclude_unset=True, exclude={"generic_subject_ids", "specific_tag_ids"},
    )
    if changes.get("sr_no") is not None and changes["sr_no"] != tx.sr_no:
        await _ensure_sr_no_free(db, tx.book_id, changes["sr_no"], exclude_id=tx.id)
    elif "sr_no" in changes and changes["sr_no"] is None:
        del changes["sr_no"]

    # Lookups run before any attribute change so autoflush has nothing to write
    subjects = tags = None
    if body.generic_subject_ids is not None:
        subjects = await _load_by_ids(
            db, GenericSubject, body.generic_subject_ids, "genericSubjectIds",
        )
    if body.specific_tag_ids is not None:
        tags = await _load_by_ids(
            db, Tag, body.specific_tag_ids, "specificTagIds",
        )

    for name, value in changes.items():
        setattr(tx, name, value)
    if subjects is not None:
        tx.generic_subjects = subjects
    if tags is not None:
        tx.specific_tags = tags

    await commit_or_conflict(db, SR_NO_TAKEN)
    cache.invalidate()
    tx = await get_transaction_or_404(db, transaction_id, user_id)
    return transaction_payload(tx)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    tx = await get_transaction_or_404(db, transaction_id, user_id)
    await db.delete(tx)
    await db.commit()
    cache.invalidate()
    logger.info(
        f"Transaction deleted: {transaction_id}", extra={"user_id": str(user_id)},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
