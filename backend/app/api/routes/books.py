"""Book Routes — owner-scoped CRUD for book master records and their editors.

Invariants:
    - Books are only visible to their owner
    - libraryNumber is unique per owner (409 on conflict)
    - Deleting a book deletes its editors and summary transactions
    - Every successful write invalidates the search cache after commit
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_search_cache
from app.core.errors import DuplicateRecordError, ResourceNotFoundError
from app.core.pagination import list_pagination, offset_for
from app.infrastructure.database import commit_or_conflict, get_db
from app.models.book import Book, BookEditor
from app.models.summary_transaction import SummaryTransaction
from app.schemas.book import BookCreate, BookUpdate, EditorIn
from app.services.payloads import book_payload
from app.services.search_cache import SearchResultCache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/books", tags=["books"])

LIBRARY_NUMBER_TAKEN = "Library number already exists in your collection"


async def get_book_or_404(db: AsyncSession, book_id: UUID, user_id: UUID) -> Book:
    result = await db.execute(
        select(Book)
        .where(Book.id == book_id, Book.user_id == user_id)
        .execution_options(populate_existing=True),
    )
    book = result.scalar_one_or_none()
    if book is None:
        raise ResourceNotFoundError("Book", str(book_id))
    return book


async def _ensure_library_number_free(
    db: AsyncSession, user_id: UUID, library_number: str,
    exclude_id: UUID | None = None,
) -> None:
    query = select(Book.id).where(
        Book.user_id == user_id, Book.library_number == library_number,
    )
    if exclude_id is not None:
        query = query.where(Book.id != exclude_id)
    if await db.scalar(query) is not None:
        raise DuplicateRecordError(LIBRARY_NUMBER_TAKEN)


def _editors(items: list[EditorIn]) -> list[BookEditor]:
    return [
        BookEditor(name=e.name.strip(), role=e.role or "Editor")
        for e in items if e.name.strip()
    ]


@router.get("")
async def list_books(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=200),
    search: str = Query("", max_length=500),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's books, newest first, with transaction counts."""
    conditions = [Book.user_id == user_id]
    term = search.strip()
    if term:
        conditions.append(or_(
            Book.book_name.icontains(term, autoescape=True),
            Book.library_number.icontains(term, autoescape=True),
            Book.book_summary.icontains(term, autoescape=True),
            Book.publisher_name.icontains(term, autoescape=True),
        ))

    total = await db.scalar(select(func.count(Book.id)).where(*conditions))
    result = await db.execute(
        select(Book)
        .where(*conditions)
        .order_by(Book.created_at.desc(), Book.id.asc())
        .offset(offset_for(page, limit))
        .limit(limit),
    )
    books = list(result.scalars().all())

    counts: dict[UUID, int] = {}
    if books:
        rows = await db.execute(
            select(SummaryTransaction.book_id, func.count(SummaryTransaction.id))
            .where(SummaryTransaction.book_id.in_([b.id for b in books]))
            .group_by(SummaryTransaction.book_id),
        )
        counts = {book_id: n for book_id, n in rows}

    return {
        "books": [
            {**book_payload(b), "transactionCount": counts.get(b.id, 0)}
            for b in books
        ],
        "pagination": list_pagination(page, limit, total or 0),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    body: BookCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    await _ensure_library_number_free(db, user_id, body.library_number)
    book = Book(user_id=user_id, **body.model_dump(exclude={"editors"}))
    book.editors = _editors(body.editors)
    db.add(book)
    await commit_or_conflict(db, LIBRARY_NUMBER_TAKEN)
    cache.invalidate()
    logger.info(
        f"Book created: {body.library_number}", extra={"user_id": str(user_id)},
    )
    return book_payload(await get_book_or_404(db, book.id, user_id))


@router.get("/{book_id}")
async def get_book(
    book_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    book = await get_book_or_404(db, book_id, user_id)
    count = await db.scalar(
        select(func.count(SummaryTransaction.id))
        .where(SummaryTransaction.book_id == book_id),
    )
    return {**book_payload(book), "transactionCount": count or 0}


@router.put("/{book_id}")
async def update_book(
    book_id: UUID,
    body: BookUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    """Update fields present in the body; editors replace the editor list."""
    book = await get_book_or_404(db, book_id, user_id)
    changes = body.model_dump(exclude_unset=True, exclude={"editors"})
    for required in ("library_number", "book_name"):
        if required in changes:
            value = (changes[required] or "").strip()
            if not value:
                changes.pop(required)
            else:
                changes[required] = value
    if "library_number" in changes and changes["library_number"] != book.library_number:
        await _ensure_library_number_free(
            db, user_id, changes["library_number"], exclude_id=book.id,
        )

    for name, value in changes.items():
        setattr(book, name, value)
    if body.editors is not None:
        book.editors = _editors(body.editors)

    await commit_or_conflict(db, LIBRARY_NUMBER_TAKEN)
    cache.invalidate()
    return book_payload(await get_book_or_404(db, book_id, user_id))


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    """Delete a book together with its editors and transactions."""
    book = await get_book_or_404(db, book_id, user_id)
    await db.delete(book)
    await db.commit()
    cache.invalidate()
    logger.info(f"Book deleted: {book_id}", extra={"user_id": str(user_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
