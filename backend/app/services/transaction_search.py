"""Transaction Search — cache lookup, compile, execute, shape, cache store.

Invariants:
    - Cache key includes the requesting user and the cache data version
    - A cache hit returns the stored page plus cached=True; a miss never sets it
    - totalCount is the true match count for the user, independent of the page
    - Store failures are logged and raised as SearchExecutionError; nothing is
      cached for a failed search

Design Decisions:
    - Count and page queries share one compiled predicate
    - Post-filter mode fetches every candidate row for the user and paginates in
      memory (unbounded fetch, only used when json_pushdown is off)
"""

import logging
import time
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import SearchExecutionError
from app.core.pagination import offset_for, search_pagination
from app.models.book import Book
from app.models.subject import GenericSubject, Tag
from app.models.summary_transaction import SummaryTransaction
from app.schemas.search import SearchRequest
from app.services.payloads import transaction_payload
from app.services.search_cache import SearchResultCache
from app.services.search_compiler import CompiledSearch, compile_search

logger = logging.getLogger(__name__)


async def search_transactions(
    db: AsyncSession,
    cache: SearchResultCache,
    request: SearchRequest,
    user_id: UUID,
    json_pushdown: bool = True,
) -> dict:
    """Run one faceted search and return a Result Page."""
    key = cache.fingerprint(request.canonical_payload(), user_id)
    cached = cache.get(key)
    if cached is not None:
        logger.info(
            "Search served from cache",
            extra={"user_id": str(user_id), "cache_hit": True},
        )
        return {**cached, "cached": True}

    started = time.perf_counter()
    compiled = compile_search(request, user_id, json_pushdown)
    try:
        rows, total = await _execute(db, compiled, request.page, request.page_size)
    except SQLAlchemyError as e:
        logger.error(
            f"Transaction search failed: {e}",
            exc_info=True, extra={"user_id": str(user_id)},
        )
        raise SearchExecutionError(_describe(e))

    result = {
        "transactions": [transaction_payload(r) for r in rows],
        "pagination": search_pagination(request.page, request.page_size, total),
    }
    cache.put(key, result)
    logger.info(
        "Search executed",
        extra={
            "user_id": str(user_id),
            "cache_hit": False,
            "total_count": total,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return result


async def _execute(
    db: AsyncSession, compiled: CompiledSearch, page: int, page_size: int,
) -> tuple[list[SummaryTransaction], int]:
    query = select(SummaryTransaction).where(compiled.predicate)
    offset = offset_for(page, page_size)

    if compiled.post_filter is None:
        total = await db.scalar(
            select(func.count(SummaryTransaction.id)).where(compiled.predicate),
        )
        result = await db.execute(
            query.order_by(*compiled.order_by).offset(offset).limit(page_size),
        )
        return list(result.scalars().all()), total or 0

    result = await db.execute(query.order_by(*compiled.order_by))
    matched = [row for row in result.scalars().all() if compiled.post_filter(row)]
    return matched[offset:offset + page_size], len(matched)


def _describe(error: SQLAlchemyError) -> str:
    """Driver message without the SQL statement and parameters."""
    orig = getattr(error, "orig", None)
    return str(orig) if orig is not None else error.__class__.__name__


async def get_filter_options(db: AsyncSession, user_id: UUID) -> dict:
    """Books, generic subjects and tags for building search filter pickers."""
    try:
        books = await db.execute(
            select(Book.id, Book.book_name, Book.library_number)
            .where(Book.user_id == user_id)
            .order_by(Book.book_name.asc()),
        )
        subjects = await db.execute(
            select(GenericSubject.id, GenericSubject.name, GenericSubject.description)
            .order_by(GenericSubject.name.asc()),
        )
        tags = await db.execute(
            select(Tag.id, Tag.name, Tag.category, Tag.description)
            .order_by(Tag.name.asc()),
        )
    except SQLAlchemyError as e:
        logger.error(
            f"Loading filter options failed: {e}",
            exc_info=True, extra={"user_id": str(user_id)},
        )
        raise SearchExecutionError(_describe(e))

    return {
        "books": [
            {"id": str(b.id), "bookName": b.book_name, "libraryNumber": b.library_number}
            for b in books
        ],
        "genericSubjects": [
            {"id": str(s.id), "name": s.name, "description": s.description}
            for s in subjects
        ],
        "tags": [
            {
                "id": str(t.id), "name": t.name,
                "category": t.category, "description": t.description,
            }
            for t in tags
        ],
    }
