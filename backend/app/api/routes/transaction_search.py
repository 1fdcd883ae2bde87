"""Transaction Search Routes — faceted search, filter options, cache reset.

Invariants:
    - Every endpoint requires an authenticated user (get_current_user_id)
    - Request bodies are validated by SearchRequest before any store access
    - clear-cache really empties the search cache
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_search_cache
from app.config import get_settings
from app.infrastructure.database import get_db
from app.schemas.search import SearchRequest
from app.services.search_cache import SearchResultCache
from app.services.transaction_search import get_filter_options, search_transactions

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transactions", tags=["search"])


@router.post("/search")
async def search(
    body: SearchRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    """Run a faceted transaction search for the requesting user."""
    return await search_transactions(
        db, cache, body, user_id,
        json_pushdown=get_settings().search_json_pushdown,
    )


@router.get("/search")
async def filter_options(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Books, generic subjects and tags available as search filters."""
    return await get_filter_options(db, user_id)


@router.post("/clear-cache")
async def clear_cache(
    user_id: UUID = Depends(get_current_user_id),
    cache: SearchResultCache = Depends(get_search_cache),
):
    removed = cache.clear()
    logger.info(
        f"Search cache cleared ({removed} entries)",
        extra={"user_id": str(user_id)},
    )
    return {"message": "Cache cleared successfully", "removed": removed}
