"""Pagination — page metadata for search results and list endpoints.

Invariants:
    - totalPages is ceil(totalCount / pageSize); 0 when nothing matched
    - hasNext / hasPrev derived from page and totalPages only
    - Pure functions: no IO
"""

import math


def offset_for(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def search_pagination(page: int, page_size: int, total_count: int) -> dict:
    """Pagination block of a search Result Page."""
    total_pages = math.ceil(total_count / page_size) if total_count else 0
    return {
        "page": page,
        "pageSize": page_size,
        "totalCount": total_count,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def list_pagination(page: int, limit: int, total: int) -> dict:
    """Pagination block of the plain list endpoints."""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
    }
