"""Subject Routes — shared taxonomy of generic subjects and specific tags.

Invariants:
    - Names are unique per taxonomy (409 on conflict)
    - A subject or tag still linked to any transaction cannot be deleted
    - Replace only moves the caller's own transactions and never creates a
      duplicate link
    - Every successful write invalidates the search cache after commit
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_search_cache
from app.core.domain_types import SubjectKind
from app.core.errors import (
    DuplicateRecordError, InvalidRequestError, RecordInUseError,
    ResourceNotFoundError,
)
from app.core.pagination import list_pagination, offset_for
from app.infrastructure.database import commit_or_conflict, get_db
from app.models.subject import (
    GenericSubject, Tag,
    transaction_generic_subjects, transaction_specific_tags,
)
from app.models.summary_transaction import SummaryTransaction
from app.schemas.subject import GenericSubjectWrite, SubjectReplace, TagWrite
from app.services.payloads import generic_subject_payload, tag_payload
from app.services.search_cache import SearchResultCache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/subjects", tags=["subjects"])

# kind -> (model, link table, link column name, label)
_TAXONOMY = {
    SubjectKind.GENERIC: (
        GenericSubject, transaction_generic_subjects,
        "generic_subject_id", "Generic subject",
    ),
    SubjectKind.SPECIFIC: (
        Tag, transaction_specific_tags, "tag_id", "Tag",
    ),
}


# ─── Helpers ────────────────────────────────────────────────────

async def _get_or_404(db: AsyncSession, kind: SubjectKind, item_id: UUID):
    model, _, _, label = _TAXONOMY[kind]
    item = await db.get(model, item_id)
    if item is None:
        raise ResourceNotFoundError(label, str(item_id))
    return item


async def _ensure_name_free(
    db: AsyncSession, kind: SubjectKind, name: str, exclude_id: UUID | None = None,
) -> None:
    model = _TAXONOMY[kind][0]
    query = select(model.id).where(model.name == name)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    if await db.scalar(query) is not None:
        raise DuplicateRecordError(_name_taken(kind))


def _name_taken(kind: SubjectKind) -> str:
    return f"{_TAXONOMY[kind][3]} name already exists"


async def _usage_counts(
    db: AsyncSession, kind: SubjectKind, ids: list[UUID],
) -> dict[UUID, int]:
    if not ids:
        return {}
    _, link, column_name, _ = _TAXONOMY[kind]
    column = link.c[column_name]
    rows = await db.execute(
        select(column, func.count()).where(column.in_(ids)).group_by(column),
    )
    return {item_id: n for item_id, n in rows}


async def _delete_unused(
    db: AsyncSession, cache: SearchResultCache, kind: SubjectKind, item_id: UUID,
) -> None:
    item = await _get_or_404(db, kind, item_id)
    if (await _usage_counts(db, kind, [item_id])).get(item_id, 0) > 0:
        raise RecordInUseError("Cannot delete a subject that is used by transactions")
    await db.delete(item)
    await db.commit()
    cache.invalidate()


# ─── Generic subjects ───────────────────────────────────────────

@router.get("/generic")
async def list_generic_subjects(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    search: str = Query("", max_length=500),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    conditions = []
    term = search.strip()
    if term:
        conditions.append(or_(
            GenericSubject.name.icontains(term, autoescape=True),
            GenericSubject.description.icontains(term, autoescape=True),
        ))
    total = await db.scalar(select(func.count(GenericSubject.id)).where(*conditions))
    result = await db.execute(
        select(GenericSubject)
        .where(*conditions)
        .order_by(GenericSubject.name.asc())
        .offset(offset_for(page, limit))
        .limit(limit),
    )
    subjects = list(result.scalars().all())
    counts = await _usage_counts(db, SubjectKind.GENERIC, [s.id for s in subjects])
    return {
        "genericSubjects": [
            {**generic_subject_payload(s), "transactionCount": counts.get(s.id, 0)}
            for s in subjects
        ],
        "pagination": list_pagination(page, limit, total or 0),
    }


@router.post("/generic", status_code=status.HTTP_201_CREATED)
async def create_generic_subject(
    body: GenericSubjectWrite,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    await _ensure_name_free(db, SubjectKind.GENERIC, body.name)
    subject = GenericSubject(name=body.name, description=body.description)
    db.add(subject)
    await commit_or_conflict(db, _name_taken(SubjectKind.GENERIC))
    cache.invalidate()
    return generic_subject_payload(subject)


@router.get("/generic/{subject_id}")
async def get_generic_subject(
    subject_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    subject = await _get_or_404(db, SubjectKind.GENERIC, subject_id)
    counts = await _usage_counts(db, SubjectKind.GENERIC, [subject_id])
    return {
        **generic_subject_payload(subject),
        "transactionCount": counts.get(subject_id, 0),
    }


@router.put("/generic/{subject_id}")
async def update_generic_subject(
    subject_id: UUID,
    body: GenericSubjectWrite,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    subject = await _get_or_404(db, SubjectKind.GENERIC, subject_id)
    await _ensure_name_free(db, SubjectKind.GENERIC, body.name, exclude_id=subject_id)
    subject.name = body.name
    subject.description = body.description
    await commit_or_conflict(db, _name_taken(SubjectKind.GENERIC))
    cache.invalidate()
    return generic_subject_payload(subject)


@router.delete("/generic/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_generic_subject(
    subject_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    await _delete_unused(db, cache, SubjectKind.GENERIC, subject_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── Specific tags ──────────────────────────────────────────────

@router.get("/tags")
async def list_tags(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    search: str = Query("", max_length=500),
    category: str = Query("", max_length=200),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List tags ordered by category then name."""
    conditions = []
    term = search.strip()
    if term:
        conditions.append(or_(
            Tag.name.icontains(term, autoescape=True),
            Tag.description.icontains(term, autoescape=True),
            Tag.category.icontains(term, autoescape=True),
        ))
    if category.strip():
        conditions.append(Tag.category.icontains(category.strip(), autoescape=True))

    total = await db.scalar(select(func.count(Tag.id)).where(*conditions))
    result = await db.execute(
        select(Tag)
        .where(*conditions)
        .order_by(Tag.category.asc(), Tag.name.asc())
        .offset(offset_for(page, limit))
        .limit(limit),
    )
    tags = list(result.scalars().all())
    counts = await _usage_counts(db, SubjectKind.SPECIFIC, [t.id for t in tags])
    return {
        "tags": [
            {**tag_payload(t), "transactionCount": counts.get(t.id, 0)}
            for t in tags
        ],
        "pagination": list_pagination(page, limit, total or 0),
    }


@router.post("/tags", status_code=status.HTTP_201_CREATED)
async def create_tag(
    body: TagWrite,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    await _ensure_name_free(db, SubjectKind.SPECIFIC, body.name)
    tag = Tag(name=body.name, category=body.category, description=body.description)
    db.add(tag)
    await commit_or_conflict(db, _name_taken(SubjectKind.SPECIFIC))
    cache.invalidate()
    return tag_payload(tag)


@router.get("/tags/{tag_id}")
async def get_tag(
    tag_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    tag = await _get_or_404(db, SubjectKind.SPECIFIC, tag_id)
    counts = await _usage_counts(db, SubjectKind.SPECIFIC, [tag_id])
    return {**tag_payload(tag), "transactionCount": counts.get(tag_id, 0)}


@router.put("/tags/{tag_id}")
async def update_tag(
    tag_id: UUID,
    body: TagWrite,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    tag = await _get_or_404(db, SubjectKind.SPECIFIC, tag_id)
    await _ensure_name_free(db, SubjectKind.SPECIFIC, body.name, exclude_id=tag_id)
    tag.name = body.name
    tag.category = body.category
    tag.description = body.description
    await commit_or_conflict(db, _name_taken(SubjectKind.SPECIFIC))
    cache.invalidate()
    return tag_payload(tag)


@router.delete("/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    await _delete_unused(db, cache, SubjectKind.SPECIFIC, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── Replace ────────────────────────────────────────────────────

@router.post("/replace")
async def replace_subject(
    body: SubjectReplace,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    cache: SearchResultCache = Depends(get_search_cache),
):
    """Relink the caller's transactions from wrongId to rightId."""
    model, link, column_name, label = _TAXONOMY[body.type]
    if await db.get(model, body.right_id) is None:
        raise InvalidRequestError(f"Correct {label.lower()} not found", field="rightId")

    column = link.c[column_name]
    tx_column = link.c.transaction_id
    owned = select(SummaryTransaction.id).where(SummaryTransaction.user_id == user_id)
    result = await db.execute(
        select(tx_column).where(column == body.wrong_id, tx_column.in_(owned)),
    )
    ids = list(result.scalars().all())
    if not ids:
        return {"updated": 0}

    already = await db.execute(
        select(tx_column).where(column == body.right_id, tx_column.in_(ids)),
    )
    already_linked = set(already.scalars().all())
    to_create = [i for i in ids if i not in already_linked]

    if to_create:
        await db.execute(insert(link), [
            {"transaction_id": i, column_name: body.right_id} for i in to_create
        ])
    await db.execute(
        delete(link).where(column == body.wrong_id, tx_column.in_(ids)),
    )
    await db.commit()
    cache.invalidate()
    logger.info(
        f"Replaced {label.lower()} {body.wrong_id} -> {body.right_id} "
        f"on {len(ids)} transactions",
        extra={"user_id": str(user_id)},
    )
    return {"updated": len(ids)}
