"""Dashboard Routes — per-user catalog counters and chart series.

Invariants:
    - Book and transaction counts are scoped to the caller; subject and tag
      counts are global (shared taxonomy)
    - "This month" starts at 00:00 UTC on the first day of the current month
    - Monthly trend windows are half-open [month start, next month start),
      oldest first, always 12 of them ending with the current month
    - Transactions without an information rating are reported as "Unrated"
    - Top publishers skip books with no or blank publisher, at most 10
"""

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id
from app.infrastructure.database import get_db
from app.models.book import Book
from app.models.subject import GenericSubject, Tag
from app.models.summary_transaction import SummaryTransaction

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _shift_months(start: datetime, months: int) -> datetime:
    index = start.year * 12 + start.month - 1 + months
    return start.replace(year=index // 12, month=index % 12 + 1)


def month_windows(now: datetime, count: int = 12) -> list[tuple[datetime, datetime]]:
    """Consecutive month ranges ending with the month containing now."""
    current = month_start(now)
    return [
        (_shift_months(current, -i), _shift_months(current, -i + 1))
        for i in range(count - 1, -1, -1)
    ]


@router.get("/stats")
async def dashboard_stats(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    now = datetime.now(timezone.utc)
    since = month_start(now)

    total_books = await db.scalar(
        select(func.count(Book.id)).where(Book.user_id == user_id),
    )
    total_transactions = await db.scalar(
        select(func.count(SummaryTransaction.id))
        .where(SummaryTransaction.user_id == user_id),
    )
    new_books = await db.scalar(
        select(func.count(Book.id))
        .where(Book.user_id == user_id, Book.created_at >= since),
    )
    new_transactions = await db.scalar(
        select(func.count(SummaryTransaction.id))
        .where(
            SummaryTransaction.user_id == user_id,
            SummaryTransaction.created_at >= since,
        ),
    )
    return {
        "totalBooks": total_books or 0,
        "totalTransactions": total_transactions or 0,
        "totalGenericSubjects": await db.scalar(select(func.count(GenericSubject.id))) or 0,
        "totalSpecificTags": await db.scalar(select(func.count(Tag.id))) or 0,
        "newBooksThisMonth": new_books or 0,
        "newTransactionsThisMonth": new_transactions or 0,
        "lastUpdated": now.isoformat(),
    }


@router.get("/charts")
async def dashboard_charts(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Monthly book/transaction trends, rating distribution and top publishers."""
    now = datetime.now(timezone.utc)

    monthly_trends = []
    for start, end in month_windows(now):
        books = await db.scalar(
            select(func.count(Book.id)).where(
                Book.user_id == user_id,
                Book.created_at >= start, Book.created_at < end,
            ),
        )
        transactions = await db.scalar(
            select(func.count(SummaryTransaction.id)).where(
                SummaryTransaction.user_id == user_id,
                SummaryTransaction.created_at >= start,
                SummaryTransaction.created_at < end,
            ),
        )
        monthly_trends.append({
            "month": start.strftime("%b %Y"),
            "books": books or 0,
            "transactions": transactions or 0,
        })

    rating = SummaryTransaction.information_rating
    rating_count = func.count(SummaryTransaction.id)
    ratings = await db.execute(
        select(rating, rating_count)
        .where(SummaryTransaction.user_id == user_id)
        .group_by(rating)
        .order_by(rating_count.desc(), rating.asc()),
    )

    publisher = Book.publisher_name
    publisher_count = func.count(Book.id)
    publishers = await db.execute(
        select(publisher, publisher_count)
        .where(
            Book.user_id == user_id,
            publisher.is_not(None),
            func.trim(publisher) != "",
        )
        .group_by(publisher)
        .order_by(publisher_count.desc(), publisher.asc())
        .limit(10),
    )

    return {
        "monthlyTrends": monthly_trends,
        "ratingDistribution": [
            {"rating": name or "Unrated", "count": n} for name, n in ratings
        ],
        "topPublishers": [
            {"publisher": name, "count": n} for name, n in publishers
        ],
        "lastUpdated": now.isoformat(),
    }
