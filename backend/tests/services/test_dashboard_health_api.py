"""Dashboard and health probes.

Invariants:
    - Dashboard counts books/transactions per caller, subjects/tags globally
    - Chart series cover the caller's data only: 12 monthly windows, rating
      buckets with "Unrated" for missing ratings, top non-blank publishers
    - Liveness always 200; readiness 200 when the database answers
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from app.api.routes.dashboard import month_windows
from app.models.book import Book


async def test_dashboard_stats(client, catalog, auth_a):
    res = await client.get("/api/v1/dashboard/stats", headers=auth_a)
    assert res.status_code == 200
    data = res.json()
    assert data["totalBooks"] == 2
    assert data["totalTransactions"] == 7
    assert data["totalGenericSubjects"] == 2
    assert data["totalSpecificTags"] == 3
    assert data["newBooksThisMonth"] == 2
    assert data["newTransactionsThisMonth"] == 7


async def test_dashboard_requires_auth(client):
    res = await client.get("/api/v1/dashboard/stats")
    assert res.status_code == 401


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


def test_month_windows_cross_year_boundary():
    windows = month_windows(datetime(2026, 2, 15, 9, 30, tzinfo=timezone.utc))
    assert len(windows) == 12
    assert windows[0][0] == datetime(2025, 3, 1, tzinfo=timezone.utc)
    assert windows[-1] == (
        datetime(2026, 2, 1, tzinfo=timezone.utc),
        datetime(2026, 3, 1, tzinfo=timezone.utc),
    )
    assert all(prev[1] == nxt[0] for prev, nxt in zip(windows, windows[1:]))


def test_month_windows_december_ends_in_january():
    windows = month_windows(datetime(2025, 12, 3, tzinfo=timezone.utc), count=2)
    assert windows == [
        (datetime(2025, 11, 1, tzinfo=timezone.utc), datetime(2025, 12, 1, tzinfo=timezone.utc)),
        (datetime(2025, 12, 1, tzinfo=timezone.utc), datetime(2026, 1, 1, tzinfo=timezone.utc)),
    ]


async def test_dashboard_charts(client, test_db, catalog, user_a, user_b, auth_a):
    now = datetime.now(timezone.utc)
    previous_month = month_windows(now)[-2][0] + timedelta(days=1)

    def book(owner, number, publisher, created_at=None):
        extra = {"created_at": created_at} if created_at else {}
        return Book(
            id=uuid4(), user_id=owner.id, library_number=number,
            book_name=f"Book {number}", publisher_name=publisher, **extra,
        )

    test_db.add_all([
        book(user_a, "LIB-901", "Dover", previous_month),
        book(user_a, "LIB-902", "Dover"),
        book(user_a, "LIB-903", "Dover", now - timedelta(days=800)),
        book(user_a, "LIB-904", "Penguin"),
        book(user_a, "LIB-905", "   "),
        book(user_b, "LIB-906", "Springer"),
    ])
    await test_db.commit()

    res = await client.get("/api/v1/dashboard/charts", headers=auth_a)
    assert res.status_code == 200
    data = res.json()

    trends = data["monthlyTrends"]
    assert len(trends) == 12
    assert trends[-1]["month"] == now.strftime("%b %Y")
    assert trends[-1]["books"] == 5
    assert trends[-1]["transactions"] == 7
    assert trends[-2]["books"] == 1
    assert trends[-2]["transactions"] == 0
    assert sum(t["books"] for t in trends) == 6

    ratings = data["ratingDistribution"]
    assert ratings[0] == {"rating": "Unrated", "count": 4}
    assert {(r["rating"], r["count"]) for r in ratings[1:]} == {
        ("High", 1), ("Medium", 1), ("low", 1),
    }

    assert data["topPublishers"] == [
        {"publisher": "Dover", "count": 3},
        {"publisher": "Penguin", "count": 1},
    ]


async def test_dashboard_charts_requires_auth(client):
    res = await client.get("/api/v1/dashboard/charts")
    assert res.status_code == 401
