"""Service test fixtures — async DB, seeded catalog, tokens, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the same pragmas
      as production SQLite engines (case-sensitive LIKE, foreign keys)
    - get_db and get_search_cache dependencies overridden per test
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency; JSON path and LIKE
      expressions compile for both SQLite and PostgreSQL
    - Tokens minted with PyJWT using the test secret from the root conftest
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.db.base import Base
from app.api.deps import get_search_cache
from app.infrastructure.database import (
    get_db, DatabaseSessionManager, apply_sqlite_pragmas,
)
import app.infrastructure.database as db_module
from app.main import app
from app.models import (
    Book, BookEditor, GenericSubject, SummaryTransaction, Tag, User,
)
from app.services.search_cache import SearchResultCache
from tests.services.auth_tokens import make_token


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    apply_sqlite_pragmas(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def search_cache():
    return SearchResultCache(ttl_seconds=180.0, max_entries=100)


@pytest.fixture
async def client(test_engine, test_session_factory, search_cache):
    """FastAPI test client with DB and cache dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_search_cache] = lambda: search_cache

    previous_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = previous_manager


# ─── Catalog seed ───────────────────────────────────────────────

@pytest.fixture
async def user_a(test_db):
    user = User(email="a@example.com", name="Reader A")
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def user_b(test_db):
    user = User(email="b@example.com", name="Reader B")
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
def auth_a(user_a):
    return {"Authorization": f"Bearer {make_token(user_a.id)}"}


@pytest.fixture
def auth_b(user_b):
    return {"Authorization": f"Bearer {make_token(user_b.id)}"}


def _tx(user, book, sr_no, title, **fields) -> SummaryTransaction:
    return SummaryTransaction(
        id=uuid4(), user_id=user.id, book_id=book.id, sr_no=sr_no,
        title=title, **fields,
    )


@pytest.fixture
async def catalog(test_db, user_a, user_b):
    """Two users, three books, shared taxonomy and linked transactions.

    User A, "Physics Notes" (book1):
        1 "Heat energy transfer"      rating High    subjects Physics / tags Thermo
        2 "Heat only"                 rating None    Physics+Chemistry / -
        3 "Energy of motion"          rating Medium  Chemistry / Mechanics
        4 "Deep Learning basics"      rating None    - / Neural Networks
        5 "Learning deep structures"  rating low     - / Neural Networks+Thermo
        6 "Shallow learning"          rating None    - / -
    User A, "Chemistry Book" (book2):
        1 "Heat energy in reactions"
    User B, "Other Shelf":
        1 "Deep learning for B", 2 "heat energy B"
    """
    physics = GenericSubject(id=uuid4(), name="Physics", description="Physical sciences")
    chemistry = GenericSubject(id=uuid4(), name="Chemistry")
    thermo = Tag(id=uuid4(), name="Thermodynamics", category="Physics")
    mechanics = Tag(id=uuid4(), name="Mechanics", category="Physics")
    neural = Tag(id=uuid4(), name="Neural Networks", category="Computing")

    book1 = Book(
        id=uuid4(), user_id=user_a.id, library_number="LIB-001",
        book_name="Physics Notes",
        editors=[BookEditor(name="R. Feynman", role="Author")],
    )
    book2 = Book(
        id=uuid4(), user_id=user_a.id, library_number="LIB-002",
        book_name="Chemistry Book",
    )
    book_b = Book(
        id=uuid4(), user_id=user_b.id, library_number="LIB-001",
        book_name="Other Shelf",
    )
    test_db.add_all([physics, chemistry, thermo, mechanics, neural, book1, book2, book_b])
    await test_db.flush()

    txs = {
        "t1": _tx(
            user_a, book1, 1, "Heat energy transfer",
            information_rating="High", remark="core concept",
            relevant_paragraph={
                "english": "Heat flows from hot to cold",
                "hindi": "ऊष्मा गर्म से ठंडे की ओर बहती है",
            },
            page_no="12", paragraph_no="3",
            generic_subjects=[physics], specific_tags=[thermo],
        ),
        "t2": _tx(
            user_a, book1, 2, "Heat only",
            remark="partial", relevant_paragraph={"english": "Only heat here"},
            generic_subjects=[physics, chemistry],
        ),
        "t3": _tx(
            user_a, book1, 3, "Energy of motion",
            information_rating="Medium",
            relevant_paragraph={"english": "kinetic energy", "gujarati": "ગતિ ઊર્જા"},
            generic_subjects=[chemistry], specific_tags=[mechanics],
        ),
        "t4": _tx(
            user_a, book1, 4, "Deep Learning basics",
            remark="100% useful_note",
            relevant_paragraph={"english": "layers of neurons"},
            specific_tags=[neural],
        ),
        "t5": _tx(
            user_a, book1, 5, "Learning deep structures",
            information_rating="low", foot_note="see appendix",
            specific_tags=[neural, thermo],
        ),
        "t6": _tx(user_a, book1, 6, "Shallow learning"),
        "t7": _tx(user_a, book2, 1, "Heat energy in reactions"),
        "b1": _tx(user_b, book_b, 1, "Deep learning for B"),
        "b2": _tx(user_b, book_b, 2, "heat energy B"),
    }
    test_db.add_all(txs.values())
    await test_db.commit()
    # later queries load fresh rows with their eager relationships
    test_db.expunge_all()

    return {
        "books": {"book1": book1, "book2": book2, "book_b": book_b},
        "subjects": {"physics": physics, "chemistry": chemistry},
        "tags": {"thermo": thermo, "mechanics": mechanics, "neural": neural},
        "tx": txs,
    }
