"""ORM Models — SQLAlchemy declarative models for all catalog entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the tenant root; books and transactions are scoped by user_id

Design Decisions:
    - One file per aggregate for locality (subjects and tags share a file with
      their association tables)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.user import User  # noqa: F401
from app.models.book import Book, BookEditor  # noqa: F401
from app.models.subject import GenericSubject, Tag  # noqa: F401
from app.models.summary_transaction import SummaryTransaction  # noqa: F401
