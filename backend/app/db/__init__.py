"""Database Declarative Base — shared metadata for all ORM models.

Invariants:
    - Every model inherits from db.base.Base
    - Engines and sessions live in infrastructure/database.py, not here

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests and local runs
"""
