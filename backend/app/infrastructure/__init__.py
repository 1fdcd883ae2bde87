"""Infrastructure Layer — database engine/sessions and logging setup.

Invariants:
    - Infrastructure only imports core/errors from the core layer
    - SQLAlchemy exceptions are mapped to DatabaseError at the session boundary

Design Decisions:
    - One module per concern: database.py, observability.py
"""
