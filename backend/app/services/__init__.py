"""Services Layer — search compilation, caching, execution and payload shaping.

Invariants:
    - search_compiler is pure: request in, SQLAlchemy expressions out
    - search_cache holds no database handles
    - transaction_search is the only module that runs search queries

Design Decisions:
    - Compiler, cache and executor split so each is testable on its own
"""
