"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Every endpoint except health resolves the caller through api/deps.py

Design Decisions:
    - Explicit registration in main.py over auto-discovery
    - transaction_search is registered before transactions so GET
      /transactions/search never reaches the /{transaction_id} route
"""
