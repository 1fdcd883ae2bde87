"""Pydantic Schemas — request/response contracts for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - camelCase on the wire, snake_case in Python (schemas/base.py)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
