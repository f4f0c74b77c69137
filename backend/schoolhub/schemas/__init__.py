"""Pydantic Schemas: request validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary (request bodies only)
    - JSON field names are camelCase; Python attributes are snake_case

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
