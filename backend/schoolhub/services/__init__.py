"""Services Layer: tenant scoping predicates and persistence helpers shared by routes.

Invariants:
    - Every lookup of a tenant-owned row goes through a scoping predicate
    - Routes never build their own tenant filters
"""
