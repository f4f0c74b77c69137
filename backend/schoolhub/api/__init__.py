"""API Layer: FastAPI routes, guards, response shaping and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every response body is JSON; errors use the {"error", "details"?} envelope

Design Decisions:
    - Guards are dependencies, so authorization runs before body validation
"""
