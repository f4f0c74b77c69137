"""Core Layer: pure domain types, errors, and token codec. No IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or models/
    - Secrets and clocks arrive as parameters, never read from settings
"""
