"""Database Package: declarative Base and shared column helpers.

Invariants:
    - Engine and sessions live in infrastructure/database.py, not here
    - Every model imports Base from db/base.py
"""
