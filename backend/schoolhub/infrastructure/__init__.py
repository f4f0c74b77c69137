"""Infrastructure Layer: database engine, pooling, and logging setup.

Invariants:
    - SQLAlchemy exceptions never escape infrastructure unmapped
    - Logging configured once per process

Design Decisions:
    - Process-wide singletons (db_manager) initialized from the FastAPI lifespan
"""
