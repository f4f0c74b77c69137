"""Root conftest: shared test configuration."""

import os

# Tests never talk to a real database or use a production signing key
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("LOG_FORMAT", "text")
