"""Database Session Manager: async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - SQLAlchemy exceptions escaping a route are mapped to DatabaseError (core/errors.py)
    - SQLite connections run with foreign keys enforced (ON DELETE CASCADE relies on it)
    - A failed health check reports a fixed message; driver errors are only logged

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Sessions take their connection up front so waiting_clients can be counted;
      SQLAlchemy's queue pool does not expose its waiter count
"""

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from schoolhub.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Reported to health checks; the underlying error (host, user) stays in the log
HEALTH_CHECK_FAILED = "Database unreachable"


@dataclass(frozen=True)
class PoolStats:
    total_connections: int
    idle_connections: int
    waiting_clients: int

    def to_dict(self) -> dict:
        return {
            "totalConnections": self.total_connections,
            "idleConnections": self.idle_connections,
            "waitingClients": self.waiting_clients,
        }


@dataclass(frozen=True)
class HealthCheckResult:
    healthy: bool
    latency_ms: int
    pool_stats: PoolStats
    error: str | None = None

    def to_dict(self) -> dict:
        body = {
            "status": "healthy" if self.healthy else "unhealthy",
            "latencyMs": self.latency_ms,
            "poolStats": self.pool_stats.to_dict(),
        }
        if self.error:
            body["error"] = self.error
        return body


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement for every new SQLite connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_timeout: int = 10,
        pool_recycle: int = 1800,
    ):
        if database_url.startswith("sqlite"):
            self.engine = create_async_engine(database_url)
            enable_sqlite_foreign_keys(self.engine)
        else:
            self.engine = create_async_engine(
                database_url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_pre_ping=True,
                pool_recycle=pool_recycle,
            )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._waiting = 0

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            self._waiting += 1
            try:
                await session.connection()
            finally:
                self._waiting -= 1
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise DatabaseError("Integrity constraint violated", "commit")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DatabaseError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown")
        finally:
            await session.close()

    def pool_stats(self) -> PoolStats:
        """Snapshot of the connection pool without touching the database."""
        pool = self.engine.pool
        idle = pool.checkedin() if hasattr(pool, "checkedin") else 0
        in_use = pool.checkedout() if hasattr(pool, "checkedout") else 0
        return PoolStats(
            total_connections=idle + in_use,
            idle_connections=idle,
            waiting_clients=self._waiting,
        )

    async def health_check(self) -> HealthCheckResult:
        """Round-trip SELECT 1 and report latency plus pool statistics."""
        start = time.perf_counter()
        error = None
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"DB health check failed: {e}", exc_info=True)
            error = HEALTH_CHECK_FAILED
        latency_ms = int((time.perf_counter() - start) * 1000)
        return HealthCheckResult(
            healthy=error is None,
            latency_ms=latency_ms,
            pool_stats=self.pool_stats(),
            error=error,
        )

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
