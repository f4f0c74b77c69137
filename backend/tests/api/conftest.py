"""API test fixtures: async DB, FastAPI test client and a seeding helper.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys on
    - get_db dependency overridden to use the test session factory
    - db_manager patched so the health routes see the test engine
    - Seed rows are written through short-lived sessions, never the request's

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific behaviour is not exercised here)
    - StaticPool: one shared connection keeps the in-memory database alive
    - Two-school fixtures so every suite can check tenant isolation
"""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

import schoolhub.infrastructure.database as db_module
from schoolhub.api.guards import session_token_for
from schoolhub.config import get_settings
from schoolhub.core.domain_types import UserRole
from schoolhub.db.base import Base
from schoolhub.infrastructure.database import (
    DatabaseSessionManager, enable_sqlite_foreign_keys, get_db,
)
from schoolhub.main import app
from schoolhub.models import (
    FeeInvoice, FeeStructure, ParentProfile, SchoolClass, School, Section,
    StudentProfile, Subject, TeacherProfile, User,
)


class Seeder:
    """Writes fixture rows, each call in its own committed session."""

    def __init__(self, session_factory):
        self._factory = session_factory
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def add(self, *rows):
        async with self._factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows[0]

    async def school(self, name: str = "Springfield High") -> School:
        return await self.add(
            School(name=name, subdomain=f"school-{self._next()}"),
        )

    async def user(
        self, school, role: str = UserRole.ADMIN.value, *,
        first_name: str = "Ada", last_name: str = "Admin",
        is_active: bool = True,
    ) -> User:
        n = self._next()
        return await self.add(User(
            school_id=school.id, role=role, first_name=first_name,
            last_name=last_name, email=f"user{n}@example.com",
            is_active=is_active,
        ))

    async def teacher(
        self, school, first_name: str = "Tom", last_name: str = "Teacher",
        *, is_active: bool = True,
    ) -> TeacherProfile:
        user = await self.user(
            school, UserRole.TEACHER.value, first_name=first_name,
            last_name=last_name, is_active=is_active,
        )
        return await self.add(
            TeacherProfile(user_id=user.id, employee_id=f"EMP-{self._next()}"),
        )

    async def student(
        self, school, section=None, first_name: str = "Sam",
    ) -> StudentProfile:
        user = await self.user(
            school, UserRole.STUDENT.value, first_name=first_name,
            last_name="Student",
        )
        return await self.add(StudentProfile(
            user_id=user.id,
            section_id=section.id if section else None,
            roll_number=str(self._next()),
        ))

    async def parent(self, school, first_name: str = "Pat") -> ParentProfile:
        user = await self.user(
            school, UserRole.PARENT.value, first_name=first_name,
            last_name="Parent",
        )
        return await self.add(
            ParentProfile(user_id=user.id, occupation="Engineer"),
        )

    async def school_class(
        self, school, name: str = "Grade 1", display_order: int = 1,
        sections: tuple[str, ...] = ("A",),
    ) -> SchoolClass:
        school_class = SchoolClass(
            school_id=school.id, name=name, display_order=display_order,
        )
        school_class.sections = [Section(name=s) for s in sections]
        return await self.add(school_class)

    async def subject(self, school_class, name: str = "Mathematics") -> Subject:
        return await self.add(
            Subject(class_id=school_class.id, name=name, code="MATH"),
        )

    async def fee_structure(
        self, school, name: str = "Tuition", school_class=None,
        amount: float = 1500.0,
    ) -> FeeStructure:
        return await self.add(FeeStructure(
            school_id=school.id,
            class_id=school_class.id if school_class else None,
            name=name, amount=amount, frequency="MONTHLY", due_day=10,
        ))

    async def invoice(self, fee_structure, student) -> FeeInvoice:
        return await self.add(FeeInvoice(
            school_id=fee_structure.school_id,
            fee_structure_id=fee_structure.id,
            student_id=student.id,
            amount=fee_structure.amount,
            due_date=date(2026, 1, 10),
        ))


def auth_headers(user) -> dict[str, str]:
    token = session_token_for(user, get_settings())
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def client(test_engine, session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = session_factory
    fake_manager._waiting = 0
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture
async def school(seed):
    return await seed.school()


@pytest.fixture
async def admin(seed, school):
    return await seed.user(school, UserRole.ADMIN.value)


@pytest.fixture
def auth(admin):
    """Headers of an ADMIN of `school`."""
    return auth_headers(admin)


@pytest.fixture
async def teacher_auth(seed, school):
    """Headers of a TEACHER of `school`: may read, may not mutate."""
    user = await seed.user(school, UserRole.TEACHER.value, first_name="Reader")
    return auth_headers(user)


@pytest.fixture
async def other_school(seed):
    return await seed.school("Shelbyville Elementary")


@pytest.fixture
async def other_auth(seed, other_school):
    """Headers of an ADMIN of `other_school`."""
    return auth_headers(await seed.user(other_school, UserRole.ADMIN.value))


@pytest.fixture
def headers_for():
    """Build bearer headers for any seeded user."""
    return auth_headers
