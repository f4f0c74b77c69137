"""Students: the admin roster with filtering, search, sorting and pagination.

Invariants:
    - Only students of the caller's school are listed
    - sectionId wins over classId when both are given
    - total counts every matching student, not just the current page
"""

import math
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.api.guards import require_admin
from schoolhub.api.serializers import student_listing_row
from schoolhub.core.domain_types import SessionUser
from schoolhub.infrastructure.database import get_db
from schoolhub.models import SchoolClass, Section, StudentProfile, User
from schoolhub.services import scoping
from schoolhub.services.persistence import fetch_all

router = APIRouter(prefix="/api/v1/students", tags=["students"])

_SORT_COLUMNS = {
    "name": User.first_name,
    "rollNumber": StudentProfile.roll_number,
    "class": SchoolClass.name,
    "createdAt": User.created_at,
}


@router.get("")
async def list_students(
    class_id: str | None = Query(None, alias="classId"),
    section_id: str | None = Query(None, alias="sectionId"),
    status: Literal["active", "inactive"] | None = Query(None),
    search: str | None = Query(None, max_length=100),
    sort_by: Literal["name", "rollNumber", "class", "createdAt"] = Query(
        "createdAt", alias="sortBy",
    ),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    stmt = (
        scoping.students_of_school(session.school_id)
        .join(User, StudentProfile.user_id == User.id)
        .outerjoin(Section, StudentProfile.section_id == Section.id)
        .outerjoin(SchoolClass, Section.class_id == SchoolClass.id)
    )
    if section_id:
        stmt = stmt.where(StudentProfile.section_id == section_id)
    elif class_id:
        stmt = stmt.where(Section.class_id == class_id)
    if status is not None:
        stmt = stmt.where(User.is_active.is_(status == "active"))
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
            User.email.ilike(pattern),
            User.phone.ilike(pattern),
            StudentProfile.roll_number.ilike(pattern),
        ))

    total = (
        await db.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()

    column = _SORT_COLUMNS[sort_by]
    students = await fetch_all(
        db,
        stmt.options(
            selectinload(StudentProfile.section)
            .selectinload(Section.school_class),
            selectinload(StudentProfile.parents),
        )
        .order_by(column.asc() if sort_order == "asc" else column.desc())
        .order_by(StudentProfile.id)
        .offset((page - 1) * limit)
        .limit(limit),
    )
    return {
        "students": [student_listing_row(s) for s in students],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        },
    }
