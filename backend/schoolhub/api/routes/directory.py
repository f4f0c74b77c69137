"""Directory: read-only listings of a school's parents and teachers."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.api.guards import get_current_session
from schoolhub.api.serializers import parent_to_dict, teacher_summary
from schoolhub.core.domain_types import SessionUser
from schoolhub.infrastructure.database import get_db
from schoolhub.models import (
    ParentProfile, ParentStudent, Section, StudentProfile, TeacherProfile, User,
)
from schoolhub.services import scoping
from schoolhub.services.persistence import fetch_all

router = APIRouter(prefix="/api/v1", tags=["directory"])


def _first_name_of(user_id_column):
    return (
        select(User.first_name)
        .where(User.id == user_id_column)
        .scalar_subquery()
    )


@router.get("/parents")
async def list_parents(
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Parents by first name, with their linked children and their sections."""
    parents = await fetch_all(
        db,
        scoping.parents_of_school(session.school_id)
        .options(
            selectinload(ParentProfile.children)
            .selectinload(ParentStudent.student)
            .selectinload(StudentProfile.section)
            .selectinload(Section.school_class),
        )
        .order_by(_first_name_of(ParentProfile.user_id)),
    )
    return {"parents": [parent_to_dict(p) for p in parents]}


@router.get("/teachers")
async def list_teachers(
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Active teachers by first name, user fields flattened."""
    teachers = await fetch_all(
        db,
        scoping.teachers_of_school(session.school_id)
        .order_by(_first_name_of(TeacherProfile.user_id)),
    )
    return {"teachers": [teacher_summary(t) for t in teachers]}
