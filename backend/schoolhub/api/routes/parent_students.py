"""Parent-Student Links: which parents see which students.

Invariants:
    - A link belongs to the school of its parent's user
    - Both ends of a new link must be profiles of the caller's school
    - A (parent, student) pair is linked at most once
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.api.guards import get_current_session, require_admin
from schoolhub.api.serializers import parent_link_to_dict
from schoolhub.core.domain_types import SessionUser
from schoolhub.core.errors import ConflictError
from schoolhub.infrastructure.database import get_db
from schoolhub.models import (
    ParentProfile, ParentStudent, Section, StudentProfile, User,
)
from schoolhub.schemas.parent_students import ParentStudentCreate
from schoolhub.services import scoping
from schoolhub.services.persistence import (
    commit_or_conflict, fetch_all, fetch_one_or_404,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/parent-students", tags=["parent-students"])

DUPLICATE_LINK = "This parent is already linked to this student"

_student_section = (
    selectinload(ParentStudent.student)
    .selectinload(StudentProfile.section)
    .selectinload(Section.school_class)
)


@router.get("")
async def list_parent_students(
    parent_id: str | None = Query(None, alias="parentId"),
    student_id: str | None = Query(None, alias="studentId"),
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """School's links, optionally narrowed to one parent or one student."""
    stmt = scoping.parent_links_of_school(session.school_id)
    if parent_id:
        stmt = stmt.where(ParentStudent.parent_id == parent_id)
    if student_id:
        stmt = stmt.where(ParentStudent.student_id == student_id)

    parent_first_name = (
        select(User.first_name)
        .join(ParentProfile, ParentProfile.user_id == User.id)
        .where(ParentProfile.id == ParentStudent.parent_id)
        .scalar_subquery()
    )
    links = await fetch_all(
        db,
        stmt.options(_student_section)
        .order_by(parent_first_name, ParentStudent.created_at),
    )
    return {
        "links": [parent_link_to_dict(link, include_section=True) for link in links],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def link_parent_student(
    body: ParentStudentCreate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    parent = await fetch_one_or_404(
        db, scoping.parent_in_school(body.parent_id, session.school_id),
        "Parent", body.parent_id,
    )
    student = await fetch_one_or_404(
        db, scoping.student_in_school(body.student_id, session.school_id),
        "Student", body.student_id,
    )
    existing = await db.execute(
        select(ParentStudent.id).where(
            ParentStudent.parent_id == parent.id,
            ParentStudent.student_id == student.id,
        ),
    )
    if existing.first() is not None:
        raise ConflictError(DUPLICATE_LINK)

    link = ParentStudent(parent_id=parent.id, student_id=student.id)
    db.add(link)
    await commit_or_conflict(db, DUPLICATE_LINK)
    logger.info(
        f"Parent {parent.id} linked to student {student.id}",
        extra={"school_id": session.school_id, "resource_id": link.id},
    )
    link = await fetch_one_or_404(
        db,
        scoping.parent_link_in_school(link.id, session.school_id)
        .options(_student_section)
        .execution_options(populate_existing=True),
        "Link", link.id,
    )
    return {"link": parent_link_to_dict(link, include_section=True)}


@router.delete("/{link_id}")
async def unlink_parent_student(
    link_id: str,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    link = await fetch_one_or_404(
        db, scoping.parent_link_in_school(link_id, session.school_id),
        "Link", link_id,
    )
    await db.delete(link)
    await db.commit()
    return {"success": True}
