"""Parent Children: bulk management of one parent's linked students.

Invariants:
    - The parent is addressed by profile id and must belong to the caller's school
    - Bulk linking is all-or-nothing on validation: one foreign or unknown
      student id rejects the whole request
    - Linking an already linked student is a no-op, so the call is repeatable
    - Unlinking a student that is not linked succeeds without effect

Design Decisions:
    - Admin-only even for the read: the list exists to drive the linking form
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.api.guards import require_admin
from schoolhub.api.serializers import student_summary
from schoolhub.core.domain_types import SessionUser
from schoolhub.core.errors import InvalidOperationError
from schoolhub.infrastructure.database import get_db
from schoolhub.models import (
    ParentProfile, ParentStudent, SchoolClass, Section, StudentProfile, User,
)
from schoolhub.schemas.parent_students import ChildrenLink
from schoolhub.services import scoping
from schoolhub.services.persistence import (
    commit_or_conflict, fetch_all, fetch_one_or_404,
)

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/parents/{parent_id}/children", tags=["parent-children"],
)


async def _parent_or_404(
    db: AsyncSession, parent_id: str, school_id: str,
) -> ParentProfile:
    return await fetch_one_or_404(
        db, scoping.parent_in_school(parent_id, school_id), "Parent", parent_id,
    )


def _linked_student_ids(parent_id: str):
    return select(ParentStudent.student_id).where(
        ParentStudent.parent_id == parent_id,
    )


@router.get("")
async def list_linkable_students(
    parent_id: str,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Students of the school not yet linked to this parent, by class, section, name."""
    parent = await _parent_or_404(db, parent_id, session.school_id)
    students = await fetch_all(
        db,
        scoping.students_of_school(session.school_id)
        .where(StudentProfile.id.not_in(_linked_student_ids(parent.id)))
        .join(User, StudentProfile.user_id == User.id)
        .outerjoin(Section, StudentProfile.section_id == Section.id)
        .outerjoin(SchoolClass, Section.class_id == SchoolClass.id)
        .options(
            selectinload(StudentProfile.section)
            .selectinload(Section.school_class),
        )
        .order_by(SchoolClass.name, Section.name, User.first_name),
    )
    return {
        "students": [
            student_summary(s, include_section=True) for s in students
        ],
    }


@router.post("")
async def link_children(
    parent_id: str,
    body: ChildrenLink,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Link every listed student to the parent, skipping existing links."""
    parent = await _parent_or_404(db, parent_id, session.school_id)
    wanted = list(dict.fromkeys(body.student_ids))

    found = await db.execute(
        scoping.students_of_school(session.school_id)
        .where(StudentProfile.id.in_(wanted))
        .with_only_columns(StudentProfile.id),
    )
    if len(found.all()) != len(wanted):
        raise InvalidOperationError("Some students were not found")

    already = set(
        (await db.execute(_linked_student_ids(parent.id))).scalars().all(),
    )
    new_ids = [i for i in wanted if i not in already]
    db.add_all(
        ParentStudent(parent_id=parent.id, student_id=i) for i in new_ids
    )
    await commit_or_conflict(db, "This parent is already linked to this student")
    logger.info(
        f"Linked {len(new_ids)} students to parent {parent.id}",
        extra={"school_id": session.school_id, "resource_id": parent.id},
    )
    return {"success": True, "linked": len(new_ids)}


@router.delete("")
async def unlink_child(
    parent_id: str,
    student_id: str | None = Query(None, alias="studentId"),
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not student_id:
        raise InvalidOperationError("studentId is required")
    parent = await _parent_or_404(db, parent_id, session.school_id)
    await db.execute(
        delete(ParentStudent).where(
            ParentStudent.parent_id == parent.id,
            ParentStudent.student_id == student_id,
        ),
    )
    await db.commit()
    return {"success": True}
