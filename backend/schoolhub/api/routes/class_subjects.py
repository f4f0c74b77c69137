"""Class Subjects: subjects of a class and the teachers assigned to them.

Invariants:
    - A subject is addressed by (class id, subject id) and scoped through
      class.school_id; the right subject id under the wrong class is 404
    - Subject names are unique per class
    - A teacher is assigned to a subject at most once
    - Removing a teacher from a subject also drops that teacher's
      section-level assignments for the subject
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.api.guards import get_current_session, require_admin
from schoolhub.api.serializers import (
    class_summary, section_subject_teacher_row, subject_teacher_assignment,
    subject_teacher_row, subject_to_dict,
)
from schoolhub.core.domain_types import SessionUser
from schoolhub.core.errors import (
    ConflictError, InvalidOperationError, ResourceNotFoundError,
)
from schoolhub.infrastructure.database import get_db
from schoolhub.models import SectionSubjectTeacher, Subject, TeacherSubject
from schoolhub.schemas.subjects import (
    SubjectCreate, SubjectUpdate, TeacherAssignment,
)
from schoolhub.services import scoping
from schoolhub.services.persistence import (
    commit_or_conflict, fetch_all, fetch_one_or_404,
)

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/classes/{class_id}/subjects", tags=["subjects"],
)

DUPLICATE_SUBJECT = "Subject with this name already exists in this class"
DUPLICATE_ASSIGNMENT = "Teacher is already assigned to this subject"


async def _subject_or_404(
    db: AsyncSession, class_id: str, subject_id: str, school_id: str, *options,
) -> Subject:
    return await fetch_one_or_404(
        db,
        scoping.subject_in_class(subject_id, class_id, school_id).options(*options),
        "Subject", subject_id,
    )


async def _name_taken(db: AsyncSession, class_id: str, name: str) -> bool:
    result = await db.execute(
        select(Subject.id).where(Subject.class_id == class_id, Subject.name == name),
    )
    return result.first() is not None


@router.get("")
async def list_subjects(
    class_id: str,
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Subjects of a class by name, each with its teachers flattened."""
    await fetch_one_or_404(
        db, scoping.class_in_school(class_id, session.school_id),
        "Class", class_id,
    )
    subjects = await fetch_all(
        db,
        select(Subject)
        .where(Subject.class_id == class_id)
        .options(selectinload(Subject.teachers))
        .order_by(Subject.name),
    )
    return {
        "subjects": [
            {
                **subject_to_dict(s),
                "teachers": [subject_teacher_row(t) for t in s.teachers],
            }
            for s in subjects
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subject(
    class_id: str,
    body: SubjectCreate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await fetch_one_or_404(
        db, scoping.class_in_school(class_id, session.school_id),
        "Class", class_id,
    )
    if await _name_taken(db, class_id, body.name):
        raise ConflictError(DUPLICATE_SUBJECT)

    subject = Subject(
        class_id=class_id, name=body.name, code=body.code, color=body.color,
    )
    db.add(subject)
    await commit_or_conflict(db, DUPLICATE_SUBJECT)
    logger.info(
        f"Subject created: {subject.name}",
        extra={"school_id": session.school_id, "resource_id": subject.id},
    )
    return {"subject": subject_to_dict(subject)}


@router.get("/{subject_id}")
async def get_subject(
    class_id: str,
    subject_id: str,
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Subject with its class, class-wide teachers and per-section teachers."""
    subject = await _subject_or_404(
        db, class_id, subject_id, session.school_id,
        selectinload(Subject.school_class),
        selectinload(Subject.teachers),
        selectinload(Subject.section_teachers),
    )
    return {
        "subject": {
            **subject_to_dict(subject),
            "class": class_summary(subject.school_class),
            "teachers": [subject_teacher_row(t) for t in subject.teachers],
            "sectionTeachers": [
                section_subject_teacher_row(st) for st in subject.section_teachers
            ],
        },
    }


@router.put("/{subject_id}")
async def update_subject(
    class_id: str,
    subject_id: str,
    body: SubjectUpdate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    subject = await _subject_or_404(db, class_id, subject_id, session.school_id)
    changes = body.supplied_fields()

    new_name = changes.get("name")
    if new_name and new_name != subject.name:
        if await _name_taken(db, class_id, new_name):
            raise ConflictError(DUPLICATE_SUBJECT)

    for field, value in changes.items():
        setattr(subject, field, value)
    await commit_or_conflict(db, DUPLICATE_SUBJECT)
    return {"subject": subject_to_dict(subject)}


@router.delete("/{subject_id}")
async def delete_subject(
    class_id: str,
    subject_id: str,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    subject = await _subject_or_404(db, class_id, subject_id, session.school_id)
    await db.delete(subject)
    await db.commit()
    logger.info(
        f"Subject deleted: {subject_id}",
        extra={"school_id": session.school_id, "resource_id": subject_id},
    )
    return {"success": True}


# ─── Subject teachers ───────────────────────────────────────────

@router.get("/{subject_id}/teachers")
async def list_subject_teachers(
    class_id: str,
    subject_id: str,
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    subject = await _subject_or_404(
        db, class_id, subject_id, session.school_id,
        selectinload(Subject.teachers),
    )
    return {
        "teachers": [subject_teacher_assignment(t) for t in subject.teachers],
    }


@router.post("/{subject_id}/teachers", status_code=status.HTTP_201_CREATED)
async def assign_subject_teacher(
    class_id: str,
    subject_id: str,
    body: TeacherAssignment,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _subject_or_404(db, class_id, subject_id, session.school_id)
    teacher = await fetch_one_or_404(
        db, scoping.teacher_in_school(body.teacher_id, session.school_id),
        "Teacher", body.teacher_id,
    )
    existing = await db.execute(
        select(TeacherSubject.id).where(
            TeacherSubject.teacher_id == teacher.id,
            TeacherSubject.subject_id == subject_id,
        ),
    )
    if existing.first() is not None:
        raise ConflictError(DUPLICATE_ASSIGNMENT)

    assignment = TeacherSubject(teacher_id=teacher.id, subject_id=subject_id)
    assignment.teacher = teacher
    db.add(assignment)
    await commit_or_conflict(db, DUPLICATE_ASSIGNMENT)
    return {"assignment": subject_teacher_assignment(assignment)}


@router.delete("/{subject_id}/teachers")
async def remove_subject_teacher(
    class_id: str,
    subject_id: str,
    teacher_id: str | None = Query(None, alias="teacherId"),
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Unassign a teacher (?teacherId=) from the subject and its sections."""
    if not teacher_id:
        raise InvalidOperationError("teacherId is required")
    await _subject_or_404(db, class_id, subject_id, session.school_id)

    removed = await db.execute(
        delete(TeacherSubject).where(
            TeacherSubject.teacher_id == teacher_id,
            TeacherSubject.subject_id == subject_id,
        ),
    )
    if removed.rowcount == 0:
        raise ResourceNotFoundError(
            "Assignment", message="Teacher is not assigned to this subject",
        )
    await db.execute(
        delete(SectionSubjectTeacher).where(
            SectionSubjectTeacher.teacher_id == teacher_id,
            SectionSubjectTeacher.subject_id == subject_id,
        ),
    )
    await db.commit()
    return {"success": True}
