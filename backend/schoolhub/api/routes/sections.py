"""Sections: listing, update/delete, the class-teacher slot and per-section subject teachers.

Invariants:
    - Sections are scoped through their class's school_id
    - A section with enrolled students cannot be deleted
    - The class-teacher slot is keyed by section_id: assigning to an occupied
      slot replaces the teacher, so a section never has two class teachers
    - A subject of the section's class has at most one teacher in the section,
      and only a teacher assigned to that subject class-wide can take it
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.api.guards import get_current_session, require_admin
from schoolhub.api.serializers import (
    class_teacher_to_dict, section_subject_assignment, section_subject_overview,
    section_to_dict, teacher_name,
)
from schoolhub.core.domain_types import SessionUser
from schoolhub.core.errors import (
    ConflictError, InvalidOperationError, ResourceNotFoundError,
)
from schoolhub.db.base import utc_now
from schoolhub.infrastructure.database import get_db
from schoolhub.models import (
    SchoolClass, Section, SectionSubjectTeacher, SectionTeacher, StudentProfile,
    Subject, TeacherSubject,
)
from schoolhub.schemas.classes import SectionUpdate
from schoolhub.schemas.subjects import SectionSubjectAssignment, TeacherAssignment
from schoolhub.services import scoping
from schoolhub.services.persistence import (
    commit_or_conflict, count_grouped, fetch_all, fetch_one_or_404,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sections", tags=["sections"])

DUPLICATE_SECTION = "A section with this name already exists in this class"


@router.get("")
async def list_sections(
    class_id: str | None = Query(None, alias="classId"),
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Sections of the school, ordered by class display order then name."""
    sections = await fetch_all(
        db,
        scoping.sections_of_school(session.school_id, class_id)
        .options(selectinload(Section.school_class))
        .order_by(SchoolClass.display_order, Section.name),
    )
    students = await count_grouped(
        db, StudentProfile.section_id, [s.id for s in sections],
    )
    return {
        "sections": [
            section_to_dict(
                s, counts={"students": students[s.id]}, include_class=True,
            )
            for s in sections
        ],
    }


@router.put("/{section_id}")
async def update_section(
    section_id: str,
    body: SectionUpdate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    section = await fetch_one_or_404(
        db, scoping.section_in_school(section_id, session.school_id),
        "Section", section_id,
    )
    changes = body.supplied_fields()

    new_name = changes.get("name")
    if new_name and new_name != section.name:
        duplicate = await db.execute(
            select(Section.id).where(
                Section.id != section_id,
                Section.class_id == section.class_id,
                Section.name == new_name,
            ),
        )
        if duplicate.first() is not None:
            raise ConflictError(DUPLICATE_SECTION)

    for field, value in changes.items():
        setattr(section, field, value)
    await commit_or_conflict(db, DUPLICATE_SECTION)
    return {"section": section_to_dict(section)}


@router.delete("/{section_id}")
async def delete_section(
    section_id: str,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    section = await fetch_one_or_404(
        db, scoping.section_in_school(section_id, session.school_id),
        "Section", section_id,
    )
    students = await count_grouped(db, StudentProfile.section_id, [section.id])
    if students[section.id] > 0:
        raise InvalidOperationError(
            "Cannot delete section with students. Move or remove students first.",
        )

    await db.delete(section)
    await db.commit()
    logger.info(
        f"Section deleted: {section_id}",
        extra={"school_id": session.school_id, "resource_id": section_id},
    )
    return {"success": True}


# ─── Class teacher slot ─────────────────────────────────────────

async def _class_teacher_slot(db: AsyncSession, section_id: str):
    result = await db.execute(
        select(SectionTeacher).where(SectionTeacher.section_id == section_id),
    )
    return result.unique().scalar_one_or_none()


@router.get("/{section_id}/class-teacher")
async def get_class_teacher(
    section_id: str,
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    await fetch_one_or_404(
        db, scoping.section_in_school(section_id, session.school_id),
        "Section", section_id,
    )
    slot = await _class_teacher_slot(db, section_id)
    return {"classTeacher": class_teacher_to_dict(slot) if slot else None}


@router.post("/{section_id}/class-teacher", status_code=status.HTTP_201_CREATED)
async def assign_class_teacher(
    section_id: str,
    body: TeacherAssignment,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Upsert the section's class-teacher slot: assign and replace are one operation."""
    await fetch_one_or_404(
        db, scoping.section_in_school(section_id, session.school_id),
        "Section", section_id,
    )
    teacher = await fetch_one_or_404(
        db, scoping.teacher_in_school(body.teacher_id, session.school_id),
        "Teacher", body.teacher_id,
    )

    slot = await _class_teacher_slot(db, section_id)
    if slot is None:
        slot = SectionTeacher(section_id=section_id, teacher_id=teacher.id)
        db.add(slot)
    else:
        slot.teacher_id = teacher.id
        slot.assigned_at = utc_now()
    slot.teacher = teacher
    await commit_or_conflict(db, "Section already has a class teacher")
    logger.info(
        f"Class teacher {teacher.id} assigned to section {section_id}",
        extra={"school_id": session.school_id, "resource_id": section_id},
    )
    return {"classTeacher": class_teacher_to_dict(slot)}


@router.delete("/{section_id}/class-teacher")
async def remove_class_teacher(
    section_id: str,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await fetch_one_or_404(
        db, scoping.section_in_school(section_id, session.school_id),
        "Section", section_id,
    )
    slot = await _class_teacher_slot(db, section_id)
    if slot is None:
        raise ResourceNotFoundError(
            "Class teacher", message="Class teacher not assigned",
        )
    await db.delete(slot)
    await db.commit()
    return {"success": True}


# ─── Subject teachers per section ───────────────────────────────

@router.get("/{section_id}/subjects")
async def list_section_subjects(
    section_id: str,
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Subjects of the section's class, who teaches each here and who could."""
    section = await fetch_one_or_404(
        db,
        scoping.section_in_school(section_id, session.school_id)
        .options(selectinload(Section.school_class)),
        "Section", section_id,
    )
    subjects = await fetch_all(
        db,
        select(Subject)
        .where(Subject.class_id == section.class_id)
        .options(selectinload(Subject.teachers))
        .order_by(Subject.name),
    )
    assigned = {
        row.subject_id: row
        for row in await fetch_all(
            db,
            select(SectionSubjectTeacher)
            .where(SectionSubjectTeacher.section_id == section_id),
        )
    }
    slot = await _class_teacher_slot(db, section_id)
    return {
        "section": {
            "id": section.id,
            "name": section.name,
            "className": section.school_class.name,
            "classTeacher": teacher_name(slot.teacher) if slot else None,
        },
        "subjectAssignments": [
            section_subject_overview(s, assigned.get(s.id)) for s in subjects
        ],
    }


@router.post("/{section_id}/subjects", status_code=status.HTTP_201_CREATED)
async def assign_section_subject_teacher(
    section_id: str,
    body: SectionSubjectAssignment,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Upsert who teaches a subject in this section."""
    section = await fetch_one_or_404(
        db, scoping.section_in_school(section_id, session.school_id),
        "Section", section_id,
    )
    result = await db.execute(
        select(Subject).where(
            Subject.id == body.subject_id,
            Subject.class_id == section.class_id,
        ),
    )
    subject = result.scalar_one_or_none()
    if subject is None:
        raise ResourceNotFoundError(
            "Subject", body.subject_id, message="Subject not found in this class",
        )

    qualified = await db.execute(
        select(TeacherSubject.id).where(
            TeacherSubject.teacher_id == body.teacher_id,
            TeacherSubject.subject_id == subject.id,
        ),
    )
    if qualified.first() is None:
        raise InvalidOperationError("Teacher is not assigned to teach this subject")

    result = await db.execute(
        select(SectionSubjectTeacher).where(
            SectionSubjectTeacher.section_id == section.id,
            SectionSubjectTeacher.subject_id == subject.id,
        ),
    )
    row = result.unique().scalar_one_or_none()
    if row is None:
        row = SectionSubjectTeacher(
            section_id=section.id, subject_id=subject.id,
            teacher_id=body.teacher_id,
        )
        db.add(row)
    else:
        row.teacher_id = body.teacher_id
    await commit_or_conflict(db, "Subject already has a teacher in this section")
    logger.info(
        f"Teacher {body.teacher_id} teaches subject {subject.id} in section {section_id}",
        extra={"school_id": session.school_id, "resource_id": section_id},
    )

    row = await fetch_one_or_404(
        db,
        select(SectionSubjectTeacher)
        .where(SectionSubjectTeacher.id == row.id)
        .options(selectinload(SectionSubjectTeacher.subject))
        .execution_options(populate_existing=True),
        "Assignment", row.id,
    )
    return {"assignment": section_subject_assignment(row)}


@router.delete("/{section_id}/subjects")
async def remove_section_subject_teacher(
    section_id: str,
    subject_id: str | None = Query(None, alias="subjectId"),
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Clear the teacher of one subject (?subjectId=) in this section."""
    if not subject_id:
        raise InvalidOperationError("subjectId is required")
    await fetch_one_or_404(
        db, scoping.section_in_school(section_id, session.school_id),
        "Section", section_id,
    )
    removed = await db.execute(
        delete(SectionSubjectTeacher).where(
            SectionSubjectTeacher.section_id == section_id,
            SectionSubjectTeacher.subject_id == subject_id,
        ),
    )
    if removed.rowcount == 0:
        raise ResourceNotFoundError(
            "Assignment",
            message="No teacher is assigned to this subject in this section",
        )
    await db.commit()
    return {"success": True}
