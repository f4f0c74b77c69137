"""Classes: CRUD for a school's classes and creation of their sections.

Invariants:
    - Every lookup goes through a scoping predicate: a class of another school is 404
    - Class names are unique per school; section names unique per class
    - A class whose sections still hold students cannot be deleted
    - PUT only touches the fields present in the body

Design Decisions:
    - Student/teacher counts fetched with one grouped COUNT per listing
      instead of loading every student row
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.api.guards import get_current_session, require_admin
from schoolhub.api.serializers import class_to_dict, section_to_dict
from schoolhub.core.domain_types import SessionUser
from schoolhub.core.errors import ConflictError, InvalidOperationError
from schoolhub.infrastructure.database import get_db
from schoolhub.models import (
    SchoolClass, Section, SectionSubjectTeacher, StudentProfile,
)
from schoolhub.schemas.classes import ClassCreate, ClassUpdate, SectionCreate
from schoolhub.services import scoping
from schoolhub.services.persistence import (
    commit_or_conflict, count_grouped, fetch_all, fetch_one_or_404,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/classes", tags=["classes"])

DUPLICATE_CLASS = "A class with this name already exists"
DUPLICATE_SECTION = "A section with this name already exists in this class"


async def section_counts(
    db: AsyncSession, sections: list[Section],
) -> dict[str, dict[str, int]]:
    """_count.students / _count.teachers for each section id."""
    ids = [s.id for s in sections]
    students = await count_grouped(db, StudentProfile.section_id, ids)
    teachers = await count_grouped(db, SectionSubjectTeacher.section_id, ids)
    return {
        i: {"students": students.get(i, 0), "teachers": teachers.get(i, 0)}
        for i in ids
    }


async def _class_with_sections(db: AsyncSession, class_id: str, school_id: str):
    return await fetch_one_or_404(
        db,
        scoping.class_in_school(class_id, school_id)
        .options(selectinload(SchoolClass.sections)),
        "Class", class_id,
    )


async def _class_detail(db: AsyncSession, school_class: SchoolClass) -> dict:
    counts = await section_counts(db, school_class.sections)
    return class_to_dict(
        school_class,
        sections=[
            section_to_dict(s, counts=counts[s.id])
            for s in school_class.sections
        ],
    )


async def _name_taken(
    db: AsyncSession, school_id: str, name: str, exclude_id: str | None = None,
) -> bool:
    stmt = scoping.classes_of_school(school_id).where(SchoolClass.name == name)
    if exclude_id:
        stmt = stmt.where(SchoolClass.id != exclude_id)
    return (await db.execute(stmt.limit(1))).scalar_one_or_none() is not None


@router.get("")
async def list_classes(
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """List the school's classes by display order, with sections and counts."""
    classes = await fetch_all(
        db,
        scoping.classes_of_school(session.school_id)
        .options(selectinload(SchoolClass.sections))
        .order_by(SchoolClass.display_order, SchoolClass.name),
    )
    counts = await section_counts(
        db, [s for c in classes for s in c.sections],
    )
    return {
        "classes": [
            class_to_dict(
                c,
                sections=[
                    section_to_dict(s, counts=counts[s.id]) for s in c.sections
                ],
                counts={"sections": len(c.sections)},
            )
            for c in classes
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_class(
    body: ClassCreate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a class, optionally with its initial sections."""
    if await _name_taken(db, session.school_id, body.name):
        raise ConflictError(DUPLICATE_CLASS)

    display_order = body.display_order
    if display_order is None:
        highest = await db.scalar(
            select(func.max(SchoolClass.display_order))
            .where(SchoolClass.school_id == session.school_id),
        )
        display_order = (highest or 0) + 1

    school_class = SchoolClass(
        school_id=session.school_id, name=body.name, display_order=display_order,
    )
    school_class.sections = [
        Section(name=s.name, capacity=s.capacity) for s in body.sections or []
    ]
    db.add(school_class)
    await commit_or_conflict(db, DUPLICATE_CLASS)
    logger.info(
        f"Class created: {school_class.name}",
        extra={"school_id": session.school_id, "resource_id": school_class.id},
    )
    return {
        "class": class_to_dict(
            school_class,
            sections=[section_to_dict(s) for s in school_class.sections],
        ),
    }


@router.get("/{class_id}")
async def get_class(
    class_id: str,
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    school_class = await _class_with_sections(db, class_id, session.school_id)
    return {"class": await _class_detail(db, school_class)}


@router.put("/{class_id}")
async def update_class(
    class_id: str,
    body: ClassUpdate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Partial update; renaming checks for a duplicate within the school."""
    school_class = await _class_with_sections(db, class_id, session.school_id)
    changes = body.supplied_fields()

    new_name = changes.get("name")
    if new_name and new_name != school_class.name:
        if await _name_taken(db, session.school_id, new_name, exclude_id=class_id):
            raise ConflictError(DUPLICATE_CLASS)

    for field, value in changes.items():
        setattr(school_class, field, value)
    await commit_or_conflict(db, DUPLICATE_CLASS)
    return {"class": await _class_detail(db, school_class)}


@router.delete("/{class_id}")
async def delete_class(
    class_id: str,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a class and, by cascade, its sections and subjects."""
    school_class = await _class_with_sections(db, class_id, session.school_id)
    counts = await count_grouped(
        db, StudentProfile.section_id, [s.id for s in school_class.sections],
    )
    if any(counts.values()):
        raise InvalidOperationError(
            "Cannot delete class with students. Remove students first.",
        )

    await db.delete(school_class)
    await db.commit()
    logger.info(
        f"Class deleted: {class_id}",
        extra={"school_id": session.school_id, "resource_id": class_id},
    )
    return {"success": True}


@router.post("/{class_id}/sections", status_code=status.HTTP_201_CREATED)
async def create_section(
    class_id: str,
    body: SectionCreate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Add a section to a class of the caller's school."""
    await fetch_one_or_404(
        db, scoping.class_in_school(class_id, session.school_id),
        "Class", class_id,
    )
    duplicate = await db.execute(
        select(Section.id).where(
            Section.class_id == class_id, Section.name == body.name,
        ),
    )
    if duplicate.first() is not None:
        raise ConflictError(DUPLICATE_SECTION)

    section = Section(class_id=class_id, name=body.name, capacity=body.capacity)
    db.add(section)
    await commit_or_conflict(db, DUPLICATE_SECTION)
    return {"section": section_to_dict(section)}
