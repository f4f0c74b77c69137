"""Scoping Predicates: tenant-filtered SELECT statements for every owned entity.

Invariants:
    - The school filter is part of the WHERE clause itself; callers never check
      school ownership after fetching
    - Nested resources are filtered by their full path (subject by id + class id +
      class.school_id), so a valid id under the wrong parent is simply absent
    - Functions only build statements; executing them is the caller's job

Design Decisions:
    - relationship.has() (EXISTS) over explicit joins: composes with the joined
      eager loads on profile.user without aliasing surprises
"""

from sqlalchemy import Select, select

from schoolhub.models import (
    FeeInvoice, FeeStructure, ParentProfile, ParentStudent, SchoolClass,
    Section, StudentProfile, Subject, TeacherProfile, User,
)


def class_in_school(class_id: str, school_id: str) -> Select:
    return select(SchoolClass).where(
        SchoolClass.id == class_id,
        SchoolClass.school_id == school_id,
    )


def classes_of_school(school_id: str) -> Select:
    return select(SchoolClass).where(SchoolClass.school_id == school_id)


def section_in_school(section_id: str, school_id: str) -> Select:
    return select(Section).where(
        Section.id == section_id,
        Section.school_class.has(SchoolClass.school_id == school_id),
    )


def sections_of_school(school_id: str, class_id: str | None = None) -> Select:
    stmt = select(Section).join(Section.school_class).where(
        SchoolClass.school_id == school_id,
    )
    if class_id:
        stmt = stmt.where(Section.class_id == class_id)
    return stmt


def subject_in_class(subject_id: str, class_id: str, school_id: str) -> Select:
    return select(Subject).where(
        Subject.id == subject_id,
        Subject.class_id == class_id,
        Subject.school_class.has(SchoolClass.school_id == school_id),
    )


def _in_school(school_id: str):
    return User.school_id == school_id


def teacher_in_school(teacher_id: str, school_id: str) -> Select:
    return select(TeacherProfile).where(
        TeacherProfile.id == teacher_id,
        TeacherProfile.user.has(_in_school(school_id)),
    )


def teachers_of_school(school_id: str, active_only: bool = True) -> Select:
    condition = _in_school(school_id)
    if active_only:
        condition = condition & User.is_active.is_(True)
    return select(TeacherProfile).where(TeacherProfile.user.has(condition))


def parent_in_school(parent_id: str, school_id: str) -> Select:
    return select(ParentProfile).where(
        ParentProfile.id == parent_id,
        ParentProfile.user.has(_in_school(school_id)),
    )


def parents_of_school(school_id: str) -> Select:
    return select(ParentProfile).where(
        ParentProfile.user.has(_in_school(school_id)),
    )


def student_in_school(student_id: str, school_id: str) -> Select:
    return select(StudentProfile).where(
        StudentProfile.id == student_id,
        StudentProfile.user.has(_in_school(school_id)),
    )


def students_of_school(school_id: str) -> Select:
    return select(StudentProfile).where(
        StudentProfile.user.has(_in_school(school_id)),
    )


def fee_structure_in_school(fee_structure_id: str, school_id: str) -> Select:
    return select(FeeStructure).where(
        FeeStructure.id == fee_structure_id,
        FeeStructure.school_id == school_id,
    )


def fee_structures_of_school(school_id: str) -> Select:
    return select(FeeStructure).where(FeeStructure.school_id == school_id)


def parent_links_of_school(school_id: str) -> Select:
    """Links are owned by the school of the parent's user."""
    return select(ParentStudent).where(
        ParentStudent.parent.has(
            ParentProfile.user.has(_in_school(school_id)),
        ),
    )


def parent_link_in_school(link_id: str, school_id: str) -> Select:
    return parent_links_of_school(school_id).where(ParentStudent.id == link_id)


def invoices_of_school(school_id: str) -> Select:
    return select(FeeInvoice).where(FeeInvoice.school_id == school_id)


def invoice_in_school(invoice_id: str, school_id: str) -> Select:
    return invoices_of_school(school_id).where(FeeInvoice.id == invoice_id)
