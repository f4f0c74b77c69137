"""Response Shaping: project ORM graphs into the camelCase JSON the API returns.

Invariants:
    - Pure functions of already-loaded attributes: no lazy loads, no IO
    - Nested user fields are flattened onto teacher summaries
    - Relation counts appear under "_count" only when the caller supplies them
    - Internal columns (role, school of a profile) are never exposed; is_active
      appears only in the admin student listing
"""

from datetime import date, datetime


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


def user_fields(user, *, phone: bool = False, with_id: bool = True) -> dict:
    data = {
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
    }
    if with_id:
        data = {"id": user.id, **data}
    if phone:
        data["phone"] = user.phone
    return data


def class_summary(school_class) -> dict:
    return {
        "id": school_class.id,
        "name": school_class.name,
        "displayOrder": school_class.display_order,
    }


def section_to_dict(
    section,
    *,
    counts: dict[str, int] | None = None,
    include_class: bool = False,
) -> dict:
    data = {
        "id": section.id,
        "classId": section.class_id,
        "name": section.name,
        "capacity": section.capacity,
        "createdAt": _iso(section.created_at),
        "updatedAt": _iso(section.updated_at),
    }
    if include_class:
        data["class"] = class_summary(section.school_class)
    if counts is not None:
        data["_count"] = counts
    return data


def class_to_dict(
    school_class,
    *,
    sections: list[dict] | None = None,
    counts: dict[str, int] | None = None,
) -> dict:
    data = {
        "id": school_class.id,
        "schoolId": school_class.school_id,
        "name": school_class.name,
        "displayOrder": school_class.display_order,
        "createdAt": _iso(school_class.created_at),
        "updatedAt": _iso(school_class.updated_at),
    }
    if sections is not None:
        data["sections"] = sections
    if counts is not None:
        data["_count"] = counts
    return data


def teacher_summary(teacher) -> dict:
    """TeacherProfile with its user's name and email flattened in."""
    return {
        "id": teacher.id,
        "userId": teacher.user_id,
        "employeeId": teacher.employee_id,
        **user_fields(teacher.user, with_id=False),
    }


def subject_to_dict(subject) -> dict:
    return {
        "id": subject.id,
        "classId": subject.class_id,
        "name": subject.name,
        "code": subject.code,
        "color": subject.color,
        "createdAt": _iso(subject.created_at),
        "updatedAt": _iso(subject.updated_at),
    }


def subject_teacher_row(assignment) -> dict:
    """Flat TeacherSubject row as embedded in subject listings."""
    return {
        "id": assignment.id,
        "teacherId": assignment.teacher_id,
        **user_fields(assignment.teacher.user, with_id=False),
    }


def subject_teacher_assignment(assignment) -> dict:
    """TeacherSubject with a nested teacher summary."""
    return {
        "id": assignment.id,
        "subjectId": assignment.subject_id,
        "teacherId": assignment.teacher_id,
        "teacher": teacher_summary(assignment.teacher),
    }


def teacher_name(teacher) -> dict:
    """Minimal teacher reference: profile id and name."""
    return {
        "id": teacher.id,
        "firstName": teacher.user.first_name,
        "lastName": teacher.user.last_name,
    }


def section_subject_teacher_row(row) -> dict:
    return {
        "id": row.id,
        "section": {"id": row.section.id, "name": row.section.name},
        "teacher": teacher_name(row.teacher),
    }


def section_subject_assignment(row) -> dict:
    """SectionSubjectTeacher with its subject and teacher."""
    return {
        "id": row.id,
        "sectionId": row.section_id,
        "subjectId": row.subject_id,
        "teacherId": row.teacher_id,
        "subject": subject_to_dict(row.subject),
        "teacher": teacher_summary(row.teacher),
    }


def section_subject_overview(subject, assigned) -> dict:
    """One subject of a section's class: who teaches it here, who could."""
    return {
        "subjectId": subject.id,
        "subjectName": subject.name,
        "subjectCode": subject.code,
        "subjectColor": subject.color,
        "assignedTeacher": teacher_name(assigned.teacher) if assigned else None,
        "availableTeachers": [teacher_name(t.teacher) for t in subject.teachers],
    }


def class_teacher_to_dict(slot) -> dict:
    return {
        "id": slot.id,
        "sectionId": slot.section_id,
        "teacherId": slot.teacher_id,
        "assignedAt": _iso(slot.assigned_at),
        "teacher": teacher_summary(slot.teacher),
    }


def fee_structure_to_dict(
    fee_structure, *, invoice_count: int | None = None,
) -> dict:
    data = {
        "id": fee_structure.id,
        "schoolId": fee_structure.school_id,
        "classId": fee_structure.class_id,
        "name": fee_structure.name,
        "amount": float(fee_structure.amount),
        "frequency": fee_structure.frequency,
        "dueDay": fee_structure.due_day,
        "createdAt": _iso(fee_structure.created_at),
        "updatedAt": _iso(fee_structure.updated_at),
        "class": (
            class_summary(fee_structure.school_class)
            if fee_structure.school_class else None
        ),
    }
    if invoice_count is not None:
        data["_count"] = {"invoices": invoice_count}
    return data


def student_summary(student, *, include_section: bool = False) -> dict:
    data = {
        "id": student.id,
        "userId": student.user_id,
        "rollNumber": student.roll_number,
        "user": user_fields(student.user),
    }
    if include_section:
        section = student.section
        data["section"] = (
            {
                "id": section.id,
                "name": section.name,
                "class": class_summary(section.school_class),
            }
            if section else None
        )
    return data


def parent_summary(parent, *, phone: bool = True) -> dict:
    return {
        "id": parent.id,
        "userId": parent.user_id,
        "occupation": parent.occupation,
        "user": user_fields(parent.user, phone=phone),
    }


def parent_link_to_dict(link, *, include_section: bool = False) -> dict:
    return {
        "id": link.id,
        "parentId": link.parent_id,
        "studentId": link.student_id,
        "createdAt": _iso(link.created_at),
        "parent": parent_summary(link.parent),
        "student": student_summary(link.student, include_section=include_section),
    }


def parent_to_dict(parent) -> dict:
    return {
        **parent_summary(parent),
        "children": [
            {
                "id": link.id,
                "studentId": link.student_id,
                "student": student_summary(link.student, include_section=True),
            }
            for link in parent.children
        ],
    }


def student_listing_row(student) -> dict:
    """Admin student listing: account state, placement and linked parents."""
    return {
        **student_summary(student, include_section=True),
        "isActive": student.user.is_active,
        "createdAt": _iso(student.user.created_at),
        "parents": [
            {
                "id": link.parent_id,
                "firstName": link.parent.user.first_name,
                "lastName": link.parent.user.last_name,
            }
            for link in student.parents
        ],
    }


def invoice_to_dict(invoice) -> dict:
    fee_structure = invoice.fee_structure
    return {
        "id": invoice.id,
        "studentId": invoice.student_id,
        "feeStructureId": invoice.fee_structure_id,
        "amount": float(invoice.amount),
        "status": invoice.status,
        "dueDate": _iso(invoice.due_date),
        "paidDate": _iso(invoice.paid_date),
        "paymentMethod": invoice.payment_method,
        "transactionId": invoice.transaction_id,
        "remarks": invoice.remarks,
        "createdAt": _iso(invoice.created_at),
        "student": student_summary(invoice.student, include_section=True),
        "feeStructure": {
            "id": fee_structure.id,
            "name": fee_structure.name,
            "amount": float(fee_structure.amount),
            "frequency": fee_structure.frequency,
        },
    }
