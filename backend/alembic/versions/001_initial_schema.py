"""Initial schema: schools, users, profiles, classes, sections, subjects, fees, links.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Owned children carry ON DELETE CASCADE so deleting a class removes its
sections, subjects and their assignments in one statement. Student profiles
keep SET NULL on section_id; handlers refuse to delete occupied sections.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _fk(name: str, target: str, ondelete: str = "CASCADE", nullable: bool = False):
    return sa.Column(
        name, sa.String(36), sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "schools",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("subdomain", sa.String(63), nullable=False, unique=True),
        _timestamp("created_at"),
    )

    op.create_table(
        "users",
        _id(),
        _fk("school_id", "schools.id"),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
    )
    op.create_index("ix_users_school_id", "users", ["school_id"])

    op.create_table(
        "teacher_profiles",
        _id(),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("employee_id", sa.String(50), nullable=True),
    )

    op.create_table(
        "parent_profiles",
        _id(),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("occupation", sa.String(100), nullable=True),
    )

    op.create_table(
        "classes",
        _id(),
        _fk("school_id", "schools.id"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("display_order", sa.Integer, nullable=False, server_default="0"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("school_id", "name", name="uq_classes_school_name"),
    )
    op.create_index("ix_classes_school_id", "classes", ["school_id"])

    op.create_table(
        "sections",
        _id(),
        _fk("class_id", "classes.id"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("class_id", "name", name="uq_sections_class_name"),
    )
    op.create_index("ix_sections_class_id", "sections", ["class_id"])

    op.create_table(
        "student_profiles",
        _id(),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        _fk("section_id", "sections.id", ondelete="SET NULL", nullable=True),
        sa.Column("roll_number", sa.String(50), nullable=True),
    )
    op.create_index(
        "ix_student_profiles_section_id", "student_profiles", ["section_id"],
    )

    op.create_table(
        "section_teachers",
        _id(),
        sa.Column(
            "section_id", sa.String(36),
            sa.ForeignKey("sections.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        _fk("teacher_id", "teacher_profiles.id"),
        _timestamp("assigned_at"),
    )
    op.create_index(
        "ix_section_teachers_teacher_id", "section_teachers", ["teacher_id"],
    )

    op.create_table(
        "subjects",
        _id(),
        _fk("class_id", "classes.id"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("class_id", "name", name="uq_subjects_class_name"),
    )
    op.create_index("ix_subjects_class_id", "subjects", ["class_id"])

    op.create_table(
        "teacher_subjects",
        _id(),
        _fk("teacher_id", "teacher_profiles.id"),
        _fk("subject_id", "subjects.id"),
        sa.UniqueConstraint(
            "teacher_id", "subject_id", name="uq_teacher_subjects_pair",
        ),
    )
    op.create_index(
        "ix_teacher_subjects_teacher_id", "teacher_subjects", ["teacher_id"],
    )
    op.create_index(
        "ix_teacher_subjects_subject_id", "teacher_subjects", ["subject_id"],
    )

    op.create_table(
        "section_subject_teachers",
        _id(),
        _fk("section_id", "sections.id"),
        _fk("subject_id", "subjects.id"),
        _fk("teacher_id", "teacher_profiles.id"),
        sa.UniqueConstraint(
            "section_id", "subject_id", name="uq_section_subject_teachers_slot",
        ),
    )
    for column in ("section_id", "subject_id", "teacher_id"):
        op.create_index(
            f"ix_section_subject_teachers_{column}",
            "section_subject_teachers", [column],
        )

    op.create_table(
        "fee_structures",
        _id(),
        _fk("school_id", "schools.id"),
        _fk("class_id", "classes.id", ondelete="SET NULL", nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("frequency", sa.String(20), nullable=False),
        sa.Column("due_day", sa.Integer, nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_fee_structures_school_id", "fee_structures", ["school_id"])
    op.create_index("ix_fee_structures_class_id", "fee_structures", ["class_id"])

    op.create_table(
        "fee_invoices",
        _id(),
        _fk("school_id", "schools.id"),
        _fk("fee_structure_id", "fee_structures.id", ondelete="RESTRICT"),
        _fk("student_id", "student_profiles.id"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("due_date", sa.Date, nullable=False),
        _timestamp("created_at"),
    )
    for column in ("school_id", "fee_structure_id", "student_id"):
        op.create_index(f"ix_fee_invoices_{column}", "fee_invoices", [column])

    op.create_table(
        "parent_students",
        _id(),
        _fk("parent_id", "parent_profiles.id"),
        _fk("student_id", "student_profiles.id"),
        _timestamp("created_at"),
        sa.UniqueConstraint(
            "parent_id", "student_id", name="uq_parent_students_pair",
        ),
    )
    op.create_index("ix_parent_students_parent_id", "parent_students", ["parent_id"])
    op.create_index("ix_parent_students_student_id", "parent_students", ["student_id"])


def downgrade() -> None:
    for table in (
        "parent_students", "fee_invoices", "fee_structures",
        "section_subject_teachers", "teacher_subjects", "subjects",
        "section_teachers", "student_profiles", "sections", "classes",
        "parent_profiles", "teacher_profiles", "users", "schools",
    ):
        op.drop_table(table)
