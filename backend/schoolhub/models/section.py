"""Section ORM: a division of a class that students enroll in.

Invariants:
    - name unique per class (uq_sections_class_name)
    - At most one class-teacher slot (SectionTeacher.section_id is unique)
    - capacity is optional; NULL means unlimited
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id, utc_now


class Section(Base):
    __tablename__ = "sections"
    __table_args__ = (
        UniqueConstraint("class_id", "name", name="uq_sections_class_name"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    class_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
        onupdate=utc_now,
    )

    school_class: Mapped["SchoolClass"] = relationship(
        "SchoolClass", back_populates="sections",
    )
    students: Mapped[list["StudentProfile"]] = relationship(
        "StudentProfile", back_populates="section", passive_deletes=True,
    )
    class_teacher: Mapped[Optional["SectionTeacher"]] = relationship(
        "SectionTeacher", back_populates="section", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
