"""Subject ORM: a subject taught within a class.

Invariants:
    - name unique per class (uq_subjects_class_name)
    - Teacher assignments (class-wide and per section) cascade with the subject
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id, utc_now


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("class_id", "name", name="uq_subjects_class_name"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    class_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
        onupdate=utc_now,
    )

    school_class: Mapped["SchoolClass"] = relationship(
        "SchoolClass", back_populates="subjects",
    )
    teachers: Mapped[list["TeacherSubject"]] = relationship(
        "TeacherSubject", back_populates="subject",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    section_teachers: Mapped[list["SectionSubjectTeacher"]] = relationship(
        "SectionSubjectTeacher", back_populates="subject",
        cascade="all, delete-orphan", passive_deletes=True,
    )
