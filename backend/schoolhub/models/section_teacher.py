"""SectionTeacher ORM: the class-teacher slot of a section.

Invariants:
    - section_id is unique: assigning a teacher replaces whoever held the slot
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id, utc_now


class SectionTeacher(Base):
    __tablename__ = "section_teachers"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    section_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    teacher_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teacher_profiles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )

    section: Mapped["Section"] = relationship(
        "Section", back_populates="class_teacher",
    )
    teacher: Mapped["TeacherProfile"] = relationship(
        "TeacherProfile", lazy="joined",
    )
