"""SectionSubjectTeacher ORM: who teaches a subject in one particular section.

Invariants:
    - (section_id, subject_id) unique: one teacher per subject per section
"""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id


class SectionSubjectTeacher(Base):
    __tablename__ = "section_subject_teachers"
    __table_args__ = (
        UniqueConstraint(
            "section_id", "subject_id", name="uq_section_subject_teachers_slot",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    section_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    subject_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    teacher_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teacher_profiles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )

    section: Mapped["Section"] = relationship("Section", lazy="joined")
    subject: Mapped["Subject"] = relationship(
        "Subject", back_populates="section_teachers",
    )
    teacher: Mapped["TeacherProfile"] = relationship(
        "TeacherProfile", lazy="joined",
    )
