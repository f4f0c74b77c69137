"""TeacherSubject ORM: a teacher qualified to teach a subject across its class.

Invariants:
    - (teacher_id, subject_id) unique
"""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id


class TeacherSubject(Base):
    __tablename__ = "teacher_subjects"
    __table_args__ = (
        UniqueConstraint(
            "teacher_id", "subject_id", name="uq_teacher_subjects_pair",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    teacher_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teacher_profiles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    subject_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )

    teacher: Mapped["TeacherProfile"] = relationship(
        "TeacherProfile", lazy="joined",
    )
    subject: Mapped["Subject"] = relationship(
        "Subject", back_populates="teachers",
    )
