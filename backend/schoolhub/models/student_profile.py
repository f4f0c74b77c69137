"""StudentProfile ORM: student-specific extension of a User, enrolled in at most one section.

Invariants:
    - section_id is SET NULL if the section disappears, but handlers refuse to
      delete a class or section that still has students
"""

from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    section_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("sections.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    roll_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    user: Mapped["User"] = relationship("User", lazy="joined")
    section: Mapped[Optional["Section"]] = relationship(
        "Section", back_populates="students",
    )
    parents: Mapped[list["ParentStudent"]] = relationship(
        "ParentStudent", viewonly=True,
    )
