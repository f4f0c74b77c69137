"""ParentStudent ORM: many-to-many link between parent and student profiles.

Invariants:
    - (parent_id, student_id) unique (uq_parent_students_pair)
    - Tenant of a link is the school of its parent's user
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id, utc_now


class ParentStudent(Base):
    __tablename__ = "parent_students"
    __table_args__ = (
        UniqueConstraint(
            "parent_id", "student_id", name="uq_parent_students_pair",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    parent_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parent_profiles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )

    parent: Mapped["ParentProfile"] = relationship(
        "ParentProfile", back_populates="children", lazy="joined",
    )
    student: Mapped["StudentProfile"] = relationship(
        "StudentProfile", lazy="joined",
    )
