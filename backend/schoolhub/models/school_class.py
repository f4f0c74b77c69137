"""Class ORM: a grade/year group within a school.

Invariants:
    - name unique per school (uq_classes_school_name); the handler pre-check is a nicety
    - display_order drives listing order
    - Deleting a class cascades to its sections and subjects at the DB level

Design Decisions:
    - Named SchoolClass in Python to avoid shadowing the `class` keyword idiom
    - passive_deletes=True: the ORM never loads children just to delete them
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id, utc_now


class SchoolClass(Base):
    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("school_id", "name", name="uq_classes_school_name"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    school_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    display_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
        onupdate=utc_now,
    )

    sections: Mapped[list["Section"]] = relationship(
        "Section", back_populates="school_class",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="Section.name",
    )
    subjects: Mapped[list["Subject"]] = relationship(
        "Subject", back_populates="school_class",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="Subject.name",
    )
