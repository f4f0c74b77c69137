"""FeeStructure ORM: a recurring fee charged by a school, optionally for one class.

Invariants:
    - amount > 0 (validated at the API boundary)
    - due_day in 1..28 when set, so every month has that day
    - Deleting a fee structure that already produced invoices is refused
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id, utc_now


class FeeStructure(Base):
    __tablename__ = "fee_structures"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    school_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    class_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("classes.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False,
    )
    frequency: Mapped[str] = mapped_column(String(20), nullable=False)
    due_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
        onupdate=utc_now,
    )

    school_class: Mapped[Optional["SchoolClass"]] = relationship(
        "SchoolClass", lazy="joined",
    )
