"""FeeInvoice ORM: a bill issued to a student against a fee structure.

Invariants:
    - fee_structure_id is RESTRICT: a structure with invoices cannot be deleted
    - amount is fixed at issue time; later price changes to the structure do
      not touch issued invoices
    - Marking an invoice PAID without a date stamps today's date
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.core.domain_types import InvoiceStatus
from schoolhub.db.base import Base, generate_id, utc_now


class FeeInvoice(Base):
    __tablename__ = "fee_invoices"
    __table_args__ = (
        Index("ix_fee_invoices_student_due", "student_id", "due_date"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    school_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    fee_structure_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("fee_structures.id", ondelete="RESTRICT"),
        nullable=False, index=True,
    )
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    amount: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceStatus.PENDING.value,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    transaction_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    remarks: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )

    fee_structure: Mapped["FeeStructure"] = relationship(
        "FeeStructure", lazy="joined",
    )
    student: Mapped["StudentProfile"] = relationship(
        "StudentProfile", lazy="joined",
    )
