"""Invoices: bills issued to students against fee structures.

Invariants:
    - Invoices are scoped by school_id; student and fee structure of a new
      invoice must both belong to the caller's school
    - Bulk generation issues at most one invoice per student, structure and
      calendar month of the due date; students already billed are skipped
    - Bulk amounts are copied from the fee structure at generation time
    - Setting status PAID without a paidDate stamps today's date

Design Decisions:
    - Bulk generation is its own POST /bulk resource instead of overloading
      PUT on the collection
"""

import calendar
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.api.guards import get_current_session, require_admin
from schoolhub.api.serializers import invoice_to_dict
from schoolhub.core.domain_types import InvoiceStatus, SessionUser
from schoolhub.core.errors import InvalidOperationError
from schoolhub.db.base import utc_now
from schoolhub.infrastructure.database import get_db
from schoolhub.models import FeeInvoice, Section, StudentProfile
from schoolhub.schemas.invoices import (
    InvoiceBulkCreate, InvoiceCreate, InvoiceUpdate,
)
from schoolhub.services import scoping
from schoolhub.services.persistence import fetch_all, fetch_one_or_404

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/invoices", tags=["invoices"])

_student_section = (
    selectinload(FeeInvoice.student)
    .selectinload(StudentProfile.section)
    .selectinload(Section.school_class)
)


async def _invoice_or_404(
    db: AsyncSession, invoice_id: str, school_id: str, *, refresh: bool = False,
) -> FeeInvoice:
    stmt = scoping.invoice_in_school(invoice_id, school_id).options(_student_section)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    return await fetch_one_or_404(db, stmt, "Invoice", invoice_id)


@router.get("")
async def list_invoices(
    invoice_status: InvoiceStatus | None = Query(None, alias="status"),
    student_id: str | None = Query(None, alias="studentId"),
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """School's invoices, newest first, optionally by status or student."""
    stmt = scoping.invoices_of_school(session.school_id)
    if invoice_status is not None:
        stmt = stmt.where(FeeInvoice.status == invoice_status.value)
    if student_id:
        stmt = stmt.where(FeeInvoice.student_id == student_id)
    invoices = await fetch_all(
        db,
        stmt.options(_student_section)
        .order_by(FeeInvoice.created_at.desc(), FeeInvoice.id),
    )
    return {"invoices": [invoice_to_dict(i) for i in invoices]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_invoice(
    body: InvoiceCreate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    student = await fetch_one_or_404(
        db, scoping.student_in_school(body.student_id, session.school_id),
        "Student", body.student_id,
    )
    fee_structure = await fetch_one_or_404(
        db,
        scoping.fee_structure_in_school(body.fee_structure_id, session.school_id),
        "Fee structure", body.fee_structure_id,
    )
    invoice = FeeInvoice(
        school_id=session.school_id,
        student_id=student.id,
        fee_structure_id=fee_structure.id,
        amount=body.amount,
        due_date=body.due_date,
        remarks=body.remarks,
    )
    db.add(invoice)
    await db.commit()
    logger.info(
        f"Invoice issued to student {student.id}",
        extra={"school_id": session.school_id, "resource_id": invoice.id},
    )
    invoice = await _invoice_or_404(db, invoice.id, session.school_id, refresh=True)
    return {"invoice": invoice_to_dict(invoice)}


@router.post("/bulk")
async def generate_invoices(
    body: InvoiceBulkCreate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Bill every targeted student once for the month of the due date."""
    fee_structure = await fetch_one_or_404(
        db,
        scoping.fee_structure_in_school(body.fee_structure_id, session.school_id),
        "Fee structure", body.fee_structure_id,
    )

    students = scoping.students_of_school(session.school_id)
    if body.section_id:
        students = students.where(StudentProfile.section_id == body.section_id)
    elif body.class_id or fee_structure.class_id:
        class_id = body.class_id or fee_structure.class_id
        students = students.where(
            StudentProfile.section.has(Section.class_id == class_id),
        )
    student_ids = list(
        (await db.execute(students.with_only_columns(StudentProfile.id)))
        .scalars().all(),
    )
    if not student_ids:
        raise InvalidOperationError("No students found matching the criteria")

    due = body.due_date
    month_start = due.replace(day=1)
    month_end = due.replace(day=calendar.monthrange(due.year, due.month)[1])
    billed = set(
        (await db.execute(
            select(FeeInvoice.student_id).where(
                FeeInvoice.fee_structure_id == fee_structure.id,
                FeeInvoice.student_id.in_(student_ids),
                FeeInvoice.due_date.between(month_start, month_end),
            ),
        )).scalars().all(),
    )
    to_bill = [i for i in student_ids if i not in billed]
    if not to_bill:
        raise InvalidOperationError(
            "Invoices already exist for all selected students in this period",
        )

    db.add_all(
        FeeInvoice(
            school_id=session.school_id,
            student_id=student_id,
            fee_structure_id=fee_structure.id,
            amount=fee_structure.amount,
            due_date=due,
        )
        for student_id in to_bill
    )
    await db.commit()
    logger.info(
        f"Generated {len(to_bill)} invoices for fee structure {fee_structure.id}",
        extra={"school_id": session.school_id, "resource_id": fee_structure.id},
    )
    return {
        "message": f"Successfully created {len(to_bill)} invoices",
        "count": len(to_bill),
        "skipped": len(billed),
    }


@router.get("/{invoice_id}")
async def get_invoice(
    invoice_id: str,
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    invoice = await _invoice_or_404(db, invoice_id, session.school_id)
    return {"invoice": invoice_to_dict(invoice)}


@router.put("/{invoice_id}")
async def update_invoice(
    invoice_id: str,
    body: InvoiceUpdate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Record payment details; PAID without a date means paid today."""
    invoice = await _invoice_or_404(db, invoice_id, session.school_id)
    changes = body.supplied_fields()
    if changes.get("status") == InvoiceStatus.PAID.value and not changes.get("paid_date"):
        changes["paid_date"] = utc_now().date()

    for field, value in changes.items():
        setattr(invoice, field, value)
    await db.commit()
    return {"invoice": invoice_to_dict(invoice)}


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    invoice = await _invoice_or_404(db, invoice_id, session.school_id)
    await db.delete(invoice)
    await db.commit()
    logger.info(
        f"Invoice deleted: {invoice_id}",
        extra={"school_id": session.school_id, "resource_id": invoice_id},
    )
    return {"success": True}
