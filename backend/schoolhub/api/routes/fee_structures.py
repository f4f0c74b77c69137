"""Fee Structures: recurring fees a school charges, optionally per class.

Invariants:
    - Fee structures are scoped by school_id directly
    - A classId, when given, must name a class of the same school
    - A fee structure that has produced invoices cannot be deleted
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.api.guards import get_current_session, require_admin
from schoolhub.api.serializers import fee_structure_to_dict
from schoolhub.core.domain_types import SessionUser
from schoolhub.core.errors import InvalidOperationError
from schoolhub.infrastructure.database import get_db
from schoolhub.models import FeeInvoice, FeeStructure
from schoolhub.schemas.fee_structures import (
    FeeStructureCreate, FeeStructureUpdate,
)
from schoolhub.services import scoping
from schoolhub.services.persistence import (
    count_grouped, fetch_all, fetch_one_or_404,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/fee-structures", tags=["fee-structures"])


async def _check_class(db: AsyncSession, class_id: str | None, school_id: str):
    if class_id:
        await fetch_one_or_404(
            db, scoping.class_in_school(class_id, school_id), "Class", class_id,
        )


async def _invoice_count(db: AsyncSession, fee_structure_id: str) -> int:
    counts = await count_grouped(
        db, FeeInvoice.fee_structure_id, [fee_structure_id],
    )
    return counts[fee_structure_id]


@router.get("")
async def list_fee_structures(
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    fee_structures = await fetch_all(
        db,
        scoping.fee_structures_of_school(session.school_id)
        .order_by(FeeStructure.name),
    )
    invoices = await count_grouped(
        db, FeeInvoice.fee_structure_id, [f.id for f in fee_structures],
    )
    return {
        "feeStructures": [
            fee_structure_to_dict(f, invoice_count=invoices[f.id])
            for f in fee_structures
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_fee_structure(
    body: FeeStructureCreate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _check_class(db, body.class_id, session.school_id)

    fee_structure = FeeStructure(
        school_id=session.school_id,
        class_id=body.class_id,
        name=body.name,
        amount=body.amount,
        frequency=body.frequency,
        due_day=body.due_day,
    )
    db.add(fee_structure)
    await db.commit()
    # the class relationship was not populated by the insert
    await db.refresh(fee_structure, attribute_names=["school_class"])
    logger.info(
        f"Fee structure created: {fee_structure.name}",
        extra={"school_id": session.school_id, "resource_id": fee_structure.id},
    )
    return {"feeStructure": fee_structure_to_dict(fee_structure)}


@router.get("/{fee_structure_id}")
async def get_fee_structure(
    fee_structure_id: str,
    session: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    fee_structure = await fetch_one_or_404(
        db, scoping.fee_structure_in_school(fee_structure_id, session.school_id),
        "Fee structure", fee_structure_id,
    )
    return {
        "feeStructure": fee_structure_to_dict(
            fee_structure,
            invoice_count=await _invoice_count(db, fee_structure.id),
        ),
    }


@router.put("/{fee_structure_id}")
async def update_fee_structure(
    fee_structure_id: str,
    body: FeeStructureUpdate,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Partial update; a supplied classId is re-checked against the school."""
    fee_structure = await fetch_one_or_404(
        db, scoping.fee_structure_in_school(fee_structure_id, session.school_id),
        "Fee structure", fee_structure_id,
    )
    changes = body.supplied_fields()
    if "class_id" in changes:
        await _check_class(db, changes["class_id"], session.school_id)

    for field, value in changes.items():
        setattr(fee_structure, field, value)
    await db.commit()
    await db.refresh(fee_structure, attribute_names=["school_class"])
    return {"feeStructure": fee_structure_to_dict(fee_structure)}


@router.delete("/{fee_structure_id}")
async def delete_fee_structure(
    fee_structure_id: str,
    session: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    fee_structure = await fetch_one_or_404(
        db, scoping.fee_structure_in_school(fee_structure_id, session.school_id),
        "Fee structure", fee_structure_id,
    )
    if await _invoice_count(db, fee_structure.id) > 0:
        raise InvalidOperationError(
            "Cannot delete fee structure with existing invoices",
        )

    await db.delete(fee_structure)
    await db.commit()
    logger.info(
        f"Fee structure deleted: {fee_structure_id}",
        extra={"school_id": session.school_id, "resource_id": fee_structure_id},
    )
    return {"success": True}
