"""Invoice Schemas: single issue, bulk generation and payment updates.

Invariants:
    - amount fits NUMERIC(12, 2) and is positive
    - Dates are ISO calendar dates (YYYY-MM-DD)
    - Bulk generation targets a section, a class, or the structure's own class
"""

from datetime import date
from typing import ClassVar

from pydantic import Field

from schoolhub.core.domain_types import InvoiceStatus
from schoolhub.schemas.base import CamelModel, Money


class InvoiceCreate(CamelModel):
    student_id: str = Field(min_length=1)
    fee_structure_id: str = Field(min_length=1)
    amount: Money
    due_date: date
    remarks: str | None = Field(None, max_length=500)


class InvoiceBulkCreate(CamelModel):
    fee_structure_id: str = Field(min_length=1)
    due_date: date
    class_id: str | None = None
    section_id: str | None = None


class InvoiceUpdate(CamelModel):
    non_nullable: ClassVar[tuple[str, ...]] = ("status",)

    status: InvoiceStatus | None = None
    paid_date: date | None = None
    payment_method: str | None = Field(None, max_length=50)
    transaction_id: str | None = Field(None, max_length=100)
    remarks: str | None = Field(None, max_length=500)
