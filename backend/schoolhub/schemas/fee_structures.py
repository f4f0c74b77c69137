"""Fee Structure Schemas: amount, frequency and due-day rules.

Invariants:
    - amount > 0 and representable in NUMERIC(12, 2) without rounding
    - frequency is a FeeFrequency value
    - due_day in 1..28 (every month has the day)
    - classId "" is treated as no class
"""

from typing import ClassVar

from pydantic import Field, field_validator

from schoolhub.core.domain_types import FeeFrequency
from schoolhub.schemas.base import CamelModel, Money, Name


def _blank_is_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class FeeStructureCreate(CamelModel):
    name: Name = Field(min_length=1, max_length=200)
    amount: Money
    frequency: FeeFrequency
    class_id: str | None = None
    due_day: int | None = Field(None, ge=1, le=28)

    blank_class_is_none = field_validator("class_id", mode="before")(_blank_is_none)


class FeeStructureUpdate(CamelModel):
    non_nullable: ClassVar[tuple[str, ...]] = ("name", "amount", "frequency")

    name: Name | None = Field(None, min_length=1, max_length=200)
    amount: Money | None = None
    frequency: FeeFrequency | None = None
    class_id: str | None = None
    due_day: int | None = Field(None, ge=1, le=28)

    blank_class_is_none = field_validator("class_id", mode="before")(_blank_is_none)
