"""Schema Base: camelCase JSON boundary shared by every request model.

Invariants:
    - JSON keys are camelCase (displayOrder, classId); attributes are snake_case
    - Fields listed in non_nullable may be omitted but never sent as null
    - supplied_fields() yields exactly the fields the client sent

Design Decisions:
    - alias_generator over per-field aliases: one rule for the whole API surface
    - use_enum_values: enum fields land in the ORM as their plain string values
"""

from decimal import Decimal
from typing import Annotated, ClassVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _strip_non_empty(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


# Display names (class, section, subject, fee): stripped, never blank
Name = Annotated[str, AfterValidator(_strip_non_empty)]

# Amounts must fit NUMERIC(12, 2) exactly: positive, at most two decimals
Money = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class CamelModel(BaseModel):
    """Request model accepting camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True,
    )

    non_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in self.non_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def supplied_fields(self) -> dict:
        """Only the fields present in the request, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)
