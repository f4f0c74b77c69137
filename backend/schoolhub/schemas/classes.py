"""Class and Section Schemas: field-level validation for class/section requests.

Invariants:
    - Names are stripped and non-empty
    - ClassCreate.sections may not repeat a section name
    - Update schemas are partial: absent fields are left untouched
"""

from typing import ClassVar

from pydantic import Field, model_validator

from schoolhub.schemas.base import CamelModel, Name


class SectionCreate(CamelModel):
    name: Name = Field(min_length=1, max_length=50)
    capacity: int | None = Field(None, ge=0)


class SectionUpdate(CamelModel):
    non_nullable: ClassVar[tuple[str, ...]] = ("name",)

    name: Name | None = Field(None, min_length=1, max_length=50)
    capacity: int | None = Field(None, ge=0)


class ClassCreate(CamelModel):
    name: Name = Field(min_length=1, max_length=100)
    display_order: int | None = None
    sections: list[SectionCreate] | None = None

    @model_validator(mode="after")
    def unique_section_names(self):
        names = [s.name for s in self.sections or []]
        if len(names) != len(set(names)):
            raise ValueError("section names must be unique within a class")
        return self


class ClassUpdate(CamelModel):
    non_nullable: ClassVar[tuple[str, ...]] = ("name", "display_order")

    name: Name | None = Field(None, min_length=1, max_length=100)
    display_order: int | None = None
