"""Subject Schemas: subject create/update and teacher assignment payloads."""

from typing import ClassVar

from pydantic import Field

from schoolhub.schemas.base import CamelModel, Name


class SubjectCreate(CamelModel):
    name: Name = Field(min_length=1, max_length=100)
    code: str | None = Field(None, max_length=20)
    color: str | None = Field(None, max_length=20)


class SubjectUpdate(CamelModel):
    non_nullable: ClassVar[tuple[str, ...]] = ("name",)

    name: Name | None = Field(None, min_length=1, max_length=100)
    code: str | None = Field(None, max_length=20)
    color: str | None = Field(None, max_length=20)


class TeacherAssignment(CamelModel):
    """Body for assigning a teacher (class-teacher slot or subject)."""
    teacher_id: str = Field(min_length=1)


class SectionSubjectAssignment(CamelModel):
    """Body for choosing who teaches a subject in one section."""
    subject_id: str = Field(min_length=1)
    teacher_id: str = Field(min_length=1)
