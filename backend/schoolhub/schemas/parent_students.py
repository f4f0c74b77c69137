"""Parent-Student Link Schemas."""

from pydantic import Field

from schoolhub.schemas.base import CamelModel


class ParentStudentCreate(CamelModel):
    parent_id: str = Field(min_length=1)
    student_id: str = Field(min_length=1)


class ChildrenLink(CamelModel):
    """Bulk link: every listed student becomes a child of the parent."""
    student_ids: list[str] = Field(max_length=500)
