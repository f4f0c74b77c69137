"""ParentProfile ORM: parent-specific extension of a User; children via ParentStudent links."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolhub.db.base import Base, generate_id


class ParentProfile(Base):
    __tablename__ = "parent_profiles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    occupation: Mapped[str | None] = mapped_column(String(100), nullable=True)

    user: Mapped["User"] = relationship("User", lazy="joined")
    children: Mapped[list["ParentStudent"]] = relationship(
        "ParentStudent", back_populates="parent",
        cascade="all, delete-orphan", passive_deletes=True,
    )
