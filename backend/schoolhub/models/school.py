"""School ORM: the tenant boundary; every other entity is scoped by school_id.

Invariants:
    - subdomain is globally unique (used to route logins to a school)
    - Deleting a school cascades to everything it owns (DB-level ON DELETE CASCADE)
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.db.base import Base, generate_id, utc_now


class School(Base):
    __tablename__ = "schools"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    subdomain: Mapped[str] = mapped_column(
        String(63), nullable=False, unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
