"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - SchoolId, UserId wrap string ids; the school id is the tenant boundary
    - All valid roles and fee frequencies encoded as Enums, no raw string matching
    - SessionUser is immutable for the lifetime of a request

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare against DB strings without converters
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SchoolId = NewType("SchoolId", str)
UserId = NewType("UserId", str)


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    """Account roles, stored in to users.role."""
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"


class FeeFrequency(str, Enum):
    """How often a fee structure is billed."""
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"


class InvoiceStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


# ─── Session ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class SessionUser:
    """Resolved caller: identity, role and tenant for the current request."""
    id: UserId
    role: str
    school_id: SchoolId

    def has_role(self, roles) -> bool:
        return self.role in roles
