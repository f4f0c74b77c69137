"""ORM Models: SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - School is the tenant root; every entity reaches a school_id through its parents

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from schoolhub.models.school import School  # noqa: F401
from schoolhub.models.user import User  # noqa: F401
from schoolhub.models.teacher_profile import TeacherProfile  # noqa: F401
from schoolhub.models.student_profile import StudentProfile  # noqa: F401
from schoolhub.models.parent_profile import ParentProfile  # noqa: F401
from schoolhub.models.school_class import SchoolClass  # noqa: F401
from schoolhub.models.section import Section  # noqa: F401
from schoolhub.models.section_teacher import SectionTeacher  # noqa: F401
from schoolhub.models.subject import Subject  # noqa: F401
from schoolhub.models.teacher_subject import TeacherSubject  # noqa: F401
from schoolhub.models.section_subject_teacher import SectionSubjectTeacher  # noqa: F401
from schoolhub.models.fee_structure import FeeStructure  # noqa: F401
from schoolhub.models.fee_invoice import FeeInvoice  # noqa: F401
from schoolhub.models.parent_student import ParentStudent  # noqa: F401
