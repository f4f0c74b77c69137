"""Response Shaping: camelCase projections of already-loaded objects."""

from datetime import datetime, timezone
from types import SimpleNamespace

from schoolhub.api.serializers import (
    fee_structure_to_dict, section_to_dict, student_summary, teacher_summary,
)

NOW = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)


def _user(**overrides):
    fields = dict(
        id="u1", first_name="Grace", last_name="Hopper",
        email="grace@example.com", phone="555",
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _class():
    return SimpleNamespace(id="c1", name="Grade 1", display_order=1)


def test_teacher_summary_flattens_user():
    teacher = SimpleNamespace(id="t1", user_id="u1", employee_id="E1", user=_user())
    assert teacher_summary(teacher) == {
        "id": "t1",
        "userId": "u1",
        "employeeId": "E1",
        "firstName": "Grace",
        "lastName": "Hopper",
        "email": "grace@example.com",
    }


def test_section_counts_only_when_given():
    section = SimpleNamespace(
        id="s1", class_id="c1", name="A", capacity=None,
        created_at=NOW, updated_at=NOW, school_class=_class(),
    )
    plain = section_to_dict(section)
    detailed = section_to_dict(
        section, counts={"students": 2}, include_class=True,
    )
    assert "_count" not in plain
    assert "class" not in plain
    assert plain["createdAt"] == NOW.isoformat()
    assert detailed["_count"] == {"students": 2}
    assert detailed["class"]["displayOrder"] == 1


def test_fee_structure_without_class():
    fee = SimpleNamespace(
        id="f1", school_id="sc1", class_id=None, name="Tuition", amount=10.0,
        frequency="MONTHLY", due_day=None, created_at=NOW, updated_at=NOW,
        school_class=None,
    )
    body = fee_structure_to_dict(fee, invoice_count=0)
    assert body["class"] is None
    assert body["_count"] == {"invoices": 0}


def test_student_summary_hides_phone_and_handles_no_section():
    student = SimpleNamespace(
        id="st1", user_id="u1", roll_number="7", user=_user(), section=None,
    )
    body = student_summary(student, include_section=True)
    assert "phone" not in body["user"]
    assert body["section"] is None
