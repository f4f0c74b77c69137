"""Domain Types: enum values and the resolved session user."""

import dataclasses

import pytest

from schoolhub.core.domain_types import (
    FeeFrequency, InvoiceStatus, SchoolId, SessionUser, UserId, UserRole,
)


def test_identity_types_wrap_str():
    assert SchoolId("s1") == "s1"
    assert UserId("u1") == "u1"


def test_roles():
    assert {r.value for r in UserRole} == {
        "SUPER_ADMIN", "ADMIN", "TEACHER", "STUDENT", "PARENT",
    }


def test_fee_frequencies():
    assert [f.value for f in FeeFrequency] == ["MONTHLY", "QUARTERLY", "ANNUAL"]


def test_enums_compare_to_db_strings():
    assert FeeFrequency.MONTHLY == "MONTHLY"
    assert InvoiceStatus.PENDING == "PENDING"


def test_session_user_role_check():
    user = SessionUser(id=UserId("u1"), role="ADMIN", school_id=SchoolId("s1"))
    assert user.has_role({"SUPER_ADMIN", "ADMIN"})
    assert not user.has_role({"TEACHER"})


def test_session_user_is_immutable():
    user = SessionUser(id=UserId("u1"), role="ADMIN", school_id=SchoolId("s1"))
    with pytest.raises(dataclasses.FrozenInstanceError):
        user.role = "SUPER_ADMIN"
