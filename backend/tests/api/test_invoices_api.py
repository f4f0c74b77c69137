"""Invoices API: issue, bulk generation, payment updates and deletion.

Invariants:
    - Student and fee structure of an invoice belong to the caller's school
    - Bulk generation bills each student once per structure and month
    - PAID without a paidDate is stamped with today's date
    - Invoices of another school are 404
"""

from datetime import date

from sqlalchemy import func, select

from schoolhub.db.base import utc_now
from schoolhub.models import FeeInvoice


async def _invoice_count(session_factory) -> int:
    async with session_factory() as db:
        return await db.scalar(select(func.count()).select_from(FeeInvoice))


async def test_issue_invoice(client, auth, seed, school):
    school_class = await seed.school_class(school, "Grade 2")
    student = await seed.student(school, section=school_class.sections[0])
    fee = await seed.fee_structure(school, "Tuition", school_class, amount=1500)

    res = await client.post(
        "/api/v1/invoices",
        json={
            "studentId": student.id, "feeStructureId": fee.id,
            "amount": "1200.50", "dueDate": "2026-04-10", "remarks": "Sibling discount",
        },
        headers=auth,
    )
    assert res.status_code == 201
    invoice = res.json()["invoice"]
    assert invoice["amount"] == 1200.5
    assert invoice["status"] == "PENDING"
    assert invoice["dueDate"] == "2026-04-10"
    assert invoice["paidDate"] is None
    assert invoice["remarks"] == "Sibling discount"
    assert invoice["student"]["section"]["class"]["name"] == "Grade 2"
    assert invoice["feeStructure"] == {
        "id": fee.id, "name": "Tuition", "amount": 1500.0, "frequency": "MONTHLY",
    }


async def test_issue_for_foreign_student_is_404(
    client, auth, seed, school, other_school,
):
    fee = await seed.fee_structure(school)
    outsider = await seed.student(other_school)
    res = await client.post(
        "/api/v1/invoices",
        json={
            "studentId": outsider.id, "feeStructureId": fee.id,
            "amount": 10, "dueDate": "2026-04-10",
        },
        headers=auth,
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Student not found"}


async def test_issue_against_foreign_fee_structure_is_404(
    client, auth, seed, school, other_school,
):
    student = await seed.student(school)
    fee = await seed.fee_structure(other_school)
    res = await client.post(
        "/api/v1/invoices",
        json={
            "studentId": student.id, "feeStructureId": fee.id,
            "amount": 10, "dueDate": "2026-04-10",
        },
        headers=auth,
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Fee structure not found"}


async def test_sub_cent_invoice_amount_rejected(client, auth, seed, school):
    student = await seed.student(school)
    fee = await seed.fee_structure(school)
    res = await client.post(
        "/api/v1/invoices",
        json={
            "studentId": student.id, "feeStructureId": fee.id,
            "amount": 0.001, "dueDate": "2026-04-10",
        },
        headers=auth,
    )
    assert res.status_code == 400
    assert res.json()["details"][0]["path"] == ["amount"]


async def test_list_filters_and_scope(client, auth, seed, school, other_school):
    fee = await seed.fee_structure(school)
    ann = await seed.student(school, first_name="Ann")
    ben = await seed.student(school, first_name="Ben")
    await seed.invoice(fee, ann)
    paid = await seed.invoice(fee, ben)
    await client.put(
        f"/api/v1/invoices/{paid.id}", json={"status": "PAID"}, headers=auth,
    )
    foreign_fee = await seed.fee_structure(other_school)
    await seed.invoice(foreign_fee, await seed.student(other_school))

    everything = await client.get("/api/v1/invoices", headers=auth)
    by_status = await client.get(
        "/api/v1/invoices", params={"status": "PAID"}, headers=auth,
    )
    by_student = await client.get(
        "/api/v1/invoices", params={"studentId": ann.id}, headers=auth,
    )
    assert len(everything.json()["invoices"]) == 2
    assert [i["id"] for i in by_status.json()["invoices"]] == [paid.id]
    assert [i["studentId"] for i in by_student.json()["invoices"]] == [ann.id]


async def test_teacher_can_read_invoices(client, teacher_auth):
    res = await client.get("/api/v1/invoices", headers=teacher_auth)
    assert res.status_code == 200
    assert res.json() == {"invoices": []}


async def test_get_foreign_invoice_is_404(client, auth, seed, other_school):
    fee = await seed.fee_structure(other_school)
    invoice = await seed.invoice(fee, await seed.student(other_school))
    res = await client.get(f"/api/v1/invoices/{invoice.id}", headers=auth)
    assert res.status_code == 404
    assert res.json() == {"error": "Invoice not found"}


# --- Payment updates ----------------------------------------------------------

async def test_paid_without_date_is_stamped_today(client, auth, seed, school):
    invoice = await seed.invoice(
        await seed.fee_structure(school), await seed.student(school),
    )
    res = await client.put(
        f"/api/v1/invoices/{invoice.id}",
        json={"status": "PAID", "paymentMethod": "CASH"},
        headers=auth,
    )
    assert res.status_code == 200
    body = res.json()["invoice"]
    assert body["status"] == "PAID"
    assert body["paymentMethod"] == "CASH"
    assert body["paidDate"] == utc_now().date().isoformat()


async def test_explicit_paid_date_is_kept(client, auth, seed, school):
    invoice = await seed.invoice(
        await seed.fee_structure(school), await seed.student(school),
    )
    res = await client.put(
        f"/api/v1/invoices/{invoice.id}",
        json={"status": "PAID", "paidDate": "2026-01-05", "transactionId": "TX-1"},
        headers=auth,
    )
    body = res.json()["invoice"]
    assert body["paidDate"] == "2026-01-05"
    assert body["transactionId"] == "TX-1"


async def test_status_cannot_be_null(client, auth, seed, school):
    invoice = await seed.invoice(
        await seed.fee_structure(school), await seed.student(school),
    )
    res = await client.put(
        f"/api/v1/invoices/{invoice.id}", json={"status": None}, headers=auth,
    )
    assert res.status_code == 400


async def test_update_foreign_invoice_is_404(client, other_auth, seed, school):
    invoice = await seed.invoice(
        await seed.fee_structure(school), await seed.student(school),
    )
    res = await client.put(
        f"/api/v1/invoices/{invoice.id}", json={"status": "PAID"},
        headers=other_auth,
    )
    assert res.status_code == 404


async def test_delete_invoice(client, auth, seed, school, session_factory):
    invoice = await seed.invoice(
        await seed.fee_structure(school), await seed.student(school),
    )
    res = await client.delete(f"/api/v1/invoices/{invoice.id}", headers=auth)
    assert res.json() == {"success": True}
    assert await _invoice_count(session_factory) == 0


# --- Bulk generation ----------------------------------------------------------

async def test_bulk_bills_the_structure_class_and_skips_billed(
    client, auth, seed, school, session_factory,
):
    grade_1 = await seed.school_class(school, "Grade 1")
    grade_2 = await seed.school_class(school, "Grade 2", display_order=2)
    billed = await seed.student(school, section=grade_1.sections[0])
    await seed.student(school, section=grade_1.sections[0])
    await seed.student(school, section=grade_2.sections[0])
    fee = await seed.fee_structure(school, "Tuition", grade_1, amount=800)
    await seed.invoice(fee, billed)  # due 2026-01-10

    res = await client.post(
        "/api/v1/invoices/bulk",
        json={"feeStructureId": fee.id, "dueDate": "2026-01-25"},
        headers=auth,
    )
    assert res.status_code == 200
    assert res.json() == {
        "message": "Successfully created 1 invoices", "count": 1, "skipped": 1,
    }
    async with session_factory() as db:
        rows = (await db.execute(select(FeeInvoice))).unique().scalars().all()
    new = [r for r in rows if r.due_date == date(2026, 1, 25)]
    assert len(new) == 1
    assert new[0].amount == 800


async def test_bulk_when_everyone_is_billed(client, auth, seed, school):
    school_class = await seed.school_class(school)
    student = await seed.student(school, section=school_class.sections[0])
    fee = await seed.fee_structure(school, "Tuition", school_class)
    await seed.invoice(fee, student)

    res = await client.post(
        "/api/v1/invoices/bulk",
        json={"feeStructureId": fee.id, "dueDate": "2026-01-31"},
        headers=auth,
    )
    assert res.status_code == 400
    assert res.json() == {
        "error": "Invoices already exist for all selected students in this period",
    }


async def test_bulk_next_month_bills_again(client, auth, seed, school):
    school_class = await seed.school_class(school)
    student = await seed.student(school, section=school_class.sections[0])
    fee = await seed.fee_structure(school, "Tuition", school_class)
    await seed.invoice(fee, student)

    res = await client.post(
        "/api/v1/invoices/bulk",
        json={"feeStructureId": fee.id, "dueDate": "2026-02-10"},
        headers=auth,
    )
    assert res.json()["count"] == 1


async def test_bulk_section_target(client, auth, seed, school):
    school_class = await seed.school_class(school, sections=("A", "B"))
    await seed.student(school, section=school_class.sections[0])
    await seed.student(school, section=school_class.sections[1])
    fee = await seed.fee_structure(school, "Tuition", school_class)

    res = await client.post(
        "/api/v1/invoices/bulk",
        json={
            "feeStructureId": fee.id, "dueDate": "2026-05-10",
            "sectionId": school_class.sections[1].id,
        },
        headers=auth,
    )
    assert res.json()["count"] == 1


async def test_bulk_without_students(client, auth, seed, school):
    school_class = await seed.school_class(school)
    fee = await seed.fee_structure(school, "Tuition", school_class)
    res = await client.post(
        "/api/v1/invoices/bulk",
        json={"feeStructureId": fee.id, "dueDate": "2026-05-10"},
        headers=auth,
    )
    assert res.status_code == 400
    assert res.json() == {"error": "No students found matching the criteria"}


async def test_bulk_never_reaches_another_school(
    client, auth, seed, school, other_school, session_factory,
):
    foreign_class = await seed.school_class(other_school)
    await seed.student(other_school, section=foreign_class.sections[0])
    fee = await seed.fee_structure(school, "Tuition")

    res = await client.post(
        "/api/v1/invoices/bulk",
        json={
            "feeStructureId": fee.id, "dueDate": "2026-05-10",
            "classId": foreign_class.id,
        },
        headers=auth,
    )
    assert res.status_code == 400
    assert await _invoice_count(session_factory) == 0
