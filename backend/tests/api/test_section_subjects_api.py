"""Section Subjects API: who teaches each class subject in one section.

Invariants:
    - Every subject of the section's class is listed, assigned or not
    - Only a teacher qualified for the subject can teach it in a section
    - A section holds one teacher per subject; assigning again replaces it
    - A subject of another class is 404 for this section
"""

from sqlalchemy import select

from schoolhub.models import SectionSubjectTeacher, SectionTeacher, TeacherSubject


async def _qualified(seed, teacher, subject):
    await seed.add(TeacherSubject(teacher_id=teacher.id, subject_id=subject.id))


async def test_overview_lists_every_class_subject(client, auth, seed, school):
    school_class = await seed.school_class(school, "Grade 3")
    section = school_class.sections[0]
    science = await seed.subject(school_class, "Science")
    art = await seed.subject(school_class, "Art")
    grace = await seed.teacher(school, "Grace", "Hopper")
    alan = await seed.teacher(school, "Alan", "Turing")
    await _qualified(seed, grace, science)
    await _qualified(seed, alan, science)
    await seed.add(SectionSubjectTeacher(
        section_id=section.id, subject_id=science.id, teacher_id=grace.id,
    ))
    await seed.add(SectionTeacher(section_id=section.id, teacher_id=alan.id))

    res = await client.get(f"/api/v1/sections/{section.id}/subjects", headers=auth)
    assert res.status_code == 200
    body = res.json()
    assert body["section"] == {
        "id": section.id,
        "name": "A",
        "className": "Grade 3",
        "classTeacher": {"id": alan.id, "firstName": "Alan", "lastName": "Turing"},
    }
    rows = body["subjectAssignments"]
    assert [r["subjectName"] for r in rows] == ["Art", "Science"]
    assert rows[0]["assignedTeacher"] is None
    assert rows[0]["availableTeachers"] == []
    assert rows[1]["assignedTeacher"]["id"] == grace.id
    assert {t["firstName"] for t in rows[1]["availableTeachers"]} == {"Grace", "Alan"}


async def test_overview_of_foreign_section_is_404(client, auth, seed, other_school):
    foreign = await seed.school_class(other_school)
    res = await client.get(
        f"/api/v1/sections/{foreign.sections[0].id}/subjects", headers=auth,
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Section not found"}


async def test_assign_then_replace_subject_teacher(
    client, auth, seed, school, session_factory,
):
    school_class = await seed.school_class(school)
    section = school_class.sections[0]
    subject = await seed.subject(school_class)
    first = await seed.teacher(school, "Grace")
    second = await seed.teacher(school, "Alan")
    await _qualified(seed, first, subject)
    await _qualified(seed, second, subject)
    url = f"/api/v1/sections/{section.id}/subjects"

    res = await client.post(
        url, json={"subjectId": subject.id, "teacherId": first.id}, headers=auth,
    )
    assert res.status_code == 201
    assignment = res.json()["assignment"]
    assert assignment["sectionId"] == section.id
    assert assignment["subject"]["name"] == "Mathematics"
    assert assignment["teacher"]["firstName"] == "Grace"

    res = await client.post(
        url, json={"subjectId": subject.id, "teacherId": second.id}, headers=auth,
    )
    assert res.json()["assignment"]["teacher"]["firstName"] == "Alan"

    async with session_factory() as db:
        rows = await db.execute(
            select(SectionSubjectTeacher)
            .where(SectionSubjectTeacher.section_id == section.id),
        )
        assert [r.teacher_id for r in rows.unique().scalars().all()] == [second.id]


async def test_unqualified_teacher_rejected(client, auth, seed, school):
    school_class = await seed.school_class(school)
    subject = await seed.subject(school_class)
    teacher = await seed.teacher(school)
    res = await client.post(
        f"/api/v1/sections/{school_class.sections[0].id}/subjects",
        json={"subjectId": subject.id, "teacherId": teacher.id},
        headers=auth,
    )
    assert res.status_code == 400
    assert res.json() == {"error": "Teacher is not assigned to teach this subject"}


async def test_subject_of_another_class_is_404(client, auth, seed, school):
    own = await seed.school_class(school, "Grade 1")
    other = await seed.school_class(school, "Grade 2", display_order=2)
    subject = await seed.subject(other)
    teacher = await seed.teacher(school)
    await _qualified(seed, teacher, subject)
    res = await client.post(
        f"/api/v1/sections/{own.sections[0].id}/subjects",
        json={"subjectId": subject.id, "teacherId": teacher.id},
        headers=auth,
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Subject not found in this class"}


async def test_assignment_needs_both_ids(client, auth, seed, school):
    school_class = await seed.school_class(school)
    res = await client.post(
        f"/api/v1/sections/{school_class.sections[0].id}/subjects",
        json={"subjectId": ""},
        headers=auth,
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Validation error"


async def test_remove_requires_subject_id(client, auth, seed, school):
    school_class = await seed.school_class(school)
    res = await client.delete(
        f"/api/v1/sections/{school_class.sections[0].id}/subjects", headers=auth,
    )
    assert res.status_code == 400
    assert res.json() == {"error": "subjectId is required"}


async def test_remove_subject_teacher(client, auth, seed, school):
    school_class = await seed.school_class(school)
    section = school_class.sections[0]
    subject = await seed.subject(school_class)
    teacher = await seed.teacher(school)
    await _qualified(seed, teacher, subject)
    await seed.add(SectionSubjectTeacher(
        section_id=section.id, subject_id=subject.id, teacher_id=teacher.id,
    ))
    url = f"/api/v1/sections/{section.id}/subjects"

    first = await client.delete(url, params={"subjectId": subject.id}, headers=auth)
    second = await client.delete(url, params={"subjectId": subject.id}, headers=auth)
    assert first.json() == {"success": True}
    assert second.status_code == 404
    assert second.json() == {
        "error": "No teacher is assigned to this subject in this section",
    }


async def test_remove_in_foreign_section_is_404(client, auth, seed, other_school):
    foreign = await seed.school_class(other_school)
    subject = await seed.subject(foreign)
    res = await client.delete(
        f"/api/v1/sections/{foreign.sections[0].id}/subjects",
        params={"subjectId": subject.id},
        headers=auth,
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Section not found"}
