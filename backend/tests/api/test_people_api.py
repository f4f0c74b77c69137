"""People API: parent/teacher directories and parent-student links.

Invariants:
    - Directories list only the caller's school; teachers only when active
    - Both ends of a link must belong to the caller's school
    - A parent is linked to a student at most once
    - Links of another school are 404 on delete
"""

from schoolhub.models import ParentStudent


# --- Directory ----------------------------------------------------------------

async def test_teachers_are_active_flattened_and_sorted(
    client, auth, seed, school, other_school,
):
    await seed.teacher(school, "Zoe", "Zimmer")
    await seed.teacher(school, "Alan", "Turing")
    await seed.teacher(school, "Gone", "Away", is_active=False)
    await seed.teacher(other_school, "Foreign", "Teacher")

    res = await client.get("/api/v1/teachers", headers=auth)
    teachers = res.json()["teachers"]
    assert [t["firstName"] for t in teachers] == ["Alan", "Zoe"]
    assert set(teachers[0]) == {
        "id", "userId", "employeeId", "firstName", "lastName", "email",
    }


async def test_parents_include_children(client, auth, seed, school):
    school_class = await seed.school_class(school, "Grade 4")
    student = await seed.student(school, section=school_class.sections[0])
    parent = await seed.parent(school, "Maria")
    await seed.add(ParentStudent(parent_id=parent.id, student_id=student.id))

    res = await client.get("/api/v1/parents", headers=auth)
    parents = res.json()["parents"]
    assert parents[0]["user"]["firstName"] == "Maria"
    child = parents[0]["children"][0]
    assert child["studentId"] == student.id
    assert child["student"]["section"]["class"]["name"] == "Grade 4"


async def test_parents_sorted_and_scoped(client, auth, seed, school, other_school):
    await seed.parent(school, "Yusuf")
    await seed.parent(school, "Bea")
    await seed.parent(other_school, "Outsider")
    res = await client.get("/api/v1/parents", headers=auth)
    assert [p["user"]["firstName"] for p in res.json()["parents"]] == ["Bea", "Yusuf"]


async def test_directory_requires_session(client):
    assert (await client.get("/api/v1/teachers")).status_code == 401
    assert (await client.get("/api/v1/parents")).status_code == 401


# --- Parent-student links -----------------------------------------------------

async def test_link_parent_and_student(client, auth, seed, school):
    parent = await seed.parent(school)
    student = await seed.student(school)
    res = await client.post(
        "/api/v1/parent-students",
        json={"parentId": parent.id, "studentId": student.id},
        headers=auth,
    )
    assert res.status_code == 201
    link = res.json()["link"]
    assert link["parent"]["id"] == parent.id
    assert link["student"]["id"] == student.id
    assert link["student"]["section"] is None


async def test_duplicate_link_rejected(client, auth, seed, school):
    parent = await seed.parent(school)
    student = await seed.student(school)
    body = {"parentId": parent.id, "studentId": student.id}
    await client.post("/api/v1/parent-students", json=body, headers=auth)
    res = await client.post("/api/v1/parent-students", json=body, headers=auth)
    assert res.status_code == 400
    assert res.json() == {"error": "This parent is already linked to this student"}


async def test_foreign_parent_rejected(client, auth, seed, school, other_school):
    parent = await seed.parent(other_school)
    student = await seed.student(school)
    res = await client.post(
        "/api/v1/parent-students",
        json={"parentId": parent.id, "studentId": student.id},
        headers=auth,
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Parent not found"}


async def test_foreign_student_rejected(client, auth, seed, school, other_school):
    parent = await seed.parent(school)
    student = await seed.student(other_school)
    res = await client.post(
        "/api/v1/parent-students",
        json={"parentId": parent.id, "studentId": student.id},
        headers=auth,
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Student not found"}


async def test_list_links_with_filters(client, auth, seed, school):
    mother = await seed.parent(school, "Maria")
    father = await seed.parent(school, "Carlos")
    student = await seed.student(school)
    sibling = await seed.student(school)
    await seed.add(ParentStudent(parent_id=mother.id, student_id=student.id))
    await seed.add(ParentStudent(parent_id=father.id, student_id=student.id))
    await seed.add(ParentStudent(parent_id=mother.id, student_id=sibling.id))

    everything = await client.get("/api/v1/parent-students", headers=auth)
    names = [link["parent"]["user"]["firstName"] for link in everything.json()["links"]]
    assert names[0] == "Carlos"
    assert len(names) == 3

    by_parent = await client.get(
        "/api/v1/parent-students", params={"parentId": mother.id}, headers=auth,
    )
    assert len(by_parent.json()["links"]) == 2

    by_student = await client.get(
        "/api/v1/parent-students", params={"studentId": sibling.id}, headers=auth,
    )
    assert [link["parentId"] for link in by_student.json()["links"]] == [mother.id]


async def test_list_links_hides_other_schools(client, auth, seed, other_school):
    parent = await seed.parent(other_school)
    student = await seed.student(other_school)
    await seed.add(ParentStudent(parent_id=parent.id, student_id=student.id))
    res = await client.get("/api/v1/parent-students", headers=auth)
    assert res.json() == {"links": []}


async def test_unlink(client, auth, seed, school):
    parent = await seed.parent(school)
    student = await seed.student(school)
    link = await seed.add(ParentStudent(parent_id=parent.id, student_id=student.id))
    res = await client.delete(f"/api/v1/parent-students/{link.id}", headers=auth)
    assert res.json() == {"success": True}


async def test_unlink_foreign_link_is_404(client, auth, seed, other_school):
    parent = await seed.parent(other_school)
    student = await seed.student(other_school)
    link = await seed.add(ParentStudent(parent_id=parent.id, student_id=student.id))
    res = await client.delete(f"/api/v1/parent-students/{link.id}", headers=auth)
    assert res.status_code == 404
    assert res.json() == {"error": "Link not found"}
