from conftest import auth, make_department, make_user

from placement_portal.core.constants import UserRole


def test_student_updates_contact_details(client) -> None:
    student = make_user(UserRole.student, department_id=make_department())
    headers = auth(student["user_id"])

    resp = client.put("/api/students/me", headers=headers, json={"city": "Mysuru", "phone": "9876543210"})
    assert resp.status_code == 200
    assert resp.json()["city"] == "Mysuru"
    assert client.get("/api/auth/me", headers=headers).json()["user"]["phone"] == "9876543210"


def test_student_cannot_change_academic_fields(client) -> None:
    student = make_user(UserRole.student, department_id=make_department(), cgpa=6.0)
    headers = auth(student["user_id"])

    assert client.put("/api/students/me", headers=headers, json={"cgpa": 9.9}).status_code == 400
    resp = client.put(f"/api/students/{student['student_id']}", headers=headers, json={"cgpa": 9.9})
    assert resp.status_code == 403
    assert client.get("/api/students/me", headers=headers).json()["cgpa"] == 6.0


def test_admin_updates_academic_fields(client) -> None:
    admin = make_user(UserRole.admin)
    student = make_user(UserRole.student, department_id=make_department())

    resp = client.put(
        f"/api/students/{student['student_id']}", headers=auth(admin["user_id"]),
        json={"cgpa": 8.4, "active_backlogs": 1},
    )
    assert resp.status_code == 200
    assert resp.json()["cgpa"] == 8.4
    assert resp.json()["active_backlogs"] == 1


def test_officer_sees_and_verifies_own_department(client) -> None:
    cse = make_department("CSE", "Computer Science")
    ece = make_department("ECE", "Electronics")
    officer = make_user(UserRole.dept_officer, department_id=cse)
    own = make_user(UserRole.student, department_id=cse)
    other = make_user(UserRole.student, department_id=ece)
    headers = auth(officer["user_id"])

    listing = client.get("/api/students", headers=headers).json()
    assert [s["id"] for s in listing["students"]] == [own["student_id"]]
    assert client.get(f"/api/students/{other['student_id']}", headers=headers).status_code == 403

    verified = client.patch(f"/api/students/{own['student_id']}/verify", headers=headers, json={"is_verified": True})
    assert verified.status_code == 200
    assert verified.json()["is_verified"] is True


def test_coordinator_cannot_verify(client) -> None:
    cse = make_department()
    coordinator = make_user(UserRole.coordinator, department_id=cse)
    student = make_user(UserRole.student, department_id=cse)

    resp = client.patch(f"/api/students/{student['student_id']}/verify", headers=auth(coordinator["user_id"]), json={})
    assert resp.status_code == 403


def test_profile_sections(client) -> None:
    student = make_user(UserRole.student, department_id=make_department())
    headers = auth(student["user_id"])

    skill = client.post("/api/students/me/skills", headers=headers, json={"skill_name": "Python", "proficiency_level": "advanced"})
    assert skill.status_code == 201
    client.post("/api/students/me/projects", headers=headers, json={"title": "Placement tracker"})
    client.post("/api/students/me/internships", headers=headers, json={"company_name": "Acme", "role": "Intern"})

    profile = client.get("/api/students/me", headers=headers).json()
    assert [s["skill_name"] for s in profile["skills"]] == ["Python"]
    assert len(profile["projects"]) == 1
    assert len(profile["internships"]) == 1

    removed = client.delete(f"/api/students/me/skills/{skill.json()['id']}", headers=headers)
    assert removed.status_code == 200
    assert client.get("/api/students/me", headers=headers).json()["skills"] == []


def test_resume_upload_and_download(client, storage) -> None:
    student = make_user(UserRole.student, department_id=make_department())
    headers = auth(student["user_id"])

    resp = client.post("/api/students/me/resume", headers=headers, files={"file": ("cv.pdf", b"%PDF-1.4 resume", "application/pdf")})
    assert resp.status_code == 200
    url = resp.json()["url"]
    assert url == f"/api/files/{resp.json()['file_id']}"
    assert client.get("/api/students/me", headers=headers).json()["resume_url"] == url

    download = client.get(url, headers=headers)
    assert download.status_code == 200
    assert download.content == b"%PDF-1.4 resume"

    assert client.get(url).status_code == 401
    assert client.get("/api/files/not-an-id", headers=headers).status_code == 404


def test_resume_rejects_other_types(client) -> None:
    student = make_user(UserRole.student, department_id=make_department())
    resp = client.post(
        "/api/students/me/resume", headers=auth(student["user_id"]),
        files={"file": ("photo.png", b"\x89PNG", "image/png")},
    )
    assert resp.status_code == 400
