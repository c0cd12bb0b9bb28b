from conftest import auth, make_department, make_user

from placement_portal.core.constants import UserRole


def test_admin_creates_staff_account(client) -> None:
    admin = make_user(UserRole.admin)
    cse = make_department()

    resp = client.post("/api/users", headers=auth(admin["user_id"]), json={
        "email": "officer@college.edu",
        "password": "Officer@123",
        "role": "dept_officer",
        "first_name": "Meera",
        "department_id": cse,
    })
    assert resp.status_code == 201
    assert resp.json()["role"] == "dept_officer"
    assert resp.json()["department_id"] == cse


def test_department_staff_need_a_department(client) -> None:
    admin = make_user(UserRole.admin)
    resp = client.post("/api/users", headers=auth(admin["user_id"]), json={
        "email": "coord@college.edu", "password": "Coord@1234", "role": "coordinator", "first_name": "Ravi",
    })
    assert resp.status_code == 400


def test_officer_creates_only_in_own_department(client) -> None:
    cse = make_department("CSE", "Computer Science")
    ece = make_department("ECE", "Electronics")
    officer = make_user(UserRole.dept_officer, department_id=cse)
    headers = auth(officer["user_id"])

    created = client.post("/api/users", headers=headers, json={
        "email": "coord@college.edu", "password": "Coord@1234", "role": "coordinator", "first_name": "Ravi",
    })
    assert created.status_code == 201
    assert created.json()["department_id"] == cse

    elsewhere = client.post("/api/users", headers=headers, json={
        "email": "coord2@college.edu", "password": "Coord@1234", "role": "coordinator",
        "first_name": "Anu", "department_id": ece,
    })
    assert elsewhere.status_code == 403

    admin_attempt = client.post("/api/users", headers=headers, json={
        "email": "boss@college.edu", "password": "Admin@1234", "role": "admin", "first_name": "Boss",
    })
    assert admin_attempt.status_code == 403


def test_officer_lists_own_department(client) -> None:
    cse = make_department("CSE", "Computer Science")
    ece = make_department("ECE", "Electronics")
    officer = make_user(UserRole.dept_officer, department_id=cse)
    make_user(UserRole.coordinator, department_id=cse)
    make_user(UserRole.coordinator, department_id=ece)

    body = client.get("/api/users", headers=auth(officer["user_id"])).json()
    assert body["total"] == 2
    assert {u["department_id"] for u in body["users"]} == {cse}


def test_status_changes(client) -> None:
    admin = make_user(UserRole.admin)
    student = make_user(UserRole.student, department_id=make_department())
    headers = auth(admin["user_id"])

    resp = client.patch(f"/api/users/{student['user_id']}/status", headers=headers, json={"status": "suspended"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "suspended"
    assert client.get("/api/auth/me", headers=auth(student["user_id"])).status_code == 401

    assert client.patch(f"/api/users/{admin['user_id']}/status", headers=headers, json={"status": "inactive"}).status_code == 400


def test_students_and_coordinators_cannot_manage_users(client) -> None:
    cse = make_department()
    for role in (UserRole.student, UserRole.coordinator):
        user = make_user(role, department_id=cse)
        assert client.get("/api/users", headers=auth(user["user_id"])).status_code == 403


def test_departments(client) -> None:
    admin = make_user(UserRole.admin)
    student = make_user(UserRole.student, department_id=make_department("ECE", "Electronics"))

    created = client.post("/api/departments", headers=auth(admin["user_id"]), json={"code": "mech", "name": "Mechanical"})
    assert created.status_code == 201
    assert created.json()["code"] == "MECH"

    duplicate = client.post("/api/departments", headers=auth(admin["user_id"]), json={"code": "MECH", "name": "Mechanical"})
    assert duplicate.status_code == 409

    assert client.post("/api/departments", headers=auth(student["user_id"]), json={"code": "X", "name": "Xyz"}).status_code == 403
    codes = [d["code"] for d in client.get("/api/departments", headers=auth(student["user_id"])).json()]
    assert codes == ["ECE", "MECH"]
