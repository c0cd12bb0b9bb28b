import csv
import io

from conftest import auth, make_company, make_department, make_job, make_user

from placement_portal.core.constants import PlacementStatus, UserRole


def _rows(resp):
    return list(csv.DictReader(io.StringIO(resp.text)))


def test_officer_exports_own_department_students(client) -> None:
    cse = make_department("CSE", "Computer Science")
    ece = make_department("ECE", "Electronics")
    officer = make_user(UserRole.dept_officer, department_id=cse)
    own = make_user(UserRole.student, department_id=cse, cgpa=8.1)
    make_user(UserRole.student, department_id=ece)

    resp = client.get("/api/export/students", headers=auth(officer["user_id"]))
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"].startswith("attachment; filename=students_export_")

    rows = _rows(resp)
    assert [r["Email"] for r in rows] == [own["email"]]
    assert rows[0]["CGPA"] == "8.1"
    assert rows[0]["Department"] == "Computer Science"


def test_export_applications(client) -> None:
    admin = make_user(UserRole.admin)
    student = make_user(UserRole.student, department_id=make_department(), cgpa=8.0)
    job = make_job(make_company("Acme Corp"), title="Data Engineer")
    client.post(f"/api/jobs/{job}/apply", headers=auth(student["user_id"]), json={})

    rows = _rows(client.get("/api/export/applications", headers=auth(admin["user_id"])))
    assert len(rows) == 1
    assert rows[0]["Company"] == "Acme Corp"
    assert rows[0]["Job Title"] == "Data Engineer"
    assert rows[0]["Status"] == "submitted"


def test_coordinator_cannot_export(client) -> None:
    coordinator = make_user(UserRole.coordinator, department_id=make_department())
    assert client.get("/api/export/students", headers=auth(coordinator["user_id"])).status_code == 403


def test_overview_counts_by_scope(client) -> None:
    cse = make_department("CSE", "Computer Science")
    ece = make_department("ECE", "Electronics")
    admin = make_user(UserRole.admin)
    coordinator = make_user(UserRole.coordinator, department_id=cse)
    placed = make_user(UserRole.student, department_id=cse, cgpa=8.0, placement_status=PlacementStatus.placed)
    make_user(UserRole.student, department_id=cse, cgpa=8.0)
    ece_student = make_user(UserRole.student, department_id=ece, cgpa=8.0)
    job = make_job(make_company())
    client.post(f"/api/jobs/{job}/apply", headers=auth(ece_student["user_id"]), json={})

    overall = client.get("/api/analytics/overview", headers=auth(admin["user_id"])).json()
    assert overall["total_students"] == 3
    assert overall["placed_students"] == 1
    assert overall["active_jobs"] == 1
    assert overall["total_applications"] == 1

    department = client.get("/api/analytics/overview", headers=auth(coordinator["user_id"])).json()
    assert department["total_students"] == 2
    assert department["placed_students"] == 1
    assert department["placement_rate"] == 50.0
    assert department["total_applications"] == 0

    own = client.get("/api/analytics/overview", headers=auth(placed["user_id"])).json()
    assert own["total_applications"] == 0


def test_department_breakdown(client) -> None:
    cse = make_department("CSE", "Computer Science")
    ece = make_department("ECE", "Electronics")
    admin = make_user(UserRole.admin)
    officer = make_user(UserRole.dept_officer, department_id=ece)
    student = make_user(UserRole.student, department_id=cse, placement_status=PlacementStatus.placed)
    make_user(UserRole.student, department_id=ece)

    everything = client.get("/api/analytics/departments", headers=auth(admin["user_id"])).json()
    assert [(d["code"], d["placed_students"], d["placement_rate"]) for d in everything] == [("CSE", 1, 100.0), ("ECE", 0, 0.0)]

    own = client.get("/api/analytics/departments", headers=auth(officer["user_id"])).json()
    assert [d["code"] for d in own] == ["ECE"]
    assert own[0]["total_students"] == 1

    assert client.get("/api/analytics/departments", headers=auth(student["user_id"])).status_code == 403
