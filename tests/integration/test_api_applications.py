import pytest
from conftest import auth, make_company, make_department, make_job, make_user
from sqlalchemy.exc import IntegrityError

from placement_portal.core.constants import ApplicationStatus, PlacementStatus, UserRole
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Application, Notification, StudentProfile


def _apply(client, student: dict, job_id: int) -> int:
    resp = client.post(f"/api/jobs/{job_id}/apply", headers=auth(student["user_id"]), json={})
    assert resp.status_code == 201
    return resp.json()["id"]


def _set_status(application_id: int, status: ApplicationStatus) -> None:
    with get_db_session() as db:
        db.get(Application, application_id).status = status


def test_coordinator_sees_only_department_applications(client) -> None:
    cse = make_department("CSE", "Computer Science")
    ece = make_department("ECE", "Electronics")
    coordinator = make_user(UserRole.coordinator, department_id=cse)
    job = make_job(make_company())
    own = _apply(client, make_user(UserRole.student, department_id=cse, cgpa=8.0), job)
    _apply(client, make_user(UserRole.student, department_id=ece, cgpa=8.0), job)

    resp = client.get("/api/applications", headers=auth(coordinator["user_id"]))
    assert resp.status_code == 200
    body = resp.json()
    assert [a["id"] for a in body["applications"]] == [own]
    assert body["total"] == 1

    job_view = client.get(f"/api/jobs/{job}/applications", headers=auth(coordinator["user_id"]))
    assert job_view.json()["total"] == 1


def test_student_sees_only_own_applications(client) -> None:
    cse = make_department()
    job = make_job(make_company())
    first = make_user(UserRole.student, department_id=cse, cgpa=8.0)
    second = make_user(UserRole.student, department_id=cse, cgpa=8.0)
    _apply(client, first, job)
    other = _apply(client, second, job)

    listing = client.get("/api/applications", headers=auth(first["user_id"])).json()
    assert listing["total"] == 1
    assert client.get(f"/api/applications/{other}", headers=auth(first["user_id"])).status_code == 403
    assert client.get("/api/applications/9999", headers=auth(first["user_id"])).status_code == 404


def test_coordinator_may_shortlist_but_not_reject(client) -> None:
    cse = make_department()
    coordinator = make_user(UserRole.coordinator, department_id=cse)
    student = make_user(UserRole.student, department_id=cse, cgpa=8.0)
    application = _apply(client, student, make_job(make_company()))
    headers = auth(coordinator["user_id"])

    shortlisted = client.patch(f"/api/applications/{application}/status", headers=headers, json={"status": "shortlisted"})
    assert shortlisted.status_code == 200
    assert shortlisted.json()["reviewed_by"] == coordinator["user_id"]
    assert shortlisted.json()["reviewed_at"] is not None

    rejected = client.patch(f"/api/applications/{application}/status", headers=headers, json={"status": "rejected"})
    assert rejected.status_code == 403

    with get_db_session() as db:
        assert db.query(Notification).filter_by(user_id=student["user_id"], title="Application Update").count() == 1


def test_officer_cannot_touch_other_departments(client) -> None:
    cse = make_department("CSE", "Computer Science")
    ece = make_department("ECE", "Electronics")
    officer = make_user(UserRole.dept_officer, department_id=ece)
    application = _apply(client, make_user(UserRole.student, department_id=cse, cgpa=8.0), make_job(make_company()))

    resp = client.patch(f"/api/applications/{application}/status", headers=auth(officer["user_id"]), json={"status": "rejected"})
    assert resp.status_code == 403


def test_offer_acceptance_marks_student_placed(client) -> None:
    admin = make_user(UserRole.admin)
    student = make_user(UserRole.student, department_id=make_department(), cgpa=8.0)
    application = _apply(client, student, make_job(make_company()))
    _set_status(application, ApplicationStatus.selected)

    resp = client.patch(f"/api/applications/{application}/status", headers=auth(admin["user_id"]), json={"status": "offer_accepted"})
    assert resp.status_code == 200

    with get_db_session() as db:
        assert db.get(StudentProfile, student["student_id"]).placement_status == PlacementStatus.placed


def test_withdraw_own_submitted_application(client) -> None:
    student = make_user(UserRole.student, department_id=make_department(), cgpa=8.0)
    job = make_job(make_company())
    application = _apply(client, student, job)

    resp = client.patch(f"/api/applications/{application}/withdraw", headers=auth(student["user_id"]))
    assert resp.status_code == 200
    assert resp.json()["status"] == "withdrawn"

    # A withdrawn application does not block a new one
    _apply(client, student, job)


def test_withdraw_after_selection_is_refused(client) -> None:
    student = make_user(UserRole.student, department_id=make_department(), cgpa=8.0)
    application = _apply(client, student, make_job(make_company()))
    _set_status(application, ApplicationStatus.selected)

    resp = client.patch(f"/api/applications/{application}/withdraw", headers=auth(student["user_id"]))
    assert resp.status_code == 400
    assert resp.json()["error"] == "IllegalTransition"


def test_staff_cannot_withdraw(client) -> None:
    admin = make_user(UserRole.admin)
    application = _apply(client, make_user(UserRole.student, department_id=make_department(), cgpa=8.0), make_job(make_company()))

    assert client.patch(f"/api/applications/{application}/withdraw", headers=auth(admin["user_id"])).status_code == 403
    resp = client.patch(f"/api/applications/{application}/status", headers=auth(admin["user_id"]), json={"status": "withdrawn"})
    assert resp.status_code == 400


def test_bulk_status_is_all_or_nothing(client) -> None:
    cse = make_department()
    officer = make_user(UserRole.dept_officer, department_id=cse)
    job = make_job(make_company())
    first = _apply(client, make_user(UserRole.student, department_id=cse, cgpa=8.0), job)
    second = _apply(client, make_user(UserRole.student, department_id=cse, cgpa=8.0), job)
    _set_status(second, ApplicationStatus.rejected)
    headers = auth(officer["user_id"])

    refused = client.post("/api/applications/bulk-status", headers=headers, json={"application_ids": [first, second], "status": "shortlisted"})
    assert refused.status_code == 400
    with get_db_session() as db:
        assert db.get(Application, first).status == ApplicationStatus.submitted

    _set_status(second, ApplicationStatus.under_review)
    resp = client.post("/api/applications/bulk-status", headers=headers, json={"application_ids": [first, second], "status": "shortlisted"})
    assert resp.status_code == 200
    assert resp.json() == {"count": 2, "status": "shortlisted"}


def test_store_rejects_second_live_application() -> None:
    department_id = make_department()
    student = make_user(UserRole.student, department_id=department_id)
    job = make_job(make_company())

    with get_db_session() as db:
        db.add(Application(job_id=job, student_id=student["student_id"], status=ApplicationStatus.withdrawn))
        db.add(Application(job_id=job, student_id=student["student_id"]))

    with pytest.raises(IntegrityError):
        with get_db_session() as db:
            db.add(Application(job_id=job, student_id=student["student_id"]))
