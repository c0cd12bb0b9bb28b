from conftest import auth, make_department, make_user

from placement_portal.core.constants import UserRole, UserStatus
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Notification, User


def _registration(department_id: int, **overrides) -> dict:
    payload = {
        "email": "asha@college.edu",
        "password": "Student@123",
        "first_name": "Asha",
        "last_name": "K",
        "department_id": department_id,
        "roll_number": "CSE2025001",
        "degree": "BTech",
        "batch_year": 2025,
    }
    payload.update(overrides)
    return payload


def test_register_creates_student_with_profile_and_welcome(client) -> None:
    department_id = make_department()

    resp = client.post("/api/auth/register", json=_registration(department_id))
    assert resp.status_code == 201
    body = resp.json()
    assert body["role"] == "student"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["student_profile"]["roll_number"] == "CSE2025001"
    assert "read_eligible" in me.json()["permissions"]["jobs"]

    with get_db_session() as db:
        assert db.query(Notification).filter_by(user_id=body["user_id"]).count() == 1


def test_register_rejects_duplicate_email(client) -> None:
    department_id = make_department()
    assert client.post("/api/auth/register", json=_registration(department_id)).status_code == 201

    resp = client.post("/api/auth/register", json=_registration(department_id, roll_number="CSE2025002"))
    assert resp.status_code == 409
    assert resp.json()["success"] is False


def test_register_rejects_unknown_fields(client) -> None:
    department_id = make_department()
    resp = client.post("/api/auth/register", json=_registration(department_id, role="admin"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationFailed"


def test_register_rejects_unknown_degree(client) -> None:
    department_id = make_department()
    resp = client.post("/api/auth/register", json=_registration(department_id, degree="PhD"))
    assert resp.status_code == 400


def test_login_and_wrong_password(client) -> None:
    user = make_user(UserRole.admin)

    ok = client.post("/api/auth/login", json={"email": user["email"], "password": "Password@123"})
    assert ok.status_code == 200
    assert ok.json()["user_id"] == user["user_id"]

    bad = client.post("/api/auth/login", json={"email": user["email"], "password": "wrong-password"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "AuthenticationFailed"


def test_inactive_account_cannot_authenticate(client) -> None:
    user = make_user(UserRole.admin)
    with get_db_session() as db:
        db.get(User, user["user_id"]).status = UserStatus.suspended

    assert client.get("/api/auth/me", headers=auth(user["user_id"])).status_code == 401
    login = client.post("/api/auth/login", json={"email": user["email"], "password": "Password@123"})
    assert login.status_code == 401


def test_missing_or_bad_token(client) -> None:
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"}).status_code == 401


def test_change_password(client) -> None:
    user = make_user(UserRole.coordinator, department_id=make_department())
    headers = auth(user["user_id"])

    wrong = client.put("/api/auth/password", headers=headers, json={"current_password": "nope", "new_password": "NewPass@123"})
    assert wrong.status_code == 400

    resp = client.put(
        "/api/auth/password", headers=headers,
        json={"current_password": "Password@123", "new_password": "NewPass@123"},
    )
    assert resp.status_code == 200
    login = client.post("/api/auth/login", json={"email": user["email"], "password": "NewPass@123"})
    assert login.status_code == 200
