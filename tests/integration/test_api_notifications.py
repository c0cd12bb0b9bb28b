from conftest import auth, make_department, make_user

from placement_portal.core.constants import NotificationType, UserRole
from placement_portal.services.notification_service import NotificationDispatcher


def _notify(user_id: int, count: int = 1) -> None:
    dispatcher = NotificationDispatcher()
    for i in range(count):
        dispatcher.dispatch([user_id], NotificationType.system, {"title": f"Notice {i}", "message": "Details"})


def test_list_with_unread_count(client) -> None:
    user = make_user(UserRole.student, department_id=make_department())
    _notify(user["user_id"], 3)

    body = client.get("/api/notifications", headers=auth(user["user_id"])).json()
    assert body["total"] == 3
    assert body["unread_count"] == 3


def test_mark_read_is_idempotent(client) -> None:
    user = make_user(UserRole.student, department_id=make_department())
    _notify(user["user_id"])
    headers = auth(user["user_id"])
    notification_id = client.get("/api/notifications", headers=headers).json()["notifications"][0]["id"]

    first = client.patch(f"/api/notifications/{notification_id}/read", headers=headers)
    second = client.patch(f"/api/notifications/{notification_id}/read", headers=headers)

    assert first.status_code == second.status_code == 200
    assert first.json()["read"] is True
    assert second.json()["read_at"] == first.json()["read_at"]
    assert client.get("/api/notifications", headers=headers).json()["unread_count"] == 0


def test_cannot_read_someone_elses_notification(client) -> None:
    owner = make_user(UserRole.student, department_id=make_department())
    other = make_user(UserRole.admin)
    _notify(owner["user_id"])
    notification_id = client.get("/api/notifications", headers=auth(owner["user_id"])).json()["notifications"][0]["id"]

    assert client.patch(f"/api/notifications/{notification_id}/read", headers=auth(other["user_id"])).status_code == 403
    assert client.delete(f"/api/notifications/{notification_id}", headers=auth(other["user_id"])).status_code == 403


def test_mark_all_read_and_unread_filter(client) -> None:
    user = make_user(UserRole.student, department_id=make_department())
    _notify(user["user_id"], 2)
    headers = auth(user["user_id"])

    resp = client.patch("/api/notifications/read-all", headers=headers)
    assert resp.json()["message"] == "2 notification(s) marked as read"
    assert client.get("/api/notifications", params={"unread_only": True}, headers=headers).json()["total"] == 0


def test_dispatch_ignores_empty_recipients() -> None:
    assert NotificationDispatcher().dispatch([], NotificationType.system, {"title": "x", "message": "y"}) == 0
    assert NotificationDispatcher().dispatch([None], NotificationType.system, {"title": "x", "message": "y"}) == 0
