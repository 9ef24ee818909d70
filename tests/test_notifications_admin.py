from hrportal.services.audit import AuditService
from hrportal.services.notification import NotificationService


def test_notifications_lifecycle(client, employee, intern, auth_headers, db_session):
    first = NotificationService.notify_user(db_session, employee.id, "Hello", "First")
    NotificationService.notify_user(db_session, employee.id, "Hello again", "Second")
    NotificationService.notify_user(db_session, intern.id, "Not yours", "Other")
    db_session.commit()

    listed = client.get("/api/notifications/", headers=auth_headers(employee)).json()
    assert {n["title"] for n in listed} == {"Hello", "Hello again"}

    read = client.patch(f"/api/notifications/{first.id}/read", headers=auth_headers(employee))
    assert read.status_code == 200
    assert read.json()["is_read"] is True

    unread = client.get("/api/notifications/", headers=auth_headers(employee), params={"unread_only": True}).json()
    assert [n["title"] for n in unread] == ["Hello again"]

    # Someone else's notification looks like a missing one
    assert client.patch(f"/api/notifications/{first.id}/read", headers=auth_headers(intern)).status_code == 404

    result = client.post("/api/notifications/mark-all-read", headers=auth_headers(employee)).json()
    assert result["updated"] == 1
    db_session.expire_all()
    assert client.get(
        "/api/notifications/", headers=auth_headers(employee), params={"unread_only": True}
    ).json() == []


def test_audit_logs_are_director_only(client, director, manager, auth_headers, db_session):
    AuditService.log(
        db_session, action="update_role", entity_type="user", entity_id=manager.id,
        user_id=director.id, user_role=director.role, details={"note": "promotion"},
        before_state={"role": "team_lead"}, after_state={"role": manager.role}
    )
    AuditService.log(
        db_session, action="login", entity_type="user", entity_id=manager.id,
        user_id=manager.id, user_role=manager.role, details={}
    )
    db_session.commit()

    assert client.get("/api/admin/audit-logs", headers=auth_headers(manager)).status_code == 403

    response = client.get("/api/admin/audit-logs", headers=auth_headers(director), params={"action": "update_role"})
    assert response.status_code == 200
    logs = response.json()
    assert len(logs) == 1
    assert logs[0]["entity_id"] == manager.id
    assert logs[0]["before_state"] == {"role": "team_lead"}

    detail = client.get(f"/api/admin/audit-logs/{logs[0]['id']}", headers=auth_headers(director))
    assert detail.status_code == 200
    assert client.get("/api/admin/audit-logs/999999", headers=auth_headers(director)).status_code == 404

    by_user = client.get("/api/admin/audit-logs", headers=auth_headers(director), params={"user_id": manager.id}).json()
    assert [log["action"] for log in by_user] == ["login"]
