from datetime import date, timedelta
from hrportal.models.audit_log import AuditLog
from hrportal.models.leave_request import LeaveStatus
from hrportal.models.notification import Notification


def _apply(client, headers, days=3, leave_type="annual", reason="Family trip"):
    start = date.today() + timedelta(days=10)
    end = start + timedelta(days=days - 1)
    return client.post(
        "/api/leave/requests",
        headers=headers,
        json={
            "leave_type": leave_type,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "reason": reason,
        }
    )


def _decide(client, headers, leave_id, stage, approve=True, comment=None):
    return client.post(
        f"/api/leave/requests/{leave_id}/{stage}-decision",
        headers=headers,
        json={"approve": approve, "comment": comment}
    )


def test_create_leave_request(client, employee, manager, auth_headers):
    response = _apply(client, auth_headers(employee))
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == LeaveStatus.PENDING.value
    assert data["required_levels"] == 2
    assert data["days_count"] == 3


def test_end_before_start_rejected(client, employee, auth_headers):
    response = client.post(
        "/api/leave/requests",
        headers=auth_headers(employee),
        json={"leave_type": "sick", "start_date": "2025-03-10", "end_date": "2025-03-09", "reason": "Flu"}
    )
    assert response.status_code == 422


def test_reason_is_sanitized(client, employee, manager, auth_headers):
    response = _apply(client, auth_headers(employee), reason="<script>x()</script><b>Trip</b>")
    assert response.json()["reason"] == "&lt;b&gt;Trip&lt;/b&gt;"


def test_two_stage_approval(client, employee, manager, director, auth_headers, db_session):
    leave_id = _apply(client, auth_headers(employee)).json()["id"]

    # The director is two hops up: refused at the manager stage
    assert _decide(client, auth_headers(director), leave_id, "manager").status_code == 403

    first = _decide(client, auth_headers(manager), leave_id, "manager", comment="Enjoy")
    assert first.status_code == 200
    assert first.json()["manager_approval"] == "approved"
    assert first.json()["status"] == "pending"

    # The manager cannot give the final approval
    assert _decide(client, auth_headers(manager), leave_id, "director").status_code == 403

    final = _decide(client, auth_headers(director), leave_id, "director")
    assert final.status_code == 200
    assert final.json()["status"] == "approved"
    assert final.json()["director_approver_id"] == director.id

    actions = {row.action for row in db_session.query(AuditLog).filter(AuditLog.entity_type == "leave_request")}
    assert {"apply_leave", "manager_approve_leave", "director_approve_leave"} <= actions
    titles = [n.title for n in db_session.query(Notification).filter(Notification.user_id == employee.id)]
    assert "Leave Approved" in titles


def test_rejection_at_any_stage(client, employee, manager, director, auth_headers):
    leave_id = _apply(client, auth_headers(employee)).json()["id"]
    response = _decide(client, auth_headers(manager), leave_id, "manager", approve=False, comment="Crunch week")
    assert response.json()["status"] == "rejected"
    assert response.json()["manager_comment"] == "Crunch week"

    # A later director approval does not override the rejection
    response = _decide(client, auth_headers(director), leave_id, "director")
    assert response.json()["status"] == "rejected"


def test_single_approver_chain(client, manager, director, auth_headers):
    """A manager reports straight to a director: one approval completes the request."""
    created = _apply(client, auth_headers(manager)).json()
    assert created["required_levels"] == 1

    response = _decide(client, auth_headers(director), created["id"], "manager")
    assert response.status_code == 200
    assert response.json()["status"] == "approved"


def test_top_of_hierarchy_is_auto_approved(client, director, auth_headers):
    created = _apply(client, auth_headers(director)).json()
    assert created["required_levels"] == 0
    assert created["status"] == "approved"


def test_team_lead_approval_completes_request(client, team_lead, manager, director, make_user, auth_headers):
    """report -> team lead -> manager: no director in reach, so one stage suffices."""
    report = make_user("employee", manager=team_lead)
    created = _apply(client, auth_headers(report)).json()
    assert created["required_levels"] == 1
    assert created["status"] == "pending"

    assert _decide(client, auth_headers(manager), created["id"], "director").status_code == 403
    assert _decide(client, auth_headers(director), created["id"], "director").status_code == 403

    response = _decide(client, auth_headers(team_lead), created["id"], "manager")
    assert response.status_code == 200
    assert response.json()["status"] == "approved"


def test_team_lead_rejection_rejects(client, team_lead, make_user, auth_headers):
    report = make_user("employee", manager=team_lead)
    leave_id = _apply(client, auth_headers(report)).json()["id"]
    response = _decide(client, auth_headers(team_lead), leave_id, "manager", approve=False)
    assert response.json()["status"] == "rejected"


def test_later_decision_supersedes_earlier(client, employee, manager, director, auth_headers):
    leave_id = _apply(client, auth_headers(employee)).json()["id"]
    _decide(client, auth_headers(manager), leave_id, "manager")

    rejected = _decide(client, auth_headers(director), leave_id, "director", approve=False, comment="Audit week")
    assert rejected.json()["status"] == "rejected"

    revised = _decide(client, auth_headers(director), leave_id, "director", comment="Audit moved")
    assert revised.status_code == 200
    assert revised.json()["director_approval"] == "approved"
    assert revised.json()["director_comment"] == "Audit moved"
    assert revised.json()["status"] == "approved"


def test_manager_reverses_rejection(client, employee, manager, auth_headers):
    leave_id = _apply(client, auth_headers(employee)).json()["id"]
    assert _decide(client, auth_headers(manager), leave_id, "manager", approve=False).json()["status"] == "rejected"

    response = _decide(client, auth_headers(manager), leave_id, "manager")
    assert response.json()["manager_approval"] == "approved"
    # The director stage is still open
    assert response.json()["status"] == "pending"


def test_staff_sees_only_own_requests(client, employee, intern, manager, auth_headers):
    _apply(client, auth_headers(employee))
    _apply(client, auth_headers(intern))

    mine = client.get("/api/leave/requests", headers=auth_headers(employee)).json()
    assert {row["user_id"] for row in mine} == {employee.id}

    team = client.get("/api/leave/requests", headers=auth_headers(manager)).json()
    assert {row["user_id"] for row in team} == {employee.id, intern.id}


def test_list_filters(client, employee, intern, manager, auth_headers):
    leave_id = _apply(client, auth_headers(employee)).json()["id"]
    _apply(client, auth_headers(intern))
    _decide(client, auth_headers(manager), leave_id, "manager", approve=False)

    rejected = client.get("/api/leave/requests", headers=auth_headers(manager), params={"status": "rejected"}).json()
    assert [row["id"] for row in rejected] == [leave_id]

    by_user = client.get("/api/leave/requests", headers=auth_headers(manager), params={"user_id": intern.id}).json()
    assert {row["user_id"] for row in by_user} == {intern.id}

    forbidden = client.get("/api/leave/requests", headers=auth_headers(employee), params={"user_id": intern.id})
    assert forbidden.status_code == 403


def test_my_requests(client, employee, manager, auth_headers):
    _apply(client, auth_headers(employee))
    _apply(client, auth_headers(employee), leave_type="sick", days=1)
    response = client.get("/api/leave/requests/mine", headers=auth_headers(employee))
    assert response.status_code == 200
    assert len(response.json()) == 2


def test_unknown_leave_request(client, manager, auth_headers):
    assert _decide(client, auth_headers(manager), 999999, "manager").status_code == 404


def test_manager_is_notified_of_new_request(client, employee, manager, auth_headers, db_session):
    _apply(client, auth_headers(employee))
    notes = db_session.query(Notification).filter(Notification.user_id == manager.id).all()
    assert [n.title for n in notes] == ["Leave Request"]
