from fastapi import status
from hrportal.models.audit_log import AuditLog

PASSWORD = "Password123!"


def _signup_payload(**overrides):
    payload = {
        "email": "new.director@nts-tech.com",
        "password": "Director123!",
        "name": "Nova Director",
        "join_date": "2024-02-01",
        "designation": "Director of Engineering",
        "department": "engineering",
        "director_title": "Engineering Director",
        "emergency_contact_name": "Kin",
        "emergency_contact_phone": "555-0100",
    }
    payload.update(overrides)
    return payload


def test_login_success(client, employee):
    response = client.post("/api/auth/login", json={"email": employee.email, "password": PASSWORD})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == employee.id
    assert data["user"]["designation"] == "Employee"


def test_login_invalid_credentials(client, employee, db_session):
    response = client.post("/api/auth/login", json={"email": employee.email, "password": "wrong-password"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert db_session.query(AuditLog).filter(AuditLog.action == "failed_login").count() == 1


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"email": "nobody@nts-tech.com", "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_inactive_user(client, make_user):
    user = make_user("employee", is_active=False)
    response = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_director_signup(client):
    response = client.post("/api/auth/signup/director", json=_signup_payload())
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["user"]["role"] == "engineering_director"
    assert data["user"]["access_level"] == "director"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["manager_id"] is None
    assert me.json()["tier"] == "director"


def test_director_signup_rejects_non_director_title(client):
    response = client.post("/api/auth/signup/director", json=_signup_payload(director_title="team_lead"))
    assert response.status_code == 422
    assert response.json()["success"] is False
    assert response.json()["errors"][0]["field"] == "director_title"


def test_duplicate_signup(client, director):
    response = client.post("/api/auth/signup/director", json=_signup_payload(email=director.email))
    assert response.status_code == 400


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_bad_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


def test_refresh_token_rotation(client, employee):
    login = client.post("/api/auth/login", json={"email": employee.email, "password": PASSWORD}).json()

    refreshed = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["refresh_token"] != login["refresh_token"]

    # The old refresh token was revoked by rotation
    again = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert again.status_code == 401


def test_refresh_rejects_access_token(client, employee, get_token):
    response = client.post("/api/auth/refresh", json={"refresh_token": get_token(employee)})
    assert response.status_code == 401


def test_logout_revokes_refresh_token(client, employee):
    login = client.post("/api/auth/login", json={"email": employee.email, "password": PASSWORD}).json()
    assert client.post("/api/auth/logout", json={"refresh_token": login["refresh_token"]}).status_code == 200
    response = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert response.status_code == 401


def test_change_password(client, employee, auth_headers):
    response = client.post(
        "/api/auth/change-password",
        headers=auth_headers(employee),
        json={"current_password": PASSWORD, "new_password": "BrandNew123!"}
    )
    assert response.status_code == 200

    login = client.post("/api/auth/login", json={"email": employee.email, "password": "BrandNew123!"})
    assert login.status_code == 200


def test_change_password_wrong_current(client, employee, auth_headers):
    response = client.post(
        "/api/auth/change-password",
        headers=auth_headers(employee),
        json={"current_password": "nope-nope", "new_password": "BrandNew123!"}
    )
    assert response.status_code == 400
