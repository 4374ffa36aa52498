from datetime import UTC, datetime, timedelta

from lab_booking.core.config import settings
from lab_booking.db.models import PasswordResetToken
from lab_booking.services.auth_service import create_password_reset

SIGNUP_PAYLOAD = {
    "name": "Asha Rao",
    "email": "Asha@Example.com",
    "phone": "+91 98765 43210",
    "password": "StrongPass123!",
}


def test_signup_creates_user_and_sends_welcome_email(client, notifier):
    response = client.post("/auth/signup", json=SIGNUP_PAYLOAD)

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "asha@example.com"
    assert data["role"] == "user"
    assert data["phone"] == "919876543210"
    assert data["is_active"] is True
    assert "hashed_password" not in data
    assert [email.to_email for email in notifier.sent] == ["asha@example.com"]
    assert notifier.sent[0].subject == "Welcome to Lab Test Booking!"


def test_signup_ignores_requested_role(client):
    response = client.post("/auth/signup", json={**SIGNUP_PAYLOAD, "role": "admin"})

    assert response.status_code == 201
    assert response.json()["role"] == "user"


def test_signup_duplicate_email(client):
    first = client.post("/auth/signup", json=SIGNUP_PAYLOAD)
    second = client.post("/auth/signup", json={**SIGNUP_PAYLOAD, "email": "asha@example.com"})

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"] == "User with this email already exists"


def test_signup_enforces_password_policy(client, notifier):
    response = client.post("/auth/signup", json={**SIGNUP_PAYLOAD, "password": "password"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "bad_request"
    assert "uppercase" in body["detail"]
    assert notifier.sent == []


def test_signup_rejects_invalid_phone(client):
    response = client.post("/auth/signup", json={**SIGNUP_PAYLOAD, "phone": "12345"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_login_returns_token_and_sets_session_cookie(client, patient):
    response = client.post("/auth/login", json={"email": patient.email, "password": "StrongPass123!"})

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert len(data["access_token"]) > 20
    assert response.cookies.get(settings.session_cookie_name) == data["access_token"]


def test_cookie_and_bearer_resolve_to_same_actor(client, patient):
    token = client.post("/auth/login", json={"email": patient.email, "password": "StrongPass123!"}).json()[
        "access_token"
    ]

    via_cookie = client.get("/auth/session")
    client.cookies.clear()
    via_bearer = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})

    assert via_cookie.status_code == 200
    assert via_cookie.json() == via_bearer.json()
    assert via_cookie.json()["user"] == {"id": patient.id, "email": patient.email, "role": "user"}


def test_session_without_credentials_is_empty(client):
    response = client.get("/auth/session", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 200
    assert response.json() == {"user": None}


def test_logout_clears_cookie(client, patient):
    client.post("/auth/login", json={"email": patient.email, "password": "StrongPass123!"})

    client.post("/auth/logout")

    assert client.get("/auth/session").json() == {"user": None}


def test_login_wrong_password(client, patient):
    response = client.post("/auth/login", json={"email": patient.email, "password": "WrongPass123!"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthorized"


def test_inactive_user_cannot_log_in(client, make_user):
    user = make_user(email="inactive@example.com", is_active=False)

    response = client.post("/auth/login", json={"email": user.email, "password": "StrongPass123!"})

    assert response.status_code == 401


def test_users_me_with_token(client, patient, patient_headers):
    response = client.get("/users/me", headers=patient_headers)

    assert response.status_code == 200
    assert response.json()["email"] == patient.email


def test_users_me_without_token(client):
    response = client.get("/users/me")

    assert response.status_code == 401
    assert response.headers.get("WWW-Authenticate") == "Bearer"


def test_forgot_password_is_silent_for_unknown_email(client, notifier):
    response = client.post("/auth/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert notifier.sent == []


def test_password_reset_flow_is_single_use(client, notifier, patient, db_session):
    forgot = client.post("/auth/forgot-password", json={"email": patient.email})
    assert forgot.status_code == 200
    assert len(notifier.sent) == 1

    token = db_session.query(PasswordResetToken).one().token
    assert f"reset-password?token={token}" in notifier.sent[0].body_html

    reset = client.post("/auth/reset-password", json={"token": token, "password": "N3w-Password!"})
    reused = client.post("/auth/reset-password", json={"token": token, "password": "An0ther-Pass!"})
    login = client.post("/auth/login", json={"email": patient.email, "password": "N3w-Password!"})

    assert reset.status_code == 200
    assert reused.status_code == 400
    assert login.status_code == 200


def test_expired_reset_token_is_rejected(client, patient, db_session):
    issued = create_password_reset(patient.email, db_session, now=datetime.now(UTC) - timedelta(hours=1))
    assert issued is not None
    _, token = issued

    response = client.post("/auth/reset-password", json={"token": token, "password": "N3w-Password!"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired reset token"


def test_new_reset_request_invalidates_previous_token(client, patient, db_session):
    _, first = create_password_reset(patient.email, db_session)
    _, second = create_password_reset(patient.email, db_session)

    stale = client.post("/auth/reset-password", json={"token": first, "password": "N3w-Password!"})
    fresh = client.post("/auth/reset-password", json={"token": second, "password": "N3w-Password!"})

    assert stale.status_code == 400
    assert fresh.status_code == 200
