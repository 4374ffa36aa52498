import pytest

SETTINGS_PAYLOAD = {
    "lab_name": "City Diagnostics",
    "lab_address": "4 Hill Road",
    "lab_city": "Pune",
    "lab_state": "Maharashtra",
    "lab_pincode": "411001",
    "lab_phone": "020-2555-0199",
    "lab_email": "care@citydiagnostics.example.com",
    "primary_color": "#059669",
    "about_text": "<p>Trusted since 1998</p><script>alert(1)</script>",
}


@pytest.fixture()
def lab_test(make_lab_test):
    return make_lab_test(name="Thyroid Profile", price="500.00")


@pytest.fixture()
def placed(client, patient_headers, lab_test) -> dict:
    response = client.post(
        "/bookings",
        headers=patient_headers,
        json={
            "booking_type": "home_collection",
            "patient_name": "Asha Rao",
            "patient_age": 34,
            "city": "Pune",
            "phone": "9876543210",
            "address": "12 MG Road",
            "test_ids": [lab_test.id],
        },
    )
    assert response.status_code == 201
    return response.json()


def test_admin_routes_require_admin_role(client, patient_headers):
    assert client.get("/admin/bookings").status_code == 401
    response = client.get("/admin/bookings", headers=patient_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Not enough permissions"


def test_admin_lists_bookings_with_owner(client, placed, patient, admin_headers):
    response = client.get("/admin/bookings", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert [booking["id"] for booking in data] == [placed["id"]]
    assert data[0]["user"]["email"] == patient.email


def test_admin_filters_bookings_by_status_and_type(client, placed, admin_headers):
    pending = client.get("/admin/bookings?status=pending&booking_type=home_collection", headers=admin_headers)
    confirmed = client.get("/admin/bookings?status=confirmed", headers=admin_headers)
    bad = client.get("/admin/bookings?status=shipped", headers=admin_headers)

    assert len(pending.json()) == 1
    assert confirmed.json() == []
    assert bad.status_code == 422


def test_admin_status_change_notifies_owner(client, placed, patient, admin_headers, notifier):
    notifier.sent.clear()

    response = client.patch(
        f"/admin/bookings/{placed['id']}",
        headers=admin_headers,
        json={"status": "Confirmed", "notes": "Technician arrives at 8am"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "confirmed"
    assert data["notes"] == "Technician arrives at 8am"
    assert response.headers["ETag"] == '"2"'
    assert [email.to_email for email in notifier.sent] == [patient.email]
    assert "Confirmed" in notifier.sent[0].body_html


def test_admin_notes_only_update_sends_nothing(client, placed, admin_headers, notifier):
    notifier.sent.clear()

    response = client.patch(f"/admin/bookings/{placed['id']}", headers=admin_headers, json={"notes": "Call first"})

    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert notifier.sent == []


def test_admin_unknown_status_is_ignored(client, placed, admin_headers):
    response = client.patch(f"/admin/bookings/{placed['id']}", headers=admin_headers, json={"status": "shipped"})

    assert response.status_code == 200
    assert response.json()["status"] == "pending"


def test_admin_approves_cancellation_request(client, placed, admin, patient_headers, admin_headers):
    client.patch(f"/admin/bookings/{placed['id']}", headers=admin_headers, json={"status": "confirmed"})
    client.post(f"/bookings/{placed['id']}/cancel", headers=patient_headers, json={"reason": "Unwell"})

    response = client.patch(f"/admin/bookings/{placed['id']}", headers=admin_headers, json={"status": "cancelled"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled"
    assert data["cancel_requested"] is False
    assert data["cancel_reviewed_by"] == admin.id
    assert data["cancel_reviewed_at"] is not None


def test_admin_cannot_reopen_completed_booking(client, placed, admin_headers):
    client.patch(f"/admin/bookings/{placed['id']}", headers=admin_headers, json={"status": "completed"})

    response = client.patch(f"/admin/bookings/{placed['id']}", headers=admin_headers, json={"status": "processing"})

    assert response.status_code == 409


def test_admin_stale_version_is_rejected(client, placed, admin_headers):
    client.patch(f"/admin/bookings/{placed['id']}", headers=admin_headers, json={"notes": "first"})

    response = client.patch(
        f"/admin/bookings/{placed['id']}",
        headers={**admin_headers, "If-Match": '"1"'},
        json={"status": "confirmed"},
    )

    assert response.status_code == 409
    detail = client.get(f"/admin/bookings/{placed['id']}", headers=admin_headers).json()
    assert detail["status"] == "pending"
    assert detail["notes"] == "first"


def test_admin_missing_booking(client, admin_headers):
    response = client.patch("/admin/bookings/missing", headers=admin_headers, json={"status": "confirmed"})

    assert response.status_code == 404


def test_admin_test_crud(client, admin_headers):
    created = client.post(
        "/admin/tests",
        headers=admin_headers,
        json={
            "name": "HbA1c",
            "category": "Diabetes",
            "price": "450.00",
            "test_type": "home_test",
            "preparation": "<p>No fasting needed</p>",
            "faqs": [{"question": "Is it painful?", "answer": "A small prick."}],
        },
    )
    assert created.status_code == 201
    test_id = created.json()["id"]
    assert created.json()["price"] == "450.00"

    updated = client.patch(
        f"/admin/tests/{test_id}",
        headers=admin_headers,
        json={"price": "480.00", "name": None, "is_active": False},
    )
    assert updated.status_code == 200
    assert updated.json()["price"] == "480.00"
    assert updated.json()["name"] == "HbA1c"
    assert updated.json()["is_active"] is False

    assert client.get(f"/admin/tests/{test_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/tests/{test_id}").status_code == 404

    deleted = client.delete(f"/admin/tests/{test_id}", headers=admin_headers)
    assert deleted.json() == {"deleted": True, "deactivated": False, "message": "Test deleted"}
    assert client.get(f"/admin/tests/{test_id}", headers=admin_headers).status_code == 404


def test_admin_test_price_must_be_positive(client, admin_headers):
    response = client.post(
        "/admin/tests",
        headers=admin_headers,
        json={"name": "Free Test", "category": "Misc", "price": "0", "test_type": "clinic_test"},
    )

    assert response.status_code == 422


def test_deleting_booked_test_deactivates_it(client, placed, lab_test, admin_headers, patient_headers):
    response = client.delete(f"/admin/tests/{lab_test.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["deactivated"] is True
    assert response.json()["deleted"] is False
    assert client.get(f"/tests/{lab_test.id}").status_code == 404
    booking = client.get(f"/bookings/{placed['id']}", headers=patient_headers).json()
    assert booking["items"][0]["test_id"] == lab_test.id


def test_price_change_does_not_touch_existing_booking(client, placed, lab_test, admin_headers, patient_headers):
    client.patch(f"/admin/tests/{lab_test.id}", headers=admin_headers, json={"price": "999.00"})

    booking = client.get(f"/bookings/{placed['id']}", headers=patient_headers).json()

    assert booking["total_amount"] == "500.00"
    assert booking["items"][0]["price"] == "500.00"


def test_admin_lists_users_with_booking_counts(client, placed, patient, admin, admin_headers):
    response = client.get("/admin/users", headers=admin_headers)

    assert response.status_code == 200
    counts = {user["email"]: user["booking_count"] for user in response.json()}
    assert counts == {patient.email: 1, admin.email: 0}


def test_admin_lists_bookings_of_user(client, placed, patient, admin_headers):
    response = client.get(f"/admin/users/{patient.id}/bookings", headers=admin_headers)
    missing = client.get("/admin/users/missing/bookings", headers=admin_headers)

    assert [booking["id"] for booking in response.json()] == [placed["id"]]
    assert missing.status_code == 404


def test_site_settings_defaults_and_upsert(client, admin_headers):
    defaults = client.get("/settings")
    assert defaults.status_code == 200
    assert defaults.json()["lab_name"] == "Lab Test Booking"

    first = client.put("/admin/settings", headers=admin_headers, json=SETTINGS_PAYLOAD)
    second = client.put("/admin/settings", headers=admin_headers, json={**SETTINGS_PAYLOAD, "lab_city": "Mumbai"})

    assert first.status_code == 200
    assert second.status_code == 200
    public = client.get("/settings").json()
    assert public["lab_name"] == "City Diagnostics"
    assert public["lab_city"] == "Mumbai"
    assert public["lab_phone"] == "02025550199"
    assert public["about_text"] == "<p>Trusted since 1998</p>"
    assert client.get("/admin/settings", headers=admin_headers).json() == public


def test_site_settings_require_contact_fields(client, admin_headers):
    payload = {**SETTINGS_PAYLOAD}
    payload.pop("lab_email")

    response = client.put("/admin/settings", headers=admin_headers, json=payload)

    assert response.status_code == 422


def test_lab_name_from_settings_is_used_in_emails(client, admin_headers, notifier):
    client.put("/admin/settings", headers=admin_headers, json=SETTINGS_PAYLOAD)

    client.post(
        "/auth/signup",
        json={"name": "Ravi", "email": "ravi@example.com", "phone": "9876501234", "password": "StrongPass123!"},
    )

    assert notifier.sent[-1].subject == "Welcome to City Diagnostics!"
