def test_request_id_header_is_present(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.headers.get("X-Request-ID")


def test_metrics_endpoint_returns_prometheus_text(client):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "text/plain" in response.headers.get("content-type", "")
    body = response.text
    assert "http_requests_total" in body
    assert "http_request_duration_seconds" in body


def test_metrics_use_route_template_and_count_transitions(client, patient_headers, make_lab_test):
    test = make_lab_test()
    client.get(f"/tests/{test.id}")
    client.post(
        "/bookings",
        headers=patient_headers,
        json={
            "booking_type": "clinic_visit",
            "patient_name": "Asha Rao",
            "patient_age": 34,
            "city": "Pune",
            "phone": "9876543210",
            "test_ids": [test.id],
        },
    )

    body = client.get("/metrics").text

    assert 'path="/tests/{test_id}"' in body
    assert f'path="/tests/{test.id}"' not in body
    assert 'booking_status_transitions_total{from_status="new",to_status="pending"}' in body
