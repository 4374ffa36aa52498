from decimal import Decimal

import pytest

from lab_booking.core.sanitize import sanitize_html, sanitize_phone, sanitize_string, sanitize_url
from lab_booking.db.models import BookingStatus, BookingType
from lab_booking.domain.policy import (
    admin_transition_blocked_reason,
    cancellation_needs_review,
    edit_blocked_reason,
    parse_status,
)
from lab_booking.schemas.lab_test import LabTestCreateRequest


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("confirmed", BookingStatus.CONFIRMED),
        (" SAMPLE_COLLECTED ", BookingStatus.SAMPLE_COLLECTED),
        ("Cancelled", BookingStatus.CANCELLED),
        ("shipped", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_status(raw, expected):
    assert parse_status(raw) is expected


def test_cancellation_needs_review_only_after_confirmation():
    assert cancellation_needs_review("pending") is False
    for status in ("confirmed", "sample_collected", "processing", "completed"):
        assert cancellation_needs_review(status) is True


def test_edit_blocked_reason():
    home = BookingType.HOME_COLLECTION.value
    clinic = BookingType.CLINIC_VISIT.value

    assert edit_blocked_reason(home, "pending") is None
    assert edit_blocked_reason(home, "processing") is None
    assert edit_blocked_reason(home, "confirmed") == "Booking cannot be edited at this stage"
    assert edit_blocked_reason(clinic, "pending") == "Only home collection bookings can be edited"


def test_admin_transition_blocked_only_out_of_terminal_statuses():
    assert admin_transition_blocked_reason("processing", "pending") is None
    assert admin_transition_blocked_reason("completed", "completed") is None
    assert admin_transition_blocked_reason("completed", "cancelled") is not None
    assert admin_transition_blocked_reason("cancelled", "pending") is not None


def test_sanitize_string_strips_markup_and_scripts():
    assert sanitize_string("  <script>alert(1)</script><b>Asha</b> &amp; co ") == "Asha & co"
    assert sanitize_string(42) == ""


def test_sanitize_html_keeps_allow_listed_tags_without_attributes():
    dirty = '<p onclick="x()">Fast <strong>8h</strong></p><img src=x onerror=y><a href="j">link</a>'

    assert sanitize_html(dirty) == "<p>Fast <strong>8h</strong></p>link"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("+91 98765 43210", "919876543210"),
        ("(987) 654-3210", "9876543210"),
        ("12345", ""),
        ("1" * 16, ""),
    ],
)
def test_sanitize_phone(raw, expected):
    assert sanitize_phone(raw) == expected


def test_sanitize_url_accepts_only_http_urls():
    assert sanitize_url(" https://files.example.com/rx.pdf ") == "https://files.example.com/rx.pdf"
    assert sanitize_url("javascript:alert(1)") == ""
    assert sanitize_url("ftp://files.example.com/rx.pdf") == ""


def test_lab_test_payload_drops_empty_faqs_and_cleans_rich_text():
    payload = LabTestCreateRequest(
        name="HbA1c",
        category="Diabetes",
        price=Decimal("450.00"),
        test_type="clinic_test",
        about='<p style="color:red">Average sugar</p><script>x</script>',
        faqs=[
            {"question": "Fasting?", "answer": "<i>No</i>"},
            {"question": "  ", "answer": "ignored"},
        ],
    )

    assert payload.about == "<p>Average sugar</p>"
    assert [faq.model_dump() for faq in payload.faqs] == [{"question": "Fasting?", "answer": "No"}]
