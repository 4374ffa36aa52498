from datetime import date
from decimal import Decimal
from html import escape

from lab_booking.db.models.booking import BookingType
from lab_booking.domain.events import BookingPlaced, BookingStatusChanged
from lab_booking.domain.policy import STATUS_LABELS

STATUS_COLORS = {
    "pending": "#f59e0b",
    "confirmed": "#3b82f6",
    "sample_collected": "#8b5cf6",
    "processing": "#6366f1",
    "completed": "#10b981",
    "cancelled": "#ef4444",
}


def format_amount(amount: Decimal) -> str:
    return f"₹{amount:,.2f}"


def _format_schedule(booking_date: date | None, booking_time: str | None) -> str:
    if booking_date is None:
        return "To be scheduled"
    day = booking_date.strftime("%A, %d %B %Y")
    return f"{day} at {booking_time}" if booking_time else day


def _layout(title: str, heading: str, subheading: str | None, body: str, lab_name: str) -> str:
    sub = f'<p style="margin: 10px 0 0; color: #d1fae5;">{escape(subheading)}</p>' if subheading else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>{escape(title)} - {escape(lab_name)}</title></head>
<body style="margin: 0; padding: 20px; font-family: Arial, sans-serif; background-color: #f5f5f5;">
  <table role="presentation" style="max-width: 600px; width: 100%; margin: 0 auto; background-color: #ffffff;">
    <tr><td style="padding: 30px; text-align: center; background-color: #059669;">
      <h1 style="margin: 0; color: #ffffff;">{escape(heading)}</h1>{sub}
    </td></tr>
    <tr><td style="padding: 30px; color: #374151;">{body}</td></tr>
    <tr><td style="padding: 20px 30px; color: #6b7280; font-size: 12px; text-align: center;">
      This is an automated email from {escape(lab_name)}. Please do not reply to this email.
    </td></tr>
  </table>
</body>
</html>"""


def _button(url: str, label: str) -> str:
    return (
        f'<p style="text-align: center;"><a href="{escape(url, quote=True)}" '
        f'style="padding: 14px 28px; background-color: #059669; color: #ffffff; '
        f'text-decoration: none;">{escape(label)}</a></p>'
    )


def booking_placed_email(event: BookingPlaced, lab_name: str, base_url: str) -> tuple[str, str]:
    booking_type = "Home Collection" if event.booking_type == BookingType.HOME_COLLECTION.value else "Clinic Visit"
    rows = "".join(
        f"<tr><td>{escape(test.name)}</td><td style=\"text-align: right;\">{format_amount(test.price)}</td></tr>"
        for test in event.tests
    )
    body = (
        f"<p>Hello <strong>{escape(event.recipient_name or 'User')}</strong>,</p>"
        "<p>Your booking has been received. We'll be in touch soon with further details.</p>"
        f"<p>Booking Type: <strong>{booking_type}</strong><br>"
        f"Date &amp; Time: <strong>{escape(_format_schedule(event.booking_date, event.booking_time))}</strong><br>"
        f"Total Amount: <strong>{format_amount(event.total_amount)}</strong></p>"
        f'<table role="presentation" style="width: 100%;">{rows}'
        f"<tr><td><strong>Total</strong></td>"
        f'<td style="text-align: right;"><strong>{format_amount(event.total_amount)}</strong></td></tr></table>'
        + _button(f"{base_url}/bookings/{event.booking_id}", "View Booking Details")
    )
    subject = f"Booking Confirmed - {event.booking_id}"
    return subject, _layout("Booking Confirmation", "Booking Confirmed!", f"Booking ID: {event.booking_id}", body, lab_name)


def booking_status_email(event: BookingStatusChanged, lab_name: str, base_url: str) -> tuple[str, str]:
    new_label = STATUS_LABELS.get(event.new_status, event.new_status)
    old_label = STATUS_LABELS.get(event.old_status, event.old_status)
    color = STATUS_COLORS.get(event.new_status, "#6b7280")
    notes = ""
    if event.notes:
        notes = f"<p><strong>Additional Notes:</strong><br>{escape(event.notes)}</p>"
    body = (
        f"<p>Hello <strong>{escape(event.recipient_name or 'User')}</strong>,</p>"
        "<p>Your booking status has been updated.</p>"
        f'<p style="border-left: 4px solid {color}; padding-left: 12px;">'
        f"Status: <strong>{escape(new_label)}</strong><br>"
        f"Previous status: {escape(old_label)} &rarr; New status: {escape(new_label)}</p>"
        f"{notes}"
        + _button(f"{base_url}/bookings/{event.booking_id}", "View Booking Details")
    )
    subject = f"Booking Status Updated - {event.booking_id}"
    return subject, _layout("Booking Status Update", "Booking Status Updated", f"Booking ID: {event.booking_id}", body, lab_name)


def welcome_email(name: str, lab_name: str, base_url: str) -> tuple[str, str]:
    body = (
        f"<p>Hello <strong>{escape(name)}</strong>,</p>"
        f"<p>Thank you for creating an account with {escape(lab_name)}. "
        "You can now browse our tests and book a home collection or a clinic visit.</p>"
        + _button(f"{base_url}/tests", "Browse Tests")
    )
    return f"Welcome to {lab_name}!", _layout("Welcome", f"Welcome to {lab_name}!", None, body, lab_name)


def password_reset_email(name: str, reset_url: str, lab_name: str, expires_in: str) -> tuple[str, str]:
    body = (
        f"<p>Hello <strong>{escape(name)}</strong>,</p>"
        "<p>We received a request to reset your password. Use the link below to choose a new one.</p>"
        + _button(reset_url, "Reset Password")
        + f"<p>This link expires in {escape(expires_in)}. If you did not request a reset, ignore this email.</p>"
    )
    return f"Reset Your Password - {lab_name}", _layout("Password Reset", "Reset Your Password", None, body, lab_name)
