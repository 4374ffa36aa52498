from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "path"],
)

BOOKING_TRANSITIONS = Counter(
    "booking_status_transitions_total",
    "Booking status transitions applied",
    ["from_status", "to_status"],
)

BOOKING_CANCEL_REQUESTS = Counter(
    "booking_cancel_requests_total",
    "Cancellation requests recorded for confirmed bookings",
)

NOTIFICATION_FAILURES = Counter(
    "notification_failures_total",
    "Notifications that could not be delivered",
    ["kind"],
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
