from typing import Annotated

from pydantic import AfterValidator, StringConstraints

from lab_booking.core.sanitize import sanitize_html, sanitize_phone, sanitize_string, sanitize_url


def _required_text(value: str) -> str:
    cleaned = sanitize_string(value)
    if not cleaned:
        raise ValueError("must not be empty")
    return cleaned


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    return sanitize_string(value) or None


def _rich_text(value: str | None) -> str | None:
    if value is None:
        return None
    return sanitize_html(value) or None


def _phone(value: str) -> str:
    digits = sanitize_phone(value)
    if not digits:
        raise ValueError("phone must contain 10 to 15 digits")
    return digits


def _lenient_url(value: str | None) -> str | None:
    if value is None:
        return None
    return sanitize_url(value) or None


def _bounded(max_length: int):
    return Annotated[str, StringConstraints(max_length=max_length)]


ShortText = Annotated[_bounded(120), AfterValidator(_required_text)]
LongText = Annotated[_bounded(500), AfterValidator(_required_text)]
OptionalCode = Annotated[_bounded(20) | None, AfterValidator(_optional_text)]
OptionalShortText = Annotated[_bounded(120) | None, AfterValidator(_optional_text)]
OptionalLongText = Annotated[_bounded(500) | None, AfterValidator(_optional_text)]
OptionalNote = Annotated[_bounded(2000) | None, AfterValidator(_optional_text)]
RichText = Annotated[_bounded(20000) | None, AfterValidator(_rich_text)]
Phone = Annotated[_bounded(32), AfterValidator(_phone)]
OptionalUrl = Annotated[_bounded(500) | None, AfterValidator(_lenient_url)]
