"""Helpers that normalize free-text input before it reaches the database."""

import html
import re
from urllib.parse import urlparse

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_ANY_TAG_RE = re.compile(r"<(/?)([a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")
_NON_DIGIT_RE = re.compile(r"\D")

ALLOWED_HTML_TAGS = frozenset(
    {"p", "br", "strong", "em", "u", "ul", "ol", "li", "h1", "h2", "h3", "h4", "h5", "h6"}
)

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15


def strip_html(value: str) -> str:
    value = _SCRIPT_RE.sub("", value)
    value = _STYLE_RE.sub("", value)
    value = _TAG_RE.sub("", value)
    return html.unescape(value).replace("\xa0", " ").strip()


def sanitize_string(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return strip_html(value)


def sanitize_html(value: object) -> str:
    """Keep only allow-listed tags, with every attribute dropped."""
    if not isinstance(value, str):
        return ""
    value = _SCRIPT_RE.sub("", value)
    value = _STYLE_RE.sub("", value)

    def _keep_allowed(match: re.Match) -> str:
        closing, tag = match.group(1), match.group(2).lower()
        if tag not in ALLOWED_HTML_TAGS:
            return ""
        return f"<{closing}{tag}>"

    return _ANY_TAG_RE.sub(_keep_allowed, value).strip()


def sanitize_phone(value: object) -> str:
    if not isinstance(value, str):
        return ""
    digits = _NON_DIGIT_RE.sub("", value)
    if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        return ""
    return digits


def sanitize_url(value: object) -> str:
    if not isinstance(value, str):
        return ""
    candidate = value.strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc or " " in candidate:
        return ""
    return candidate
