import re

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile(r"[^A-Za-z0-9]")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def validate_password(password: str) -> tuple[bool, list[str]]:
    if not isinstance(password, str) or not password:
        return False, ["Password is required"]

    errors: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if len(password) > PASSWORD_MAX_LENGTH:
        errors.append(f"Password must be at most {PASSWORD_MAX_LENGTH} characters long")
    if not _LOWER.search(password):
        errors.append("Password must contain at least one lowercase letter")
    if not _UPPER.search(password):
        errors.append("Password must contain at least one uppercase letter")
    if not _DIGIT.search(password):
        errors.append("Password must contain at least one number")
    if not _SYMBOL.search(password):
        errors.append("Password must contain at least one special character")

    return not errors, errors
