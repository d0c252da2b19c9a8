# server/core/validation.py

import re
from server.core.exceptions import ValidationError


USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6
# passlib refuses anything longer
PASSWORD_MAX_LENGTH = 4096

EMAIL_PATTERN = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$", re.ASCII)


# -------------------------------
# Normalization
# -------------------------------

def normalize_username(username: str) -> str:
    return username.strip()


def normalize_email(email: str) -> str:
    return email.strip().lower()


# -------------------------------
# Field rules
# -------------------------------

def check_username(username: str) -> str | None:
    if not username:
        return "is required"
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        return f"must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
    return None


def check_email(email: str) -> str | None:
    if not email:
        return "is required"
    if not EMAIL_PATTERN.match(email):
        return "please enter a valid email"
    return None


def check_password(password: str) -> str | None:
    if not password:
        return "is required"
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"must be at least {PASSWORD_MIN_LENGTH} characters"
    if len(password) > PASSWORD_MAX_LENGTH:
        return f"must be at most {PASSWORD_MAX_LENGTH} characters"
    return None


_CHECKS = {
    "username": check_username,
    "email": check_email,
    "password": check_password,
}


def validate_fields(fields: dict) -> None:
    """
    Runs the rule for every field present in `fields` (already normalized)
    and raises one ValidationError naming all the fields that failed.
    """
    errors = {}
    for name, value in fields.items():
        reason = _CHECKS[name](value)
        if reason:
            errors[name] = reason
    if errors:
        raise ValidationError(errors)
