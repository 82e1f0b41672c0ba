"""User Field Validation — checks a user's fields before insert or update.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return error dict on violation, None on success
    - validate_user_fields chains all checks: first error wins, in field order:
      first name, last name, email, phone, dob
    - dob is optional: only validated when non-blank

Design Decisions:
    - Return dicts (not exceptions): routes turn the first error into
      UserValidationError, keeping this module free of HTTP concerns
    - Phone follows E.164 shape: optional '+', no leading zero, 2-15 digits
"""

import re
from datetime import date

from usermanagement.core.domain_types import UserField

_EMAIL_RE = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)
_PHONE_RE = re.compile(r"\+?[1-9]\d{1,14}")
_DATE_RE = re.compile(r"\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])")


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def is_valid_email(email: str) -> bool:
    return _EMAIL_RE.fullmatch(email) is not None


def is_valid_phone(phone: str) -> bool:
    return _PHONE_RE.fullmatch(phone) is not None


def is_valid_date(value: str) -> bool:
    """YYYY-MM-DD naming a real calendar day (leap years honoured)."""
    value = value.strip()
    if not _DATE_RE.fullmatch(value):
        return False
    year, month, day = (int(part) for part in value.split("-"))
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def _error(field: UserField, code: str, message: str) -> dict:
    return {
        "status": "error",
        "error_code": code,
        "field": field.value,
        "message": message,
    }


def check_required(field: UserField, value: str | None) -> dict | None:
    """Rule 1: first name, last name, email and phone may not be blank."""
    if is_blank(value):
        label = field.value.replace("_", " ").capitalize()
        return _error(field, "FIELD_REQUIRED", f"{label} cannot be empty.")
    return None


def check_email_format(email: str) -> dict | None:
    """Rule 2: email must look like local@domain.tld."""
    if not is_valid_email(email):
        return _error(UserField.EMAIL, "EMAIL_INVALID", "Email address is invalid.")
    return None


def check_phone_format(phone: str) -> dict | None:
    """Rule 3: phone must be an optional '+' followed by 2-15 digits."""
    if not is_valid_phone(phone):
        return _error(UserField.PHONE, "PHONE_INVALID", "Phone number is invalid.")
    return None


def check_dob_format(dob: str | None) -> dict | None:
    """Rule 4: a supplied date of birth must be a real YYYY-MM-DD date."""
    if is_blank(dob):
        return None
    if not is_valid_date(dob):
        return _error(
            UserField.DOB, "DOB_INVALID", "Date of birth must be YYYY-MM-DD.",
        )
    return None


def validate_user_fields(
    first_name: str | None,
    last_name: str | None,
    email: str | None,
    phone: str | None,
    dob: str | None = "",
) -> dict | None:
    """Chain all user field checks. Returns first error or None."""
    return (
        check_required(UserField.FIRST_NAME, first_name)
        or check_required(UserField.LAST_NAME, last_name)
        or check_required(UserField.EMAIL, email)
        or check_email_format(email)
        or check_required(UserField.PHONE, phone)
        or check_phone_format(phone)
        or check_dob_format(dob)
    )
