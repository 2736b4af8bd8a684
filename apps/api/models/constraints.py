"""Column-level validation shared by the models.

Portable CHECK constraints live on the tables; rules that need a regular
expression (email, URL) are enforced here because SQLite has no regex
operator.
"""

import re
from typing import Optional

from services.errors import ConstraintViolation


EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def require_text(field: str, value: Optional[str], max_length: Optional[int] = None) -> str:
    if value is None or not str(value).strip():
        raise ConstraintViolation(f"{field} must not be empty")
    return optional_text(field, value, max_length)


def optional_text(field: str, value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    if value is None:
        return None
    if max_length is not None and len(value) > max_length:
        raise ConstraintViolation(f"{field} must not exceed {max_length} characters")
    return value


def require_email(value: Optional[str]) -> str:
    email = require_text("email", value, 255).strip()
    if not EMAIL_PATTERN.match(email):
        raise ConstraintViolation("email is not a valid address")
    return email


def require_url(value: Optional[str]) -> str:
    url = require_text("url", value, 500).strip()
    if not URL_PATTERN.match(url):
        raise ConstraintViolation("url must start with http:// or https://")
    return url


def require_non_negative(field: str, value: Optional[int]) -> int:
    number = int(value or 0)
    if number < 0:
        raise ConstraintViolation(f"{field} must not be negative")
    return number


def string_list(field: str, value) -> list:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ConstraintViolation(f"{field} must be a list of strings")
    return list(value)
