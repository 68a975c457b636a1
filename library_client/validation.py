"""Form validation helpers."""
import re
from typing import Dict, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PASSWORD_RULES = "Password must be at least 8 characters with uppercase, lowercase, and number"


def validate_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def validate_password(password: Optional[str]) -> bool:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit."""
    if not password or len(password) < 8:
        return False
    return (
        any(c.isupper() for c in password)
        and any(c.islower() for c in password)
        and any(c.isdigit() for c in password)
    )


def validate_required(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def validate_rating(rating) -> bool:
    """Review ratings are whole stars from 1 to 5."""
    return isinstance(rating, int) and not isinstance(rating, bool) and 1 <= rating <= 5


def validate_signup(
    name: str,
    email: str,
    password: str,
    confirm_password: str
) -> Dict[str, str]:
    """
    Check the signup form.

    Args:
        name: Display name
        email: Email address (also the username)
        password: Chosen password
        confirm_password: Password typed a second time

    Returns:
        Mapping of field name to error message; empty when the form is valid
    """
    errors = {}

    if not validate_required(name):
        errors["name"] = "Name is required"

    if not validate_required(email):
        errors["email"] = "Email is required"
    elif not validate_email(email):
        errors["email"] = "Invalid email format"

    if not validate_required(password):
        errors["password"] = "Password is required"
    elif not validate_password(password):
        errors["password"] = PASSWORD_RULES

    if password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    return errors
