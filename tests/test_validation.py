"""Tests for validation and formatting helpers."""
import pytest

from library_client.formatters import format_book_count, format_date, format_rating
from library_client.validation import (
    PASSWORD_RULES,
    validate_email,
    validate_password,
    validate_rating,
    validate_required,
    validate_signup,
)


@pytest.mark.parametrize("email,expected", [
    ("reader@library.test", True),
    ("first.last+tag@example.co.uk", True),
    ("no-at-sign.example.com", False),
    ("missing@tld", False),
    ("spaces in@example.com", False),
    ("", False),
    (None, False),
])
def test_validate_email(email, expected):
    assert validate_email(email) is expected


@pytest.mark.parametrize("password,expected", [
    ("Secret123", True),
    ("secret123", False),
    ("SECRET123", False),
    ("SecretOnly", False),
    ("Sh0rt", False),
    (None, False),
])
def test_validate_password(password, expected):
    assert validate_password(password) is expected


def test_validate_required():
    assert validate_required("x")
    assert not validate_required("   ")
    assert not validate_required(None)


def test_validate_rating():
    assert validate_rating(1)
    assert validate_rating(5)
    assert not validate_rating(0)
    assert not validate_rating(6)
    assert not validate_rating(4.5)
    assert not validate_rating(True)


def test_validate_signup_valid():
    assert validate_signup("Ada", "ada@library.test", "Secret123", "Secret123") == {}


def test_validate_signup_messages():
    errors = validate_signup("", "ada@", "weakpass", "different")

    assert errors == {
        "name": "Name is required",
        "email": "Invalid email format",
        "password": PASSWORD_RULES,
        "confirm_password": "Passwords do not match",
    }


def test_validate_signup_missing_fields():
    errors = validate_signup("Ada", "", "", "")

    assert errors == {
        "email": "Email is required",
        "password": "Password is required",
    }


def test_format_rating():
    assert format_rating(4.5) == "4.5"
    assert format_rating(4) == "4.0"
    assert format_rating(None) == "0.0"


def test_format_date():
    assert format_date("2024-01-05T10:30:00Z") == "Jan 5, 2024"
    assert format_date("2023-12-25") == "Dec 25, 2023"
    assert format_date("someday") == "someday"
    assert format_date("") == ""


def test_format_book_count():
    assert format_book_count(1) == "1 book"
    assert format_book_count(0) == "0 books"
    assert format_book_count(3) == "3 books"
