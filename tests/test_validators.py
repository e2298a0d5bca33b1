# tests/test_validators.py
# Unit tests for validator functions

import pytest
from stylist.models.auth import LoginRequest, SignupRequest
from stylist.utils.validators import (
    collect_login_errors,
    collect_new_password_errors,
    collect_signup_errors,
    normalize_email,
    password_strength_errors,
    validate_email,
    validate_full_name,
)


def test_validate_email():
    """Test email validation."""
    assert validate_email(None) == False
    assert validate_email("test@example.com") == True
    assert validate_email("first.last+style@example.co.uk") == True
    assert validate_email("invalid") == False
    assert validate_email("missing@tld") == False


def test_normalize_email_only_lowercases_and_trims():
    """Dots and subaddresses are kept."""
    assert normalize_email("  Amira.Hassan@Example.COM ") == "amira.hassan@example.com"
    assert normalize_email("amira+shop@gmail.com") == "amira+shop@gmail.com"
    assert normalize_email("a.m.i.r.a@gmail.com") != normalize_email("amira@gmail.com")
    assert normalize_email(None) == ""


def test_validate_full_name():
    """Test full name validation."""
    assert validate_full_name(None) == False
    assert validate_full_name("   ") == False
    assert validate_full_name("Amira") == True
    assert validate_full_name("a" * 50) == True
    assert validate_full_name("a" * 51) == False


@pytest.mark.parametrize(
    "password,expected",
    [
        ("Secret123", []),
        ("Sec1", ["Password must be at least 8 characters long"]),
        ("secret123", ["Password must contain an uppercase letter"]),
        ("SecretPass", ["Password must contain a number"]),
    ],
)
def test_password_strength_errors(password, expected):
    assert password_strength_errors(password) == expected


def test_collect_signup_errors_reports_every_problem():
    request = SignupRequest(fullName="", email="nope", password="short", confirmPassword="other")
    errors = collect_signup_errors(request)
    assert "Full name is required" in errors
    assert "Please enter a valid email" in errors
    assert "Password must be at least 8 characters long" in errors
    assert "Passwords do not match" in errors


def test_collect_signup_errors_accepts_valid_request():
    request = SignupRequest(
        fullName="Amira", email="a@x.com", password="Secret123", confirmPassword="Secret123"
    )
    assert collect_signup_errors(request) == []


def test_collect_login_errors_allows_missing_password():
    assert collect_login_errors(LoginRequest(email="b@x.com")) == []
    assert collect_login_errors(LoginRequest()) == ["Please provide an email"]
    assert collect_login_errors(LoginRequest(email="bad")) == ["Please enter a valid email"]


def test_collect_new_password_errors():
    assert collect_new_password_errors("NewPass123") == []
    assert collect_new_password_errors(None) == ["Password must be at least 8 characters long"]
    assert collect_new_password_errors("NewPass123", "Other123") == ["Passwords do not match"]
