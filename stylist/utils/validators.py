# stylist/utils/validators.py
# Validation functions for account input data

import re
from typing import List, Optional

from stylist.models.auth import SignupRequest, LoginRequest

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
FULL_NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8


def normalize_email(email: Optional[str]) -> str:
    """Lowercase and trim. Dots and +tags are kept so distinct inboxes stay distinct."""
    if not email:
        return ""
    return email.strip().lower()


def validate_email(email: Optional[str]) -> bool:
    """Validate email format."""
    if not email:
        return False
    return bool(re.match(EMAIL_PATTERN, email.strip()))


def validate_full_name(full_name: Optional[str]) -> bool:
    """Full name must be present and at most 50 characters once trimmed."""
    if not full_name or not full_name.strip():
        return False
    return len(full_name.strip()) <= FULL_NAME_MAX_LENGTH


def validate_password_length(password: Optional[str]) -> bool:
    if not password:
        return False
    return len(password) >= PASSWORD_MIN_LENGTH


def password_strength_errors(password: Optional[str]) -> List[str]:
    """Signup password rules: length, a digit and an uppercase letter."""
    errors = []
    if not validate_password_length(password):
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not password or not re.search(r"\d", password):
        errors.append("Password must contain a number")
    if not password or not re.search(r"[A-Z]", password):
        errors.append("Password must contain an uppercase letter")
    return errors


def collect_signup_errors(request: SignupRequest) -> List[str]:
    errors = []
    if not request.full_name or not request.full_name.strip():
        errors.append("Full name is required")
    elif not validate_full_name(request.full_name):
        errors.append(f"Name must be less than {FULL_NAME_MAX_LENGTH} characters")
    if not validate_email(request.email):
        errors.append("Please enter a valid email")
    errors.extend(password_strength_errors(request.password))
    if request.confirm_password != request.password:
        errors.append("Passwords do not match")
    return errors


def collect_login_errors(request: LoginRequest) -> List[str]:
    # password is optional: accounts without one take the set-password branch
    if not request.email:
        return ["Please provide an email"]
    if not validate_email(request.email):
        return ["Please enter a valid email"]
    return []


def collect_new_password_errors(
    new_password: Optional[str], confirm_password: Optional[str] = None
) -> List[str]:
    errors = []
    if not validate_password_length(new_password):
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if confirm_password is not None and confirm_password != new_password:
        errors.append("Passwords do not match")
    return errors
