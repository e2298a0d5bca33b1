# tests/test_auth_service.py
# Account lifecycle operations exercised directly against the service

import logging
import pytest
from bson import ObjectId
from datetime import timedelta

from stylist.exceptions import (
    AlreadyVerifiedError,
    DuplicateEmailError,
    IncorrectCurrentPasswordError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    UserNotFoundError,
    ValidationError,
)
from stylist.models.auth import LoginRequest, ResetPasswordRequest, SignupRequest
from stylist.models.user import NoPassword, User
from stylist.utils.auth import SET_PASSWORD_SCOPE, verify_password

from conftest import signup_payload


def register(auth_service, **kwargs):
    return auth_service.register(SignupRequest(**signup_payload(**kwargs)))


def test_register_creates_one_unverified_user(auth_service, store, clock, email_service):
    result = register(auth_service)

    assert result["success"] is True
    assert result["token"]
    assert result["user"]["isVerified"] is False
    assert result["user"]["hijabStyle"] == "turban"
    assert "password" not in result["user"]

    assert store.collection.count_documents({}) == 1
    user = store.find_by_email("a@x.com")
    assert user.is_email_verified is False
    assert user.verification_token == email_service.last_verification_token("a@x.com")
    assert user.verification_token_expires == clock() + timedelta(hours=24)
    assert verify_password("Secret123", user.credential.password_hash)


@pytest.mark.parametrize("variant", ["A@X.com", "  a@x.com  ", "a@X.COM"])
def test_register_twice_with_normalized_match_fails(auth_service, variant):
    register(auth_service, email="a@x.com")
    with pytest.raises(DuplicateEmailError):
        register(auth_service, email=variant)


def test_register_rejects_invalid_input_before_writing(auth_service, store):
    with pytest.raises(ValidationError) as exc_info:
        register(auth_service, password="weak")
    assert "Password must contain an uppercase letter" in exc_info.value.errors
    assert store.collection.count_documents({}) == 0


def test_register_survives_email_failure(auth_service, store, email_service, caplog):
    email_service.fail = True
    with caplog.at_level(logging.ERROR):
        result = register(auth_service)
    assert result["success"] is True
    assert store.find_by_email("a@x.com") is not None
    assert "Failed to send verification email to a@x.com" in caplog.text


def test_verification_token_works_exactly_once(auth_service, store, email_service):
    register(auth_service)
    token = email_service.last_verification_token("a@x.com")

    assert auth_service.verify_email(token)["success"] is True
    user = store.find_by_email("a@x.com")
    assert user.is_email_verified is True
    assert user.verification_token is None
    assert user.verification_token_expires is None

    with pytest.raises(InvalidOrExpiredTokenError):
        auth_service.verify_email(token)


def test_verification_token_expires_after_24_hours(auth_service, email_service, clock):
    register(auth_service)
    token = email_service.last_verification_token("a@x.com")
    clock.advance(hours=24, seconds=1)
    with pytest.raises(InvalidOrExpiredTokenError):
        auth_service.verify_email(token)


def test_verify_email_requires_token(auth_service):
    with pytest.raises(ValidationError):
        auth_service.verify_email(None)


def test_login_with_correct_password(auth_service, token_service):
    registered = register(auth_service)
    result = auth_service.login(LoginRequest(email="A@x.com", password="Secret123"))
    assert result["success"] is True
    assert result["user"]["id"] == registered["user"]["id"]
    data = token_service.verify_session_token(result["token"])
    assert auth_service.get_current_user(data.user_id)["user"]["email"] == "a@x.com"


def test_wrong_password_and_unknown_email_look_the_same(auth_service):
    register(auth_service)
    with pytest.raises(InvalidCredentialsError) as wrong_password:
        auth_service.login(LoginRequest(email="a@x.com", password="Wrong1234"))
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        auth_service.login(LoginRequest(email="nobody@x.com", password="Secret123"))
    assert wrong_password.value.detail == unknown_email.value.detail
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


def test_login_without_password_for_password_user_fails(auth_service):
    register(auth_service)
    with pytest.raises(InvalidCredentialsError):
        auth_service.login(LoginRequest(email="a@x.com"))


def test_login_for_account_without_password(auth_service, store, token_service):
    store.create(User(full_name="Basma", email="b@x.com"))

    result = auth_service.login(LoginRequest(email="b@x.com"))
    assert result["setPasswordRequired"] is True
    assert result["email"] == "b@x.com"
    assert token_service.verify_session_token(result["token"]).scope == SET_PASSWORD_SCOPE
    assert "user" not in result
    assert isinstance(store.find_by_email("b@x.com").credential, NoPassword)

    result = auth_service.login(LoginRequest(email="b@x.com", password="NewPass123"))
    assert result["success"] is True
    assert token_service.verify_session_token(result["token"]).scope == "session"
    user = store.find_by_email("b@x.com")
    assert user.has_password
    assert verify_password("NewPass123", user.credential.password_hash)


def test_resend_verification_regenerates_token(auth_service, store, email_service, clock):
    register(auth_service)
    first = email_service.last_verification_token("a@x.com")
    clock.advance(hours=1)

    assert auth_service.resend_verification("a@x.com")["success"] is True
    second = email_service.last_verification_token("a@x.com")
    assert second != first
    user = store.find_by_email("a@x.com")
    assert user.verification_token == second
    assert user.verification_token_expires == clock() + timedelta(hours=24)


def test_resend_verification_failures(auth_service, email_service):
    with pytest.raises(UserNotFoundError):
        auth_service.resend_verification("nobody@x.com")

    register(auth_service)
    auth_service.verify_email(email_service.last_verification_token("a@x.com"))
    with pytest.raises(AlreadyVerifiedError):
        auth_service.resend_verification("a@x.com")


def test_resend_verification_survives_email_failure(auth_service, email_service):
    register(auth_service)
    email_service.fail = True
    assert auth_service.resend_verification("a@x.com")["success"] is True


def test_set_password_checks_current_password(auth_service, store, clock):
    register(auth_service)
    user = store.find_by_email("a@x.com")

    with pytest.raises(IncorrectCurrentPasswordError):
        auth_service.set_password(user, "Another123", current_password="Wrong1234")

    clock.advance(seconds=1)
    result = auth_service.set_password(user, "Another123", current_password="Secret123")
    assert result["token"]
    updated = store.find_by_email("a@x.com")
    assert verify_password("Another123", updated.credential.password_hash)
    assert updated.password_changed_at == clock()


def test_set_password_without_existing_password(auth_service, store):
    user = store.create(User(full_name="Basma", email="b@x.com"))
    auth_service.set_password(user, "NewPass123")
    assert store.find_by_email("b@x.com").has_password


def test_set_password_enforces_minimum_length(auth_service, store):
    user = store.create(User(full_name="Basma", email="b@x.com"))
    with pytest.raises(ValidationError):
        auth_service.set_password(user, "short")


def test_get_current_user_for_vanished_account(auth_service):
    with pytest.raises(UserNotFoundError):
        auth_service.get_current_user(str(ObjectId()))


def test_forgot_and_reset_password(auth_service, store, email_service, clock):
    register(auth_service)

    unknown = auth_service.forgot_password("nobody@x.com")
    known = auth_service.forgot_password("a@x.com")
    assert unknown == known
    assert len(email_service.reset_emails) == 1
    _, reset_token = email_service.reset_emails[0]
    assert store.find_by_email("a@x.com").password_reset_token != reset_token

    clock.advance(seconds=1)
    result = auth_service.reset_password(ResetPasswordRequest(
        token=reset_token, newPassword="Reset1234", confirmPassword="Reset1234"
    ))
    assert result["success"] is True
    user = store.find_by_email("a@x.com")
    assert verify_password("Reset1234", user.credential.password_hash)
    assert user.password_reset_token is None

    with pytest.raises(InvalidOrExpiredTokenError):
        auth_service.reset_password(ResetPasswordRequest(
            token=reset_token, newPassword="Reset1234", confirmPassword="Reset1234"
        ))


def test_reset_token_expires_after_ten_minutes(auth_service, email_service, clock):
    register(auth_service)
    auth_service.forgot_password("a@x.com")
    _, reset_token = email_service.reset_emails[0]
    clock.advance(minutes=11)
    with pytest.raises(InvalidOrExpiredTokenError):
        auth_service.reset_password(ResetPasswordRequest(
            token=reset_token, newPassword="Reset1234", confirmPassword="Reset1234"
        ))


def test_password_change_keeps_concurrent_verification(auth_service, store, email_service, clock):
    register(auth_service)
    loaded_before_verify = store.find_by_email("a@x.com")

    auth_service.verify_email(email_service.last_verification_token("a@x.com"))
    clock.advance(seconds=1)
    auth_service.set_password(loaded_before_verify, "Another123", current_password="Secret123")

    user = store.find_by_email("a@x.com")
    assert user.is_email_verified is True
    assert user.verification_token is None
    assert verify_password("Another123", user.credential.password_hash)
