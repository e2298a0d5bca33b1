# stylist/services/auth_service.py
# Account lifecycle operations: signup, login, email verification and passwords

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from stylist.exceptions import (
    AlreadyVerifiedError,
    DuplicateEmailError,
    EmailDeliveryError,
    IncorrectCurrentPasswordError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    UserNotFoundError,
    ValidationError,
)
from stylist.models.auth import LoginRequest, ResetPasswordRequest, SignupRequest
from stylist.models.user import HashedPassword, NoPassword, User
from stylist.services.email_service import EmailService
from stylist.services.user_store import UserStore
from stylist.utils.auth import (
    SET_PASSWORD_SCOPE,
    TokenService,
    dummy_verify,
    generate_opaque_token,
    get_password_hash,
    hash_opaque_token,
    verify_password,
)
from stylist.utils.clock import Clock, utcnow
from stylist.utils.validators import (
    collect_login_errors,
    collect_new_password_errors,
    collect_signup_errors,
    normalize_email,
    validate_email,
)

logger = logging.getLogger(__name__)


class AuthService:
    """
    Request-level account operations.

    Each method reads and writes a single user document. Emails are sent
    after the write and a delivery failure never undoes it.
    """

    def __init__(
        self,
        store: UserStore,
        tokens: TokenService,
        email_service: EmailService,
        clock: Clock = utcnow,
        verification_ttl: timedelta = timedelta(hours=24),
        reset_ttl: timedelta = timedelta(minutes=10),
    ):
        self.store = store
        self.tokens = tokens
        self.email_service = email_service
        self.clock = clock
        self.verification_ttl = verification_ttl
        self.reset_ttl = reset_ttl

    def register(self, request: SignupRequest) -> Dict[str, Any]:
        errors = collect_signup_errors(request)
        if errors:
            raise ValidationError(errors)

        email = normalize_email(request.email)
        logger.info(f"Signup attempt for email: {email}")

        # The unique index is authoritative; this lookup only avoids hashing for known emails
        if self.store.find_by_email(email):
            raise DuplicateEmailError()

        verification_token = generate_opaque_token()
        user = User(
            full_name=request.full_name,
            email=email,
            credential=HashedPassword(password_hash=get_password_hash(request.password)),
            is_email_verified=False,
            verification_token=verification_token,
            verification_token_expires=self.clock() + self.verification_ttl,
            country=request.country,
            city=request.city,
            brands=request.brands or [],
            hijab_style=request.hijab_style,
            favorite_colors=request.favorite_colors or [],
            style_personality=request.style_personality or [],
        )
        user = self.store.create(user)

        self._send_verification(user.email, verification_token)

        token = self.tokens.issue_session_token(user.id)
        logger.info(f"User created successfully: {user.email}")
        return {
            "success": True,
            "token": token,
            "user": user.summary(),
            "message": "Registration successful! Please check your email to verify your account.",
        }

    def login(self, request: LoginRequest) -> Dict[str, Any]:
        errors = collect_login_errors(request)
        if errors:
            raise ValidationError(errors)

        email = normalize_email(request.email)
        logger.info(f"Login attempt for email: {email}")

        user = self.store.find_by_email(email)
        if user is None:
            dummy_verify()
            raise InvalidCredentialsError()

        if isinstance(user.credential, NoPassword):
            if not request.password:
                logger.info(f"Password setup required for: {email}")
                return {
                    "success": False,
                    "setPasswordRequired": True,
                    "email": user.email,
                    "token": self.tokens.issue_session_token(user.id, scope=SET_PASSWORD_SCOPE),
                    "message": "Please set a password for your account",
                }
            user = self._change_password(user, request.password)
            logger.info(f"First password set during login for: {email}")
        elif not request.password or not verify_password(
            request.password, user.credential.password_hash
        ):
            raise InvalidCredentialsError()

        logger.info(f"User logged in successfully: {email}")
        return {
            "success": True,
            "token": self.tokens.issue_session_token(user.id),
            "user": user.summary(),
        }

    def verify_email(self, token: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise ValidationError(["Token is required"])

        user = self.store.consume_verification_token(token, self.clock())
        if user is None:
            raise InvalidOrExpiredTokenError("verification")

        logger.info(f"Email verified for user: {user.email}")
        return {"success": True, "message": "Email verified successfully"}

    def resend_verification(self, email: Optional[str]) -> Dict[str, Any]:
        if not validate_email(email):
            raise ValidationError(["Please enter a valid email"])

        user = self.store.find_by_email(email)
        if user is None:
            raise UserNotFoundError()
        if user.is_email_verified:
            raise AlreadyVerifiedError()

        verification_token = generate_opaque_token()
        user.verification_token = verification_token
        user.verification_token_expires = self.clock() + self.verification_ttl
        self.store.save(user, ["verification_token", "verification_token_expires"])

        self._send_verification(user.email, verification_token)
        return {"success": True, "message": "Verification email resent successfully"}

    def set_password(
        self, user: User, new_password: Optional[str], current_password: Optional[str] = None
    ) -> Dict[str, Any]:
        """Change the password of an authenticated user and return a fresh session token."""
        if isinstance(user.credential, HashedPassword):
            if not current_password or not verify_password(
                current_password, user.credential.password_hash
            ):
                raise IncorrectCurrentPasswordError()

        user = self._change_password(user, new_password)
        logger.info(f"Password updated for user: {user.email}")
        return {
            "success": True,
            "message": "Password updated successfully",
            "token": self.tokens.issue_session_token(user.id),
        }

    def get_current_user(self, user_id: str) -> Dict[str, Any]:
        user = self.store.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return {"success": True, "user": user.public()}

    def forgot_password(self, email: Optional[str]) -> Dict[str, Any]:
        if not validate_email(email):
            raise ValidationError(["Please enter a valid email"])

        response = {
            "success": True,
            "message": "If an account exists for this email, a password reset link has been sent.",
        }
        user = self.store.find_by_email(email)
        if user is None:
            logger.info(f"Password reset requested for unknown email: {normalize_email(email)}")
            return response

        reset_token = generate_opaque_token()
        user.password_reset_token = hash_opaque_token(reset_token)
        user.password_reset_expires = self.clock() + self.reset_ttl
        self.store.save(user, ["password_reset_token", "password_reset_expires"])

        try:
            self.email_service.send_password_reset_email(user.email, reset_token)
        except EmailDeliveryError as e:
            logger.error(f"Failed to send password reset email to {user.email}: {e}")
        return response

    def reset_password(self, request: ResetPasswordRequest) -> Dict[str, Any]:
        if not request.token:
            raise ValidationError(["Token is required"])
        errors = collect_new_password_errors(request.new_password, request.confirm_password)
        if errors:
            raise ValidationError(errors)

        user = self.store.consume_reset_token(hash_opaque_token(request.token), self.clock())
        if user is None:
            raise InvalidOrExpiredTokenError("reset")

        user = self._change_password(user, request.new_password)
        logger.info(f"Password reset for user: {user.email}")
        return {
            "success": True,
            "message": "Password has been reset successfully",
            "token": self.tokens.issue_session_token(user.id),
        }

    def _change_password(self, user: User, new_password: Optional[str]) -> User:
        errors = collect_new_password_errors(new_password)
        if errors:
            raise ValidationError(errors)
        user.credential = HashedPassword(password_hash=get_password_hash(new_password))
        user.password_changed_at = self.clock()
        return self.store.save(user, ["password", "password_changed_at"])

    def _send_verification(self, email: str, verification_token: str) -> None:
        try:
            self.email_service.send_verification_email(email, verification_token)
        except EmailDeliveryError as e:
            # the account stays usable; resend-verification recovers
            logger.error(f"Failed to send verification email to {email}: {e}")
