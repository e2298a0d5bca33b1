# stylist/routes/auth.py
# Authentication routes: signup, login, email verification and password management

import logging
from fastapi import APIRouter, Depends, Response, status
from stylist.api.dependencies import (
    TOKEN_COOKIE,
    get_auth_service,
    get_current_user,
    get_password_setup_user,
)
from stylist.models.auth import (
    EmailRequest,
    LoginRequest,
    ResetPasswordRequest,
    SetPasswordRequest,
    SignupRequest,
    VerifyEmailRequest,
)
from stylist.models.user import User
from stylist.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(request: SignupRequest, auth: AuthService = Depends(get_auth_service)):
    """Register a new user and send the verification email."""
    return auth.register(request)


@router.post("/login")
def login(request: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Authenticate with email and password, or start the set-password handoff."""
    return auth.login(request)


@router.post("/verify-email")
def verify_email(request: VerifyEmailRequest, auth: AuthService = Depends(get_auth_service)):
    """Consume an email verification token."""
    return auth.verify_email(request.token)


@router.post("/resend-verification")
def resend_verification(request: EmailRequest, auth: AuthService = Depends(get_auth_service)):
    """Issue a new verification token and email it."""
    return auth.resend_verification(request.email)


@router.post("/set-password")
def set_password(
    request: SetPasswordRequest,
    current_user: User = Depends(get_password_setup_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Set or change the password of the authenticated user."""
    return auth.set_password(current_user, request.new_password, request.current_password)


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user), auth: AuthService = Depends(get_auth_service)):
    """Get current user information."""
    logger.info(f"User profile requested: {current_user.email}")
    return auth.get_current_user(current_user.id)


@router.post("/forgot-password")
def forgot_password(request: EmailRequest, auth: AuthService = Depends(get_auth_service)):
    """Email a password reset link if the account exists."""
    return auth.forgot_password(request.email)


@router.post("/reset-password")
def reset_password(request: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)):
    """Set a new password using a reset token."""
    return auth.reset_password(request)


@router.post("/logout")
def logout(response: Response, current_user: User = Depends(get_current_user)):
    """Logout user (client-side token removal; clears the cookie fallback)."""
    response.delete_cookie(TOKEN_COOKIE)
    logger.info(f"User logged out: {current_user.email}")
    return {"success": True, "message": "Successfully logged out"}
