from typing import List, Optional

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="; ".join(errors)
        )


class DuplicateEmailError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email"
        )


class InvalidCredentialsError(HTTPException):
    # same wording for unknown email and wrong password
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidOrExpiredTokenError(HTTPException):
    def __init__(self, kind: str = "verification"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid or expired {kind} token"
        )


class AlreadyVerifiedError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is already verified"
        )


class UserNotFoundError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )


class IncorrectCurrentPasswordError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )


class NotAuthenticatedError(HTTPException):
    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail or "You are not logged in! Please log in to get access.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class TokenExpiredError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Your token has expired! Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidTokenError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token! Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class PasswordChangedError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User recently changed password! Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized as admin"
        )


class ServerError(HTTPException):
    def __init__(self, detail: str = "Server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail
        )


class EmailDeliveryError(Exception):
    """Raised by the email service; callers log it and carry on."""
