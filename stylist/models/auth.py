# stylist/models/auth.py
# Request bodies for the auth endpoints (camelCase on the wire)

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class AuthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SignupRequest(AuthRequest):
    full_name: Optional[str] = Field(None, alias="fullName")
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(None, alias="confirmPassword")
    country: Optional[str] = None
    city: Optional[str] = None
    brands: Optional[List[str]] = None
    hijab_style: Optional[str] = Field(None, alias="hijabStyle")
    favorite_colors: Optional[List[str]] = Field(None, alias="favoriteColors")
    style_personality: Optional[List[str]] = Field(None, alias="stylePersonality")


class LoginRequest(AuthRequest):
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyEmailRequest(AuthRequest):
    token: Optional[str] = None


class EmailRequest(AuthRequest):
    email: Optional[str] = None


class SetPasswordRequest(AuthRequest):
    current_password: Optional[str] = Field(None, alias="currentPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")


class ResetPasswordRequest(AuthRequest):
    token: Optional[str] = None
    new_password: Optional[str] = Field(None, alias="newPassword")
    confirm_password: Optional[str] = Field(None, alias="confirmPassword")
