# stylist/models/user.py
# User account record and its password credential

from enum import Enum
from pydantic import BaseModel, Field
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import datetime

from stylist.utils.clock import to_timestamp


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class NoPassword(BaseModel):
    """Account created without a password; login asks the user to set one."""

    kind: Literal["none"] = "none"


class HashedPassword(BaseModel):
    kind: Literal["hashed"] = "hashed"
    password_hash: str


Credential = Annotated[Union[NoPassword, HashedPassword], Field(discriminator="kind")]


class User(BaseModel):
    """One account as stored in the ``users`` collection."""

    id: Optional[str] = None
    full_name: str
    email: str
    credential: Credential = Field(default_factory=NoPassword)
    role: Role = Role.USER

    is_email_verified: bool = False
    verification_token: Optional[str] = None
    verification_token_expires: Optional[datetime] = None

    password_changed_at: Optional[datetime] = None
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime] = None

    country: Optional[str] = None
    city: Optional[str] = None
    brands: List[str] = Field(default_factory=list)
    hijab_style: Optional[str] = None
    favorite_colors: List[str] = Field(default_factory=list)
    style_personality: List[str] = Field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_password(self) -> bool:
        return isinstance(self.credential, HashedPassword)

    def changed_password_after(self, issued_at: float) -> bool:
        """True when a token issued at ``issued_at`` predates the last password change."""
        if self.password_changed_at is None:
            return False
        return issued_at < to_timestamp(self.password_changed_at)

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(exclude={"id", "credential"})
        doc["role"] = self.role.value
        if isinstance(self.credential, HashedPassword):
            doc["password"] = self.credential.password_hash
        else:
            doc["password"] = None
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "User":
        fields = {key: value for key, value in doc.items() if key not in ("_id", "password")}
        password_hash = doc.get("password")
        if password_hash:
            fields["credential"] = HashedPassword(password_hash=password_hash)
        else:
            fields["credential"] = NoPassword()
        return cls(id=str(doc["_id"]), **fields)

    def _profile(self) -> Dict[str, Any]:
        return {
            "country": self.country,
            "city": self.city,
            "brands": self.brands,
            "hijabStyle": self.hijab_style,
            "favoriteColors": self.favorite_colors,
            "stylePersonality": self.style_personality,
        }

    def summary(self) -> Dict[str, Any]:
        """Payload returned by signup and login."""
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "isVerified": self.is_email_verified,
            **self._profile(),
        }

    def public(self) -> Dict[str, Any]:
        """Full account view for ``/me``; never includes the credential."""
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "isEmailVerified": self.is_email_verified,
            "role": self.role.value,
            **self._profile(),
            "passwordChangedAt": self.password_changed_at,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
