# stylist/services/user_store.py
# Persistence for user accounts in the ``users`` collection

import logging
from datetime import datetime
from typing import Iterable, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from stylist.exceptions import DuplicateEmailError, ValidationError, UserNotFoundError
from stylist.models.user import User
from stylist.utils.clock import Clock, utcnow
from stylist.utils.validators import (
    FULL_NAME_MAX_LENGTH,
    normalize_email,
    validate_email,
    validate_full_name,
)

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, collection: Collection, clock: Clock = utcnow):
        self.collection = collection
        self.clock = clock

    def find_by_email(self, email: str) -> Optional[User]:
        doc = self.collection.find_one({"email": normalize_email(email)})
        return User.from_document(doc) if doc else None

    def find_by_id(self, user_id: str) -> Optional[User]:
        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        doc = self.collection.find_one({"_id": object_id})
        return User.from_document(doc) if doc else None

    def find_by_verification_token(self, token: str, now: datetime) -> Optional[User]:
        doc = self.collection.find_one(_live_verification(token, now))
        return User.from_document(doc) if doc else None

    def find_by_reset_token(self, token_digest: str, now: datetime) -> Optional[User]:
        doc = self.collection.find_one(_live_reset(token_digest, now))
        return User.from_document(doc) if doc else None

    def consume_verification_token(self, token: str, now: datetime) -> Optional[User]:
        """Mark the holder of a live verification token verified and clear the token."""
        doc = self.collection.find_one_and_update(
            _live_verification(token, now),
            {"$set": {
                "is_email_verified": True,
                "verification_token": None,
                "verification_token_expires": None,
                "updated_at": now,
            }},
            return_document=ReturnDocument.AFTER,
        )
        return User.from_document(doc) if doc else None

    def consume_reset_token(self, token_digest: str, now: datetime) -> Optional[User]:
        doc = self.collection.find_one_and_update(
            _live_reset(token_digest, now),
            {"$set": {
                "password_reset_token": None,
                "password_reset_expires": None,
                "updated_at": now,
            }},
            return_document=ReturnDocument.AFTER,
        )
        return User.from_document(doc) if doc else None

    def create(self, user: User) -> User:
        """Insert a new account. The unique email index decides duplicates."""
        user.email = normalize_email(user.email)
        self._validate(user)

        now = self.clock()
        user.created_at = now
        user.updated_at = now
        try:
            result = self.collection.insert_one(user.to_document())
        except DuplicateKeyError:
            logger.warning(f"Attempted to create duplicate user with email: {user.email}")
            raise DuplicateEmailError()
        user.id = str(result.inserted_id)
        logger.info(f"Created new user with ID: {user.id}")
        return user

    def save(self, user: User, fields: Iterable[str]) -> User:
        """
        Persist the named document fields of an existing account.

        Only ``fields`` (document keys; the credential is stored as ``password``)
        and ``updated_at`` are written.
        """
        self._validate(user)
        user.updated_at = self.clock()
        doc = user.to_document()
        changes = {field: doc[field] for field in fields}
        changes["updated_at"] = user.updated_at
        try:
            doc = self.collection.find_one_and_update(
                {"_id": ObjectId(user.id)},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise DuplicateEmailError()
        if doc is None:
            raise UserNotFoundError()
        return User.from_document(doc)

    @staticmethod
    def _validate(user: User) -> None:
        errors = []
        if not validate_full_name(user.full_name):
            errors.append(f"Name must be between 1 and {FULL_NAME_MAX_LENGTH} characters")
        if not validate_email(user.email):
            errors.append("Please provide a valid email address")
        if errors:
            raise ValidationError(errors)
        user.full_name = user.full_name.strip()


def _live_verification(token: str, now: datetime) -> dict:
    return {"verification_token": token, "verification_token_expires": {"$gt": now}}


def _live_reset(token_digest: str, now: datetime) -> dict:
    return {"password_reset_token": token_digest, "password_reset_expires": {"$gt": now}}
