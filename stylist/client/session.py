# stylist/client/session.py
# Client-side session state: login, signup, logout and email verification calls

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

import requests

from stylist.client.storage import TEMP_EMAIL_KEY, TEMP_TOKEN_KEY, TOKEN_KEY

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please check your connection and try again."

HOME_PATH = "/home"
LOGIN_PATH = "/login"
CHECK_EMAIL_PATH = "/check-email"
SET_PASSWORD_PATH = "/set-password"


class SessionState(str, Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class AuthClientError(Exception):
    """Message meant to be shown next to the form that triggered the call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthSession:
    """
    Holds who is signed in and talks to the auth API.

    Views receive the session object explicitly. ``storage`` persists the
    session token and the set-password handoff pair; ``navigate`` is called
    with a path whenever the flow moves the user to another view.
    """

    def __init__(
        self,
        api_url: str,
        storage,
        navigate: Optional[Callable[[str], None]] = None,
        http=None,
    ):
        self.api_url = api_url.rstrip("/")
        self.storage = storage
        self.navigate = navigate or (lambda path: None)
        self.http = http or requests.Session()
        self.state = SessionState.UNKNOWN
        self.user: Optional[Dict[str, Any]] = None
        self.redirect_after_login: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.state == SessionState.UNKNOWN

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    def load(self) -> SessionState:
        """Resolve the initial state from the stored token."""
        token = self.storage.get(TOKEN_KEY)
        if not token:
            self._set_unauthenticated()
            return self.state

        try:
            data = self._request("GET", "/auth/me", token=token)
        except AuthClientError as e:
            logger.info(f"Stored token rejected, clearing it: {e.message}")
            self.storage.remove(TOKEN_KEY)
            self._set_unauthenticated()
            return self.state

        self.user = data.get("user")
        self.state = SessionState.AUTHENTICATED
        return self.state

    def login(self, email: str, password: Optional[str] = None) -> Dict[str, Any]:
        body = {"email": email}
        if password:
            body["password"] = password
        data = self._request("POST", "/auth/login", json=body)

        if data.get("setPasswordRequired"):
            self.storage.set(TEMP_TOKEN_KEY, data["token"])
            self.storage.set(TEMP_EMAIL_KEY, data.get("email") or email)
            self.navigate(SET_PASSWORD_PATH)
            return data

        self.storage.set(TOKEN_KEY, data["token"])
        self.user = data.get("user")
        self.state = SessionState.AUTHENTICATED
        destination = self.redirect_after_login or HOME_PATH
        self.redirect_after_login = None
        self.navigate(destination)
        return data

    def signup(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self._request("POST", "/auth/signup", json=payload)
        if data.get("token"):
            self.storage.set(TOKEN_KEY, data["token"])
        # stays unauthenticated until the email is verified
        self.user = data.get("user")
        self.state = SessionState.UNAUTHENTICATED
        self.navigate(CHECK_EMAIL_PATH)
        return data

    def verify_email(self, token: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/verify-email", json={"token": token})
        if self.storage.get(TOKEN_KEY) and self.load() == SessionState.AUTHENTICATED:
            self.navigate(HOME_PATH)
        else:
            self.navigate(LOGIN_PATH)
        return data

    def resend_verification(self, email: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/resend-verification", json={"email": email})

    def set_password(
        self, new_password: str, current_password: Optional[str] = None
    ) -> Dict[str, Any]:
        token = self.storage.get(TEMP_TOKEN_KEY) or self.storage.get(TOKEN_KEY)
        if not token:
            raise AuthClientError("Session expired. Please try logging in again.")

        body = {"newPassword": new_password}
        if current_password:
            body["currentPassword"] = current_password
        data = self._request("POST", "/auth/set-password", json=body, token=token)

        self.storage.remove(TEMP_TOKEN_KEY)
        self.storage.remove(TEMP_EMAIL_KEY)
        if data.get("token"):
            self.storage.set(TOKEN_KEY, data["token"])
        if self.load() == SessionState.AUTHENTICATED:
            self.navigate(HOME_PATH)
        return data

    def logout(self) -> None:
        for key in (TOKEN_KEY, TEMP_TOKEN_KEY, TEMP_EMAIL_KEY):
            self.storage.remove(key)
        self._set_unauthenticated()
        self.navigate(LOGIN_PATH)

    def _set_unauthenticated(self) -> None:
        self.user = None
        self.state = SessionState.UNAUTHENTICATED

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.http.request(
                method, f"{self.api_url}{path}", json=json, headers=headers
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise AuthClientError(GENERIC_ERROR)

        try:
            data = response.json()
        except ValueError:
            logger.error(f"{method} {path} returned a non-JSON body ({response.status_code})")
            raise AuthClientError(GENERIC_ERROR, response.status_code)

        if response.status_code >= 400:
            raise AuthClientError(_error_message(data), response.status_code)
        return data


def _error_message(data: Any) -> str:
    if not isinstance(data, dict):
        return GENERIC_ERROR
    if isinstance(data.get("errors"), list) and data["errors"]:
        return ". ".join(str(error) for error in data["errors"])
    return data.get("message") or GENERIC_ERROR
