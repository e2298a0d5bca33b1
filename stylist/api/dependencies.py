# stylist/api/dependencies.py
# Request-scoped wiring and the bearer-token gate for protected routes

import logging
from typing import Iterable, Optional

from fastapi import Depends, Request

from stylist.exceptions import (
    ForbiddenError,
    InvalidTokenError,
    NotAuthenticatedError,
    PasswordChangedError,
)
from stylist.models.user import Role, User
from stylist.services.auth_service import AuthService
from stylist.services.user_store import UserStore
from stylist.utils.auth import SESSION_SCOPE, SET_PASSWORD_SCOPE, TokenService

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "jwt"


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_user_store(request: Request) -> UserStore:
    return UserStore(request.app.state.database.users, clock=request.app.state.clock)


def get_auth_service(
    request: Request,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    settings = request.app.state.settings
    return AuthService(
        store,
        tokens,
        request.app.state.email_service,
        clock=request.app.state.clock,
        verification_ttl=settings.verification_ttl,
        reset_ttl=settings.reset_ttl,
    )


def extract_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, falling back to the ``jwt`` cookie."""
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer"):
        parts = authorization.split(" ")
        if len(parts) == 2 and parts[1]:
            return parts[1]
    return request.cookies.get(TOKEN_COOKIE)


def authenticate_request(
    request: Request,
    store: UserStore,
    tokens: TokenService,
    allowed_scopes: Iterable[str] = (SESSION_SCOPE,),
) -> User:
    token = extract_token(request)
    if not token:
        raise NotAuthenticatedError()

    token_data = tokens.verify_session_token(token)
    if token_data.scope not in allowed_scopes:
        logger.warning(f"Rejected token with scope '{token_data.scope}' for {request.url.path}")
        raise InvalidTokenError()

    user = store.find_by_id(token_data.user_id)
    if user is None:
        raise NotAuthenticatedError("The user belonging to this token no longer exists.")

    if user.changed_password_after(token_data.issued_at):
        raise PasswordChangedError()

    request.state.user = user
    return user


def get_current_user(
    request: Request,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Gate for routes that need a normal session."""
    return authenticate_request(request, store, tokens)


def get_password_setup_user(
    request: Request,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Like ``get_current_user`` but also accepts the set-password handoff token."""
    return authenticate_request(
        request, store, tokens, allowed_scopes=(SESSION_SCOPE, SET_PASSWORD_SCOPE)
    )


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.ADMIN:
        raise ForbiddenError()
    return current_user
