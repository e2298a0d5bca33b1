# stylist/client/routing.py
# Route guarding for views that need a signed-in user

from typing import NamedTuple, Optional

from stylist.client.session import LOGIN_PATH, AuthSession, SessionState


class RouteDecision(NamedTuple):
    action: str  # "loading", "redirect" or "render"
    target: Optional[str] = None
    from_path: Optional[str] = None


def guard_route(session: AuthSession, path: str) -> RouteDecision:
    """Decide what a protected view at ``path`` should show for the current state."""
    if session.state == SessionState.UNKNOWN:
        return RouteDecision("loading")

    if session.state == SessionState.UNAUTHENTICATED:
        # remembered so login can send the user back here
        session.redirect_after_login = path
        return RouteDecision("redirect", target=LOGIN_PATH, from_path=path)

    return RouteDecision("render")
