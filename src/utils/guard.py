# who may see which view
from enum import Enum
from typing import Optional

from utils.logger import get_logger
from utils.state import SessionStatus, SessionStore

_logger = get_logger(__name__)

LOGIN_PATH = "/login"
ADMIN_ROOT = "/admin"
REGISTER_PATH = "/admin/register"


class Access(Enum):
    LOADING = "loading"
    ALLOWED = "allowed"
    DENIED = "denied"  # logged in, but not an admin
    LOGIN = "login"  # nobody logged in


def is_admin_path(path: str) -> bool:
    return path == ADMIN_ROOT or path.startswith(ADMIN_ROOT + "/")


def gate_path(path: str, token: Optional[str]) -> Optional[str]:
    """
    First, token-only check before any view is built. Returns the path to
    redirect to, or None to let the request through.

    - admin paths without a token go to the login view
    - the login view with a token goes to the admin root
    - registration is open without a token, but a token sends you home
    """
    if path == REGISTER_PATH:
        return ADMIN_ROOT if token else None
    if is_admin_path(path) and not token:
        return LOGIN_PATH
    if path == LOGIN_PATH and token:
        return ADMIN_ROOT
    return None


class RouteGuard:
    """
    Second check, once the session is known: a token that resolved to an
    admin user gets in, a non-admin user is told so (no redirect), and an
    anonymous visitor is sent to log in.
    """

    def __init__(self, session: SessionStore) -> None:
        self.session = session

    def decide(self) -> Access:
        session = self.session
        if session.is_loading:
            return Access.LOADING
        if session.is_authenticated and session.is_admin:
            return Access.ALLOWED
        if session.status is SessionStatus.ANONYMOUS or not session.is_authenticated:
            return Access.LOGIN
        return Access.DENIED

    async def resolve(self) -> Access:
        """Like decide(), but waits out the session check first."""
        if self.session.is_loading:
            await self.session.bootstrap()
        access = self.decide()
        _logger.debug(f"Route guard: {access.value}")
        return access
