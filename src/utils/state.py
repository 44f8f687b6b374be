from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable, List, Optional

import api.endpoints as endpoints
from api.client import HttpClient
from api.errors import DashboardError
from api.models import AdminUser, AuthResult
from db.storage import SessionStorage
from utils.logger import get_logger
from utils.pure import validate_login, validate_registration

_logger = get_logger(__name__)


class SessionStatus(Enum):
    UNRESOLVED = "unresolved"
    VERIFYING = "verifying"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


SessionListener = Callable[[SessionStatus, str], None]


class SessionStore:
    """
    The admin session: who is logged in and with which token.

    One instance per app, handed to whoever needs it. Lifecycle:

      UNRESOLVED -> VERIFYING -> AUTHENTICATED | ANONYMOUS
      AUTHENTICATED -> ANONYMOUS   (logout, or a 401 from any request)

    Listeners get (new status, reason) on every transition; reason is one of
    "bootstrap", "login", "register", "logout", "expired", "refresh".
    """

    def __init__(self, client: HttpClient, storage: SessionStorage) -> None:
        self.client = client
        self.storage = storage
        self.user: Optional[AdminUser] = None
        self.status = SessionStatus.UNRESOLVED
        self.last_error: Optional[str] = None

        self._bootstrap_task: Optional[asyncio.Task] = None
        self._listeners: List[SessionListener] = []
        client.on_auth_expired = self.expire

    @property
    def token(self) -> Optional[str]:
        return self.storage.token

    @property
    def is_loading(self) -> bool:
        return self.status in (SessionStatus.UNRESOLVED, SessionStatus.VERIFYING)

    @property
    def is_authenticated(self) -> bool:
        # a token alone is not enough, it has to resolve to a user
        return bool(self.token) and self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self, reason: str) -> None:
        for listener in list(self._listeners):
            listener(self.status, reason)

    def _set_status(self, status: SessionStatus, reason: str) -> None:
        if status is self.status:
            return
        _logger.debug(f"Session {self.status.value} -> {status.value} ({reason})")
        self.status = status
        self._notify(reason)

    async def bootstrap(self) -> None:
        """
        Resolve the persisted session once per process. Later and concurrent
        calls wait for that same run.
        """
        if self._bootstrap_task is None:
            self._bootstrap_task = asyncio.ensure_future(self._bootstrap())
        await asyncio.shield(self._bootstrap_task)

    async def _bootstrap(self) -> None:
        token = await self.storage.load()
        if not token:
            self._set_status(SessionStatus.ANONYMOUS, "bootstrap")
            return

        self._set_status(SessionStatus.VERIFYING, "bootstrap")
        try:
            user = await endpoints.get_current_admin(self.client)
        except DashboardError as e:
            _logger.info(f"Stored session could not be verified: {e.message}")
            self.user = None
            await self.storage.clear_session()
            self._set_status(SessionStatus.ANONYMOUS, "bootstrap")
            return

        self.user = user
        self._set_status(SessionStatus.AUTHENTICATED, "bootstrap")
        _logger.info(f"Resumed session for {user.email} ({user.role}).")

    async def _start(self, result: AuthResult, reason: str) -> None:
        await self.storage.persist_session(result.token, secure=self.client.secure)
        self.user = result.user
        if self.status is SessionStatus.AUTHENTICATED:
            self._notify(reason)
        else:
            self._set_status(SessionStatus.AUTHENTICATED, reason)

    async def login(self, email: str, password: str) -> bool:
        """True on success; otherwise `last_error` says why."""
        self.last_error = None
        try:
            validate_login(email, password)
            result = await endpoints.login_admin(self.client, email.strip(), password)
        except DashboardError as e:
            _logger.info(f"Login failed for {email!r}: {e.message}")
            self.last_error = e.message
            return False

        await self._start(result, "login")
        _logger.info(f"Logged in as {result.user.email}.")
        return True

    async def register(
        self, name: str, email: str, password: str, confirm: str
    ) -> bool:
        """Create an admin account and log straight into it."""
        self.last_error = None
        try:
            validate_registration(name, email, password, confirm)
            result = await endpoints.register_admin(
                self.client, name.strip(), email.strip(), password
            )
        except DashboardError as e:
            _logger.info(f"Registration failed for {email!r}: {e.message}")
            self.last_error = e.message
            return False

        await self._start(result, "register")
        return True

    async def logout(self) -> None:
        self.user = None
        await self.storage.clear_session()
        self._set_status(SessionStatus.ANONYMOUS, "logout")

    async def refresh_user(self) -> None:
        """Re-fetch the current admin; any failure ends the session."""
        if not self.token:
            return
        try:
            self.user = await endpoints.get_current_admin(self.client)
        except DashboardError as e:
            _logger.warning(f"Could not refresh the current admin: {e.message}")
            await self.logout()
            return
        self._notify("refresh")

    async def expire(self) -> None:
        """Called by the http client on a 401."""
        # bootstrap reports its own failure; nothing had been shown yet
        if self.status in (SessionStatus.ANONYMOUS, SessionStatus.VERIFYING):
            return
        self.user = None
        self._set_status(SessionStatus.ANONYMOUS, "expired")
