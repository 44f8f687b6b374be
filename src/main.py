from typing import Optional

import httpx
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from api.client import HttpClient
from api.errors import AuthExpired
from db.storage import SessionStorage
from utils.config import Settings
from utils.guard import (
    ADMIN_ROOT,
    LOGIN_PATH,
    REGISTER_PATH,
    Access,
    RouteGuard,
    gate_path,
    is_admin_path,
)
from utils.logger import get_logger
from utils.messages import (
    NavigateMessage,
    QuitRequestedMessage,
    SessionChangedMessage,
    UserLogoutMessage,
)
from utils.state import SessionStatus, SessionStore
from views.scr_dashboard import DashboardScreen
from views.scr_denied import AccessDeniedScreen
from views.scr_login import LoginScreen
from views.scr_orders import OrdersScreen
from views.scr_products import ProductsScreen
from views.scr_register import RegisterScreen
from views.scr_settings import SettingsScreen
from views.scr_users import UsersScreen

_logger = get_logger(__name__)


class AdminApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "login": LoginScreen,
        "register": RegisterScreen,
        "denied": AccessDeniedScreen,
        "dashboard": DashboardScreen,
        "orders": OrdersScreen,
        "products": ProductsScreen,
        "users": UsersScreen,
        "settings": SettingsScreen,
    }

    # modes listed in the sidebar menu
    ADMIN_MODES = {
        "dashboard": "Dashboard",
        "orders": "Orders",
        "products": "Products",
        "users": "Users",
        "settings": "Settings",
    }

    MODE_PATHS = {
        "login": LOGIN_PATH,
        "register": REGISTER_PATH,
        "dashboard": ADMIN_ROOT,
        "orders": ADMIN_ROOT + "/orders",
        "products": ADMIN_ROOT + "/products",
        "users": ADMIN_ROOT + "/users",
        "settings": ADMIN_ROOT + "/settings",
    }
    ROUTES = {path: mode for mode, path in MODE_PATHS.items()}

    CSS_PATH = "views/styles/admin.tcss"

    settings: Settings
    storage: SessionStorage
    client: HttpClient
    session: SessionStore
    guard: RouteGuard

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.settings = settings or Settings.from_env()
        self.storage = SessionStorage(self.settings.session_db)
        self.client = HttpClient(
            self.settings.api_url,
            self.storage,
            timeout=self.settings.request_timeout,
            transport=transport,
        )
        self.session = SessionStore(self.client, self.storage)
        self.guard = RouteGuard(self.session)
        self.current_path: Optional[str] = None

        self.session.subscribe(self._session_changed)

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    def _session_changed(self, status: SessionStatus, reason: str) -> None:
        self.post_message(SessionChangedMessage(status, reason))

    async def navigate(self, path: str) -> None:
        """
        Show the view for `path`. The token-only gate runs first, then,
        for admin views, the session-aware guard.
        """
        redirect = gate_path(path, self.storage.gate_token())
        if redirect is not None:
            _logger.debug(f"Redirecting {path} -> {redirect}")
            path = redirect

        mode = self.ROUTES.get(path)
        if mode is None:
            self.notify(f"No such page: {path}", severity="warning")
            return

        if is_admin_path(path) and path != REGISTER_PATH:
            access = await self.guard.resolve()
            if access is Access.LOGIN:
                path, mode = LOGIN_PATH, "login"
            elif access is Access.DENIED:
                mode = "denied"

        self.current_path = path
        if mode != self.current_mode:
            await self.switch_mode(mode)

    @work(exclusive=True, group="navigation")
    async def go(self, path: str) -> None:
        await self.navigate(path)

    @work
    async def main_flow(self):
        await self.session.bootstrap()
        await self.navigate(ADMIN_ROOT)

    @on(NavigateMessage)
    def handle_navigate(self, message: NavigateMessage) -> None:
        self.go(message.path)

    @on(SessionChangedMessage)
    def handle_session_changed(self, message: SessionChangedMessage) -> None:
        if message.reason == "expired":
            self.notify(AuthExpired.DEFAULT_MESSAGE, severity="error")
            self.go(LOGIN_PATH)
        elif message.reason == "logout":
            self.notify("Logout successful.")
            self.go(LOGIN_PATH)
        elif message.reason == "refresh" and self.current_path:
            # the role may have changed, run the guard again
            self.go(self.current_path)

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.session.logout()

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        await self.client.aclose()
        self.exit()


def main() -> None:
    AdminApp().run()


if __name__ == "__main__":
    main()
