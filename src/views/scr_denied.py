from textual import on
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Button, Label

from utils.messages import UserLogoutMessage
from views.base_screen import BaseScreen


class AccessDeniedScreen(BaseScreen):
    """Shown in place of an admin view to a logged-in non-admin."""

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Access Denied", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-denied"):
            yield Label("Access Denied", classes="form-title")
            yield Label("You need admin privileges to access this page.")
            yield Button("Log out", id="btn-denied-logout", variant="error")

    @on(Button.Pressed, "#btn-denied-logout")
    def handle_logout(self) -> None:
        self.post_message(UserLogoutMessage())
