from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, Input, Label, Markdown

import api.endpoints as endpoints
from api.errors import DashboardError
from utils.pure import generate_markdown_table
from views.base_screen import BaseScreen


class SettingsScreen(BaseScreen):
    """API endpoint, backend health, and the current session."""

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-settings"):
            yield Label("API URL")
            with Horizontal(classes="form-btns"):
                yield Input(id="input-api-url")
                yield Button("Save", id="btn-save-url", variant="primary")
                yield Button("Check Health", id="btn-health")
            yield Label("", id="label-health")
            yield Label("Session", classes="form-title")
            yield Markdown("", id="md-session")
            yield Button("Refresh Profile", id="btn-refresh-profile")

    def on_mount(self) -> None:
        self.query_one("#input-api-url", Input).value = self.app.client.base_url

    @on(ScreenResume)
    def render_session(self) -> None:
        session = self.app.session
        user = session.user
        storage = self.app.storage
        rows = [
            ["Status", session.status.value],
            ["Name", user.name if user else "-"],
            ["Email", user.email if user else "-"],
            ["Role", user.role if user else "-"],
            ["Cookie", storage.cookie.set_cookie() if storage.cookie else "-"],
            ["Storage", storage.path],
        ]
        self.query_one("#md-session", Markdown).update(
            generate_markdown_table(None, rows, ["l", "l"])
        )

    @on(Button.Pressed, "#btn-save-url")
    @on(Input.Submitted, "#input-api-url")
    def handle_save_url(self) -> None:
        url = self.query_one("#input-api-url", Input).value.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            self.notify("API URL must start with http:// or https://", severity="error")
            return
        self.app.client.base_url = url
        self.notify(f"API URL set to {url}")

    @on(Button.Pressed, "#btn-health")
    @work(exclusive=True)
    async def handle_health(self) -> None:
        label = self.query_one("#label-health", Label)
        label.update("Checking...")
        try:
            health = await endpoints.health_check(self.app.client)
        except DashboardError as e:
            label.update(f"Backend unreachable: {e.message}")
            return
        label.update(f"Backend status: {health.get('status', 'unknown')}")

    @on(Button.Pressed, "#btn-refresh-profile")
    @work(exclusive=True)
    async def handle_refresh_profile(self) -> None:
        await self.app.session.refresh_user()
        if self.app.session.is_authenticated:
            self.render_session()
            self.notify("Profile refreshed.")
