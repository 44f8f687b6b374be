from textual import on
from textual.app import ComposeResult
from textual.widgets import Button

from api.models import AdminUser
from utils.listing import UsersController
from views.list_screen import ListScreen


class UsersScreen(ListScreen):
    """Admin accounts, filterable by role."""

    COLUMNS = ("Name", "Email", "Role", "Joined")
    SEARCH_PLACEHOLDER = "Search by name or email..."
    ITEM_NAME = "users"

    ROLE_FILTERS = {"all": "All", "admin": "Admin", "super_admin": "Super Admin"}

    def create_controller(self) -> UsersController:
        settings = self.app.settings
        return UsersController(
            self.app.client,
            limit=settings.page_size,
            debounce_delay=settings.debounce_delay,
        )

    def row_for(self, user: AdminUser):
        joined = (user.created_at or "-")[:10]
        return (user.name, user.email, user.role, joined)

    def compose_toolbar(self) -> ComposeResult:
        for role, label in self.ROLE_FILTERS.items():
            yield Button(
                label,
                id=f"btn-role-{role}",
                classes="btn-role",
                variant="primary" if role == "all" else "default",
            )

    @on(Button.Pressed, ".btn-role")
    def handle_role_filter(self, event: Button.Pressed) -> None:
        role = event.button.id.removeprefix("btn-role-")
        for button in self.query(".btn-role").results(Button):
            button.variant = "primary" if button is event.button else "default"
        self.run_controller(self.controller.set_status(None if role == "all" else role))
