from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label

from utils.guard import ADMIN_ROOT, REGISTER_PATH
from utils.messages import NavigateMessage
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal


class LoginScreen(BaseScreen):
    """
    Admin login. On success the app is asked to show the dashboard; the
    route guard decides whether this account may actually see it.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Admin Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-login", classes="auth-form"):
            yield Label("Admin Login", classes="form-title")
            yield Label("Email")
            yield Input(placeholder="admin@example.com", id="input-login-email")
            yield Label("Password")
            yield Input(placeholder="*********", password=True, id="input-login-pwd")
            yield Label("", id="label-login-error", classes="form-error")
            with Horizontal(classes="form-btns"):
                yield Button("Quit", id="btn-quit")
                yield Button("Register", id="btn-goto-register")
                yield Button("Login", id="btn-login", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()

    @on(Input.Submitted, "#input-login-email")
    def handle_email_submitted(self) -> None:
        self.query_one("#input-login-pwd").focus()

    @on(Input.Submitted, "#input-login-pwd")
    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email_input = self.query_one("#input-login-email", Input)
        pwd_input = self.query_one("#input-login-pwd", Input)
        error_label = self.query_one("#label-login-error", Label)
        login_btn = self.query_one("#btn-login", Button)

        error_label.update("")
        login_btn.disabled = True
        login_btn.label = "Logging in..."
        try:
            ok = await self.app.session.login(email_input.value, pwd_input.value)
        finally:
            login_btn.disabled = False
            login_btn.label = "Login"

        if not ok:
            error_label.update(self.app.session.last_error or "Login failed")
            pwd_input.value = ""
            pwd_input.focus()
            pwd_input.add_class("-invalid")
            return

        pwd_input.value = ""
        pwd_input.remove_class("-invalid")
        self.notify(f"Hello {self.app.session.user.name}!")
        self.post_message(NavigateMessage(ADMIN_ROOT))

    @on(Button.Pressed, "#btn-goto-register")
    def handle_goto_register(self) -> None:
        self.post_message(NavigateMessage(REGISTER_PATH))

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
