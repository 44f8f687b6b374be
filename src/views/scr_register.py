from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label

from utils.guard import ADMIN_ROOT, LOGIN_PATH
from utils.messages import NavigateMessage
from views.base_screen import BaseScreen


class RegisterScreen(BaseScreen):
    """
    Admin sign-up. Open to visitors without a token; a successful
    registration logs straight in.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Admin Registration", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-reg", classes="auth-form"):
            yield Label("Create Admin Account", classes="form-title")
            yield Label("Name")
            yield Input(placeholder="Jane Doe", id="input-reg-name")
            yield Label("Email")
            yield Input(placeholder="admin@example.com", id="input-reg-email")
            yield Label("Password")
            yield Input(placeholder="*********", password=True, id="input-reg-pwd")
            yield Label("Confirm Password")
            yield Input(
                placeholder="*********", password=True, id="input-reg-confirm"
            )
            yield Label("", id="label-reg-error", classes="form-error")
            with Horizontal(classes="form-btns"):
                yield Button("Back to Login", id="btn-goto-login")
                yield Button("Register", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-reg-name").focus()

    @on(Input.Submitted, "#input-reg-confirm")
    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        name = self.query_one("#input-reg-name", Input).value
        email = self.query_one("#input-reg-email", Input).value
        pwd_input = self.query_one("#input-reg-pwd", Input)
        confirm_input = self.query_one("#input-reg-confirm", Input)
        error_label = self.query_one("#label-reg-error", Label)

        error_label.update("")
        ok = await self.app.session.register(
            name, email, pwd_input.value, confirm_input.value
        )
        if not ok:
            error_label.update(self.app.session.last_error or "Registration failed")
            confirm_input.value = ""
            pwd_input.focus()
            return

        pwd_input.value = ""
        confirm_input.value = ""
        self.notify("Registration successful.")
        self.post_message(NavigateMessage(ADMIN_ROOT))

    @on(Button.Pressed, "#btn-goto-login")
    def handle_goto_login(self) -> None:
        self.post_message(NavigateMessage(LOGIN_PATH))
