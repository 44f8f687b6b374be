from typing import Optional, Tuple

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, RadioButton, RadioSet

from api.models import ORDER_STATUSES, Order
from utils.pure import default_status_note, status_label


class OrderStatusModal(ModalScreen[Optional[Tuple[str, str]]]):
    """
    Pick a new status for an order, with an optional note.
    Returns (status, note) or None if cancelled.
    """

    def __init__(self, order: Order) -> None:
        super().__init__()
        self._order = order

    def compose(self) -> ComposeResult:
        with Vertical(id="div-order-status", classes="modal-form"):
            yield Label(f"Update status of order #{self._order.order_number}")
            with RadioSet(id="radio-status"):
                for status in ORDER_STATUSES:
                    yield RadioButton(
                        status_label(status),
                        value=status == self._order.status,
                        name=status,
                    )
            yield Label("Note")
            yield Input(placeholder="optional", id="input-status-note")
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Update", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        self.query_one(RadioSet).focus()

    @on(RadioSet.Changed)
    def handle_status_changed(self, event: RadioSet.Changed) -> None:
        # keep the placeholder in line with the note the backend will get
        self.query_one("#input-status-note", Input).placeholder = (
            default_status_note(event.pressed.name)
        )

    @on(Button.Pressed, "#btn-save")
    @on(Input.Submitted, "#input-status-note")
    def handle_save(self) -> None:
        pressed = self.query_one(RadioSet).pressed_button
        if pressed is None:
            self.notify("Pick a status first.", severity="warning")
            return
        if pressed.name == self._order.status:
            self.notify("Order already has that status.", severity="warning")
            return
        note = self.query_one("#input-status-note", Input).value.strip()
        self.dismiss((pressed.name, note))

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(None)
