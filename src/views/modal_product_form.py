from typing import Any, Dict, Optional

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Checkbox, Input, Label

from api.errors import ValidationError
from api.models import Product
from utils.pure import parse_product_form


class ProductFormModal(ModalScreen[Optional[Dict[str, Any]]]):
    """
    Create or edit a product.
    Returns the request payload, or None if cancelled.
    """

    def __init__(self, product: Optional[Product] = None) -> None:
        super().__init__()
        self._product = product

    def compose(self) -> ComposeResult:
        p = self._product
        title = f"Edit Product: {p.name}" if p else "New Product"
        with VerticalScroll(id="div-product-form", classes="modal-form"):
            yield Label(title, classes="form-title")
            yield Label("Name *")
            yield Input(p.name if p else "", id="input-name")
            yield Label("Category *")
            yield Input(p.category if p else "", id="input-category")
            with Horizontal():
                with Vertical():
                    yield Label("Price ($) *")
                    yield Input(
                        f"{p.price:.2f}" if p else "",
                        id="input-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Vertical():
                    yield Label("Stock *")
                    yield Input(
                        str(p.stock) if p else "",
                        id="input-stock",
                        type="integer",
                        validators=[Number(minimum=0)],
                    )
            yield Label("Description")
            yield Input(p.description if p else "", id="input-description")
            yield Label("Image URL")
            yield Input((p.image or "") if p else "", id="input-image")
            yield Label("Colors (comma separated)")
            yield Input(", ".join(p.colors) if p else "", id="input-colors")
            yield Label("Sizes (comma separated)")
            yield Input(", ".join(p.sizes) if p else "", id="input-sizes")
            yield Checkbox("In stock", p.in_stock if p else True, id="chk-in-stock")
            yield Label("", id="label-form-error", classes="form-error")
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Save", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#input-name").focus()

    def _value(self, input_id: str) -> str:
        return self.query_one(f"#{input_id}", Input).value

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        try:
            payload = parse_product_form(
                name=self._value("input-name"),
                price=self._value("input-price"),
                category=self._value("input-category"),
                stock=self._value("input-stock"),
                description=self._value("input-description"),
                image=self._value("input-image"),
                colors=self._value("input-colors"),
                sizes=self._value("input-sizes"),
                in_stock=self.query_one("#chk-in-stock", Checkbox).value,
            )
        except ValidationError as e:
            self.query_one("#label-form-error", Label).update(e.message)
            return
        self.dismiss(payload)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(None)
