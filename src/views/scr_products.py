from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.widgets import Button

from api.models import Product
from utils.listing import ProductsController
from views.list_screen import ListScreen
from views.modal_dialog import DialogModal
from views.modal_product_form import ProductFormModal


class ProductsScreen(ListScreen):
    """
    Product catalogue: browse, create, edit, delete.
    """

    BINDINGS = [
        Binding("n", "new_product", "New", show=True),
        Binding("e", "edit_product", "Edit", show=True),
        Binding("delete", "delete_product", "Delete", show=True),
    ]

    COLUMNS = ("Name", "Category", "Price ($)", "Stock", "In Stock")
    SEARCH_PLACEHOLDER = "Search products..."
    ITEM_NAME = "products"

    def create_controller(self) -> ProductsController:
        settings = self.app.settings
        return ProductsController(
            self.app.client,
            limit=settings.page_size,
            debounce_delay=settings.debounce_delay,
        )

    def row_for(self, product: Product):
        return (
            product.name,
            product.category,
            f"{product.price:.2f}",
            product.stock,
            "Yes" if product.in_stock else "No",
        )

    def compose_toolbar(self) -> ComposeResult:
        yield Button("New", id="btn-new-product", variant="success")
        yield Button("Edit", id="btn-edit-product")
        yield Button("Delete", id="btn-delete-product", variant="error")

    @on(Button.Pressed, "#btn-new-product")
    def handle_new_pressed(self) -> None:
        self.action_new_product()

    @on(Button.Pressed, "#btn-edit-product")
    def handle_edit_pressed(self) -> None:
        self.action_edit_product()

    @on(Button.Pressed, "#btn-delete-product")
    def handle_delete_pressed(self) -> None:
        self.action_delete_product()

    @work(exclusive=True, group="product-form")
    async def action_new_product(self) -> None:
        payload = await self.app.push_screen_wait(ProductFormModal())
        if payload is None:
            return
        if await self.controller.create(payload):
            self.notify(f"Product '{payload['name']}' created.")
        else:
            self.notify(self.controller.error, severity="error")

    @work(exclusive=True, group="product-form")
    async def action_edit_product(self) -> None:
        product = self.selected_item()
        if product is None:
            self.notify("Select a product first.", severity="warning")
            return
        payload = await self.app.push_screen_wait(ProductFormModal(product))
        if payload is None:
            return
        if await self.controller.update(product.id, payload):
            self.notify("Product updated successfully.")
        else:
            self.notify(self.controller.error, severity="error")

    @work(exclusive=True, group="product-form")
    async def action_delete_product(self) -> None:
        product = self.selected_item()
        if product is None:
            self.notify("Select a product first.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Delete '{product.name}'? This cannot be undone.",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return
        if await self.controller.delete(product.id):
            self.notify("Product deleted.")
        else:
            self.notify(self.controller.error, severity="error")
