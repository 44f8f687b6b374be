from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.widgets import Button, MarkdownViewer

from api.models import ORDER_STATUSES, Order
from utils.listing import OrdersController
from utils.pure import generate_markdown_table, status_label
from views.list_screen import ListScreen
from views.modal_order_status import OrderStatusModal


def order_detail_markdown(order: Optional[Order]) -> str:
    if order is None:
        return "### Select an order to view its details."

    info = order.customer_info
    header = (
        f"### Order #{order.order_number}\n"
        f"Status: **{status_label(order.status)}**  \n"
        f"Placed: {order.created_at or '-'}\n\n"
        f"**Customer:** {info.name} ({info.email or '-'})  \n"
        f"Phone: {info.phone or '-'}  \n"
        f"Ship To: {info.address or '-'}\n\n"
    )

    item_rows = []
    for item in order.items:
        ref = item.product_id or item.custom_id or "-"
        item_rows.append(
            [
                item.type,
                ref,
                item.quantity,
                f"{item.price:.2f}",
                f"{item.quantity * item.price:.2f}",
            ]
        )
    items_md = generate_markdown_table(
        ["Type", "Ref", "Qty", "Unit Price", "Line Total"],
        item_rows,
        ["l", "l", "r", "r", "r"],
    )

    totals = (
        f"\n\nSubtotal: ${order.subtotal:.2f}  \n"
        f"Shipping: ${order.shipping:.2f}  \n"
        f"Tax: ${order.tax:.2f}  \n"
        f"**Total:** ${order.total:.2f}\n\n"
    )

    history = ""
    if order.status_history:
        history_md = generate_markdown_table(
            ["Status", "When", "Note"],
            [
                [status_label(h.status), h.updated_at or "-", h.note or ""]
                for h in order.status_history
            ],
            ["l", "l", "l"],
        )
        history = "#### Status History\n\n" + history_md

    return header + items_md + totals + history


class OrdersScreen(ListScreen):
    """
    All orders with a status filter and a detail pane.
    Refreshes itself in the background while shown.
    """

    BINDINGS = [
        Binding("u", "update_status", "Update Status", show=True),
    ]

    COLUMNS = ("Order No", "Customer", "Items", "Total ($)", "Status", "Date")
    SEARCH_PLACEHOLDER = "Search by order number or customer..."
    ITEM_NAME = "orders"

    def create_controller(self) -> OrdersController:
        settings = self.app.settings
        return OrdersController(
            self.app.client,
            limit=settings.page_size,
            debounce_delay=settings.debounce_delay,
        )

    def auto_refresh_interval(self) -> Optional[float]:
        return self.app.settings.orders_refresh_interval

    def row_for(self, order: Order):
        created = order.created
        return (
            order.order_number,
            order.customer_info.name,
            sum(item.quantity for item in order.items),
            f"{order.total:.2f}",
            status_label(order.status),
            created.strftime("%Y-%m-%d %H:%M") if created else "-",
        )

    def compose_toolbar(self) -> ComposeResult:
        yield Button(
            "All", id="btn-status-all", classes="btn-status", variant="primary"
        )
        for status in ORDER_STATUSES:
            yield Button(
                status_label(status), id=f"btn-status-{status}", classes="btn-status"
            )
        yield Button("Update Status", id="btn-update-status", variant="success")

    def compose_detail(self) -> ComposeResult:
        yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)

    def item_highlighted(self, order: Optional[Order]) -> None:
        self.query_one("#md-order-detail", MarkdownViewer).document.update(
            order_detail_markdown(order)
        )

    @on(Button.Pressed, ".btn-status")
    def handle_status_filter(self, event: Button.Pressed) -> None:
        status = event.button.id.removeprefix("btn-status-")
        for button in self.query(".btn-status").results(Button):
            button.variant = "primary" if button is event.button else "default"
        self.run_controller(
            self.controller.set_status(None if status == "all" else status)
        )

    @on(Button.Pressed, "#btn-update-status")
    def handle_update_status_pressed(self) -> None:
        self.action_update_status()

    @work(exclusive=True)
    async def action_update_status(self) -> None:
        order = self.selected_item()
        if order is None:
            self.notify("Select an order first.", severity="warning")
            return

        result = await self.app.push_screen_wait(OrderStatusModal(order))
        if result is None:
            return
        status, note = result

        updated = await self.controller.update_status(order.id, status, note)
        if updated is None:
            self.notify(self.controller.error, severity="error")
            return
        self.notify(
            f"Order #{updated.order_number} is now {status_label(updated.status)}."
        )
