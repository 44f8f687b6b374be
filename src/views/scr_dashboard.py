from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume, ScreenSuspend
from textual.timer import Timer
from textual.widgets import Button, Label, MarkdownViewer

import api.endpoints as endpoints
from api.errors import AuthExpired, DashboardError
from api.models import DashboardStats, Order
from utils.logger import get_logger
from utils.pure import (
    daily_sales,
    generate_markdown_table,
    recent_orders,
    status_label,
    summarize_orders,
)
from views.base_screen import BaseScreen

_logger = get_logger(__name__)


def dashboard_markdown(stats: Optional[DashboardStats], orders: List[Order]) -> str:
    summary = summarize_orders(orders)
    if stats is not None:
        summary["total_revenue"] = stats.total_revenue
        summary["total_orders"] = stats.total_orders
        customers_label, customers = "Total Users", stats.total_users
    else:
        customers_label, customers = "Customers", summary["unique_customers"]

    headline = generate_markdown_table(
        [
            "Total Revenue",
            "Total Orders",
            "Pending",
            "Shipped",
            "Completed",
            customers_label,
        ],
        [
            [
                f"${summary['total_revenue']:,.2f}",
                summary["total_orders"],
                summary["pending_orders"],
                summary["shipped_orders"],
                summary["completed_orders"],
                customers,
            ]
        ],
        ["r"] * 6,
    )

    latest = recent_orders(orders, k=5)
    if not latest and stats is not None:
        latest = stats.recent_orders[:5]
    if latest:
        recent_md = generate_markdown_table(
            ["Order No", "Customer", "Total ($)", "Status"],
            [
                [
                    o.order_number,
                    o.customer_info.name,
                    f"{o.total:.2f}",
                    status_label(o.status),
                ]
                for o in latest
            ],
            ["l", "l", "r", "l"],
        )
    else:
        recent_md = "No orders yet."

    days = daily_sales(orders, days=7)
    if days:
        daily_md = generate_markdown_table(
            ["Day", "Sales ($)", "Orders"],
            [[d.isoformat(), f"{amount:.2f}", cnt] for d, amount, cnt in days],
            ["l", "r", "r"],
        )
    else:
        daily_md = "No sales in the last 7 days."

    md = (
        "## Overview\n\n"
        + headline
        + "\n\n### Recent Orders\n\n"
        + recent_md
        + "\n\n### Daily Sales\n\n"
        + daily_md
    )

    if stats is not None and stats.monthly_revenue:
        monthly_md = generate_markdown_table(
            ["Month", "Revenue ($)"],
            [[m.month, f"{m.revenue:.2f}"] for m in stats.monthly_revenue],
            ["l", "r"],
        )
        md += "\n\n### Monthly Revenue\n\n" + monthly_md
    return md


class DashboardScreen(BaseScreen):
    """
    Store overview: headline numbers, recent orders, daily sales.
    Reloads on a timer while shown.
    """

    def __init__(self) -> None:
        super().__init__()
        self._timer: Optional[Timer] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Label("", id="label-banner", classes="banner hidden")
            yield MarkdownViewer(id="md-dashboard", show_table_of_contents=False)
            yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        self._timer = self.set_interval(
            self.app.settings.dashboard_refresh_interval, self.handle_reload
        )

    @on(ScreenResume)
    def handle_resume(self) -> None:
        if self._timer is not None:
            self._timer.resume()
        self.handle_reload()

    @on(ScreenSuspend)
    def handle_suspend(self) -> None:
        if self._timer is not None:
            self._timer.pause()

    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        client = self.app.client
        banner = self.query_one("#label-banner", Label)

        stats: Optional[DashboardStats] = None
        orders: Optional[List[Order]] = None
        error = ""
        try:
            stats = await endpoints.get_dashboard_stats(client)
        except AuthExpired:
            return
        except DashboardError as e:
            _logger.info(f"Dashboard stats unavailable: {e.message}")
            error = e.message
        try:
            orders = await endpoints.list_orders(client)
        except AuthExpired:
            return
        except DashboardError as e:
            _logger.warning(f"Failed to load orders for the dashboard: {e.message}")
            error = e.message

        if stats is None and orders is None:
            banner.update(f"Failed to load dashboard data. {error}")
            banner.remove_class("hidden")
            return

        banner.add_class("hidden")
        await self.query_one("#md-dashboard", MarkdownViewer).document.update(
            dashboard_markdown(stats, orders or [])
        )
