from typing import Any, Awaitable, Optional, Sequence

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume, ScreenSuspend
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, LoadingIndicator

from utils.listing import ListController
from views.base_screen import BaseScreen


class ListScreen(BaseScreen):
    """
    A searchable, paginated table backed by a ListController.

    Layout (top to bottom):
    - error banner, hidden unless the last load or mutation failed
    - search box, screen specific toolbar, refresh button
    - spinner (first load only) / the table
    - optional detail pane
    - pager: prev / page input / next, page size, row summary

    Subclasses provide COLUMNS, create_controller() and row_for(); they must
    not define on_mount, use the hooks instead.
    """

    COLUMNS: Sequence[str] = ()
    SEARCH_PLACEHOLDER = "Search..."
    ITEM_NAME = "items"

    def __init__(self) -> None:
        super().__init__()
        self.controller: ListController = self.create_controller()
        self._rendered_items: Optional[list] = None

    # ---------------------------
    # subclass hooks
    # ---------------------------

    def create_controller(self) -> ListController:
        raise NotImplementedError

    def row_for(self, item: Any) -> Sequence[Any]:
        raise NotImplementedError

    def compose_toolbar(self) -> ComposeResult:
        yield from ()

    def compose_detail(self) -> ComposeResult:
        yield from ()

    def auto_refresh_interval(self) -> Optional[float]:
        """Seconds between background refreshes while shown, None for never."""
        return None

    def item_highlighted(self, item: Optional[Any]) -> None:
        pass

    # ---------------------------
    # layout
    # ---------------------------

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(classes="div-list"):
            yield Label("", id="label-banner", classes="banner hidden")
            with Horizontal(classes="list-toolbar"):
                yield Input(placeholder=self.SEARCH_PLACEHOLDER, id="input-search")
                yield from self.compose_toolbar()
                yield Button("Refresh", id="btn-refresh")
            yield LoadingIndicator(id="spinner")
            yield DataTable(id="table-list")
            yield from self.compose_detail()
            with Horizontal(id="hort-table-control"):
                yield Button("<", id="btn-prev")
                yield Input("1", id="input-page", type="integer")
                yield Label(" / 1", id="label-total-page-cnt")
                yield Button(">", id="btn-next")
                yield Label("Per page", id="label-limit")
                yield Input(
                    str(self.controller.query.limit),
                    id="input-limit",
                    type="integer",
                    validators=[Number(minimum=1, maximum=100)],
                )
                yield Label("", id="label-summary")

    def on_mount(self) -> None:
        table = self.query_one("#table-list", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*self.COLUMNS)

        self.controller.on_change = self.render_state
        self.render_state()
        self.run_controller(self.controller.load())

    def on_unmount(self) -> None:
        self.controller.close()

    @on(ScreenResume)
    def handle_resume_refresh(self) -> None:
        interval = self.auto_refresh_interval()
        if interval:
            self.controller.start_auto_refresh(interval)
        if self.controller.has_loaded:
            self.run_controller(self.controller.load(background=True))

    @on(ScreenSuspend)
    def handle_suspend(self) -> None:
        self.controller.stop_auto_refresh()

    def run_controller(self, work: Awaitable[Any]) -> None:
        self.run_worker(work, group="list-load")

    # ---------------------------
    # rendering
    # ---------------------------

    def render_state(self) -> None:
        controller = self.controller

        banner = self.query_one("#label-banner", Label)
        banner.update(controller.error or "")
        banner.set_class(not controller.error, "hidden")

        self.query_one("#spinner").set_class(not controller.show_spinner, "hidden")
        self.query_one("#table-list").set_class(controller.show_spinner, "hidden")

        if controller.items is not self._rendered_items:
            self._fill_table()
        self._render_pager()

    def _fill_table(self) -> None:
        table = self.query_one("#table-list", DataTable)
        items = self.controller.items
        cursor_row = table.cursor_row

        table.clear()
        for item in items:
            table.add_row(*self.row_for(item))
        self._rendered_items = items

        if items:
            table.move_cursor(row=min(cursor_row, len(items) - 1))
        self.item_highlighted(self.selected_item())

    def _render_pager(self) -> None:
        pagination = self.controller.pagination
        page_cnt = max(pagination.total_pages, 1)
        page = self.controller.page

        self.query_one("#input-page", Input).value = str(page)
        self.query_one("#input-page", Input).validators = [
            Number(minimum=1, maximum=page_cnt)
        ]
        self.query_one("#label-total-page-cnt", Label).update(f" / {page_cnt}")
        self.query_one("#btn-prev", Button).disabled = page <= 1
        self.query_one("#btn-next", Button).disabled = page >= page_cnt

        summary = self.query_one("#label-summary", Label)
        if not self.controller.has_loaded:
            summary.update("")
        elif pagination.total == 0:
            summary.update(f"No {self.ITEM_NAME} found")
        else:
            first = (page - 1) * pagination.limit + 1
            last = first + len(self.controller.items) - 1
            summary.update(
                f"Showing {first}-{last} of {pagination.total} {self.ITEM_NAME}"
            )

    def selected_item(self) -> Optional[Any]:
        table = self.query_one("#table-list", DataTable)
        items = self.controller.items
        if table.row_count == 0 or not 0 <= table.cursor_row < len(items):
            return None
        return items[table.cursor_row]

    # ---------------------------
    # input
    # ---------------------------

    @on(DataTable.RowHighlighted, "#table-list")
    def handle_row_highlight(self) -> None:
        self.item_highlighted(self.selected_item())

    @on(Input.Changed, "#input-search")
    def handle_search_changed(self, event: Input.Changed) -> None:
        self.controller.search(event.value)

    @on(Input.Submitted, "#input-search")
    def handle_search_submitted(self) -> None:
        self.controller.flush_search()

    @on(Button.Pressed, "#btn-refresh")
    def handle_refresh(self) -> None:
        self.run_controller(self.controller.refresh())

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        self.run_controller(self.controller.prev_page())

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        self.run_controller(self.controller.next_page())

    @on(Input.Submitted, "#input-page")
    def handle_page_input(self, event: Input.Submitted) -> None:
        if event.value.isdigit():
            self.run_controller(self.controller.set_page(int(event.value)))

    @on(Input.Submitted, "#input-limit")
    def handle_limit_input(self, event: Input.Submitted) -> None:
        if event.value.isdigit() and int(event.value) > 0:
            self.run_controller(self.controller.set_limit(int(event.value)))
        else:
            event.input.value = str(self.controller.query.limit)
