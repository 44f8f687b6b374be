from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    List,
    Optional,
    Sequence,
    TypeVar,
)

import api.endpoints as endpoints
from api.client import HttpClient
from api.errors import AuthExpired, DashboardError
from api.models import (
    ORDER_STATUSES,
    Order,
    PaginatedResponse,
    Pagination,
    Product,
)
from utils.debounce import DEFAULT_DELAY, Debouncer
from utils.logger import get_logger
from utils.pure import default_status_note, paginate_locally

_logger = get_logger(__name__)

T = TypeVar("T")

PageFetcher = Callable[["ListQuery"], Awaitable[PaginatedResponse[T]]]
AllFetcher = Callable[[], Awaitable[List[T]]]


@dataclass(frozen=True)
class ListQuery:
    page: int = 1
    limit: int = 10
    search: str = ""
    status: Optional[str] = None


class ListController(Generic[T]):
    """
    Owns page / limit / search / status for one table and the page of rows
    currently on screen.

    Loads try the server-paginated endpoint first and fall back to fetching
    the whole collection and paging it locally. Every load takes a sequence
    number; only the most recently issued one may touch the visible state,
    so a slow early response never overwrites a newer one.

    `on_change` is called after every visible state change.
    """

    def __init__(
        self,
        fetch_all: AllFetcher,
        fetch_page: Optional[PageFetcher] = None,
        search_fields: Sequence[str] = (),
        status_field: str = "status",
        limit: int = 10,
        debounce_delay: float = DEFAULT_DELAY,
        error_message: str = "Failed to load data.",
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._fetch_all = fetch_all
        self._fetch_page = fetch_page
        self.search_fields = tuple(search_fields)
        self.status_field = status_field
        self.error_message = error_message
        self.on_change = on_change

        self.query = ListQuery(limit=limit)
        self.items: List[T] = []
        self.pagination = Pagination.of(1, limit, 0)
        self.error: Optional[str] = None
        self.is_loading = False
        self.has_loaded = False
        self.is_paginated = False  # True when the server did the paging

        self._seq = 0
        self._tasks: set[asyncio.Task] = set()
        self._refresh_task: Optional[asyncio.Task] = None
        self._debouncer: Debouncer[str] = Debouncer(
            self._search_settled, debounce_delay
        )

    # ---------------------------
    # query state
    # ---------------------------

    @property
    def page(self) -> int:
        return self.query.page

    @property
    def show_spinner(self) -> bool:
        """Only the very first load shows a spinner."""
        return self.is_loading and not self.has_loaded

    async def set_page(self, page: int) -> None:
        page = max(1, page)
        if self.pagination.total_pages:
            page = min(page, self.pagination.total_pages)
        self.query = replace(self.query, page=page)
        await self.load()

    async def next_page(self) -> None:
        if self.query.page < self.pagination.total_pages:
            await self.set_page(self.query.page + 1)

    async def prev_page(self) -> None:
        if self.query.page > 1:
            await self.set_page(self.query.page - 1)

    async def set_limit(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("limit must be positive")
        self.query = replace(self.query, limit=limit, page=1)
        await self.load()

    async def set_status(self, status: Optional[str]) -> None:
        if status == self.query.status:
            return
        # back to page 1 before the fetch goes out
        self.query = replace(self.query, status=status, page=1)
        await self.load()

    async def apply_search(self, term: str) -> None:
        term = (term or "").strip()
        if term == self.query.search:
            return
        self.query = replace(self.query, search=term, page=1)
        await self.load()

    def search(self, term: str) -> None:
        """Search box input. The fetch happens once typing settles."""
        self._debouncer.push(term)

    def flush_search(self) -> None:
        self._debouncer.flush()

    def _search_settled(self, term: str) -> None:
        self._spawn(self.apply_search(term))

    async def refresh(self) -> None:
        """Same query again, page and filters untouched."""
        await self.load()

    # ---------------------------
    # loading
    # ---------------------------

    async def _fetch(self, query: ListQuery) -> tuple[List[T], Pagination, bool]:
        if self._fetch_page is not None:
            try:
                response = await self._fetch_page(query)
                return response.data, response.pagination, True
            except AuthExpired:
                raise
            except DashboardError as e:
                # not an error for the user, the backend just can't paginate
                _logger.debug(
                    f"Paginated endpoint unavailable ({e.message}), paging locally."
                )

        everything = await self._fetch_all()
        rows, total = paginate_locally(
            everything,
            query.page,
            query.limit,
            search=query.search,
            search_fields=self.search_fields,
            status=query.status,
            status_field=self.status_field,
        )
        return rows, Pagination.of(query.page, query.limit, total), False

    async def load(self, background: bool = False) -> bool:
        """
        Fetch the current query. Returns True if the result was committed.

        A background load (auto-refresh) never raises the spinner and never
        clears what is on screen while it runs.
        """
        self._seq += 1
        seq = self._seq
        query = self.query
        if not background:
            self.is_loading = True
            self._changed()

        try:
            rows, pagination, paginated = await self._fetch(query)
        except DashboardError as e:
            if seq != self._seq:
                return False
            _logger.warning(f"{self.error_message} {e.message}")
            if isinstance(e, AuthExpired):
                self.error = e.message
            else:
                self.error = f"{self.error_message} {e.message}"
            self.is_loading = False
            self._changed()
            return False

        if seq != self._seq:
            _logger.debug(f"Dropping stale response #{seq} (latest #{self._seq}).")
            return False

        self.items = rows
        self.pagination = pagination
        self.is_paginated = paginated
        self.error = None
        self.is_loading = False
        self.has_loaded = True
        self._changed()
        return True

    # ---------------------------
    # mutations
    # ---------------------------

    async def replace_item(
        self,
        item_id: Any,
        mutate: Callable[[], Awaitable[T]],
        error_message: str = "Update failed.",
    ) -> Optional[T]:
        """
        Run a mutation and swap the returned entity into the current page by
        id. Nothing else on the page changes. On failure the page is left
        as it was and `error` is set.
        """
        # loads already in flight predate the mutation, drop them
        self._seq += 1
        try:
            updated = await mutate()
        except DashboardError as e:
            _logger.warning(f"{error_message} {e.message}")
            self.error = f"{error_message} {e.message}"
            self.is_loading = False
            self._changed()
            return None

        self.items = [
            updated if getattr(item, "id", None) == item_id else item
            for item in self.items
        ]
        self.error = None
        self.is_loading = False
        self._changed()
        return updated

    # ---------------------------
    # background work
    # ---------------------------

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def start_auto_refresh(self, interval: float) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            return
        self._refresh_task = asyncio.ensure_future(self._auto_refresh(interval))

    def stop_auto_refresh(self) -> None:
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None

    async def _auto_refresh(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.load(background=True)

    async def wait_idle(self) -> None:
        """Wait for spawned loads (debounced searches) to finish."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        """Cancel timers and pending work; the owning view is going away."""
        self._debouncer.cancel()
        self.stop_auto_refresh()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self.on_change = None

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()


class OrdersController(ListController[Order]):
    def __init__(self, client: HttpClient, **kwargs) -> None:
        async def fetch_page(query: ListQuery) -> PaginatedResponse[Order]:
            return await endpoints.list_orders_page(
                client, query.page, query.limit, query.search, query.status
            )

        kwargs.setdefault(
            "error_message", "Failed to load orders. Make sure the backend is running."
        )
        super().__init__(
            fetch_all=lambda: endpoints.list_orders(client),
            fetch_page=fetch_page,
            search_fields=("order_number", "customer_info.name"),
            **kwargs,
        )
        self.client = client

    async def set_status(self, status: Optional[str]) -> None:
        if status is not None and status not in ORDER_STATUSES:
            raise ValueError(f"unknown order status {status!r}")
        await super().set_status(status)

    async def update_status(
        self, order_id: str, status: str, note: Optional[str] = None
    ) -> Optional[Order]:
        note = note or default_status_note(status)
        return await self.replace_item(
            order_id,
            lambda: endpoints.update_order_status(self.client, order_id, status, note),
            error_message="Failed to update order status.",
        )


class ProductsController(ListController[Product]):
    def __init__(self, client: HttpClient, **kwargs) -> None:
        async def fetch_page(query: ListQuery) -> PaginatedResponse[Product]:
            return await endpoints.list_products_page(
                client, query.page, query.limit, query.search
            )

        kwargs.setdefault("error_message", "Failed to load products.")
        super().__init__(
            fetch_all=lambda: endpoints.list_products(client),
            fetch_page=fetch_page,
            search_fields=("name", "category"),
            **kwargs,
        )
        self.client = client

    async def _mutate(self, action: Awaitable[Any], error_message: str) -> bool:
        try:
            await action
        except DashboardError as e:
            _logger.warning(f"{error_message} {e.message}")
            self.error = f"{error_message} {e.message}"
            self._changed()
            return False
        await self.refresh()
        return True

    async def create(self, payload: dict) -> bool:
        return await self._mutate(
            endpoints.create_product(self.client, payload), "Failed to create product."
        )

    async def update(self, product_id: str, payload: dict) -> bool:
        return await self._mutate(
            endpoints.update_product(self.client, product_id, payload),
            "Failed to update product.",
        )

    async def delete(self, product_id: str) -> bool:
        return await self._mutate(
            endpoints.delete_product(self.client, product_id),
            "Failed to delete product.",
        )


class UsersController(ListController):
    """Admin users; the backend has no paginated variant, so it's all local."""

    def __init__(self, client: HttpClient, **kwargs) -> None:
        kwargs.setdefault("error_message", "Failed to load users.")
        super().__init__(
            fetch_all=lambda: endpoints.list_users(client),
            search_fields=("name", "email"),
            status_field="role",
            **kwargs,
        )
