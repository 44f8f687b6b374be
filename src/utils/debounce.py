import asyncio
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_DELAY = 0.3  # seconds


class Debouncer(Generic[T]):
    """
    Forwards a value to `callback` only once it has stayed unchanged for
    `delay` seconds. Every push cancels the previous pending emission, so a
    burst of inputs only ever emits the last one.

    Runs on the current asyncio loop (the Textual app loop in practice).
    """

    def __init__(self, callback: Callable[[T], None], delay: float = DEFAULT_DELAY):
        self._callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending_value: Optional[T] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._pending_value = value
        self._handle = loop.call_later(self.delay, self._emit, value)

    def flush(self) -> None:
        """Emit the pending value now (enter key in a search box)."""
        if self._handle is None:
            return
        value = self._pending_value
        self.cancel()
        self._emit(value)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _emit(self, value: T) -> None:
        self._handle = None
        self._callback(value)
