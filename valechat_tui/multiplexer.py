"""Event multiplexer: one ordered stream from the app queue, terminal and clock.

Priority per ``poll()`` call:

1. one application event from the internal queue (short bounded wait),
2. one raw terminal item (zero wait),
3. ``Tick`` once ``tick_rate`` seconds have passed since the previous tick,
4. nothing, after a short sleep.
"""

from __future__ import annotations

import queue
import time
from collections import deque
from collections.abc import Callable

from .constants import DEFAULT_TICK_RATE, IDLE_SLEEP, QUEUE_WAIT
from .events import Event, Key, Mouse, MouseKind, Resize, Tick, is_terminal_event
from .log import logger

RawInput = tuple


class TerminalInput:
    """Inbox of raw terminal input, filled by the host and drained by the loop.

    Items are ``("key", name, character)``, ``("mouse", kind, x, y)`` or
    ``("resize", width, height)``.  ``deque`` append/popleft are atomic, so
    the host thread and the loop thread need no extra locking.
    """

    def __init__(self) -> None:
        self._items: deque[RawInput] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def push_key(self, key: str, character: str | None = None) -> None:
        self._items.append(("key", key, character))

    def push_mouse(self, kind: MouseKind, x: int = 0, y: int = 0) -> None:
        self._items.append(("mouse", kind, x, y))

    def push_resize(self, width: int, height: int) -> None:
        self._items.append(("resize", width, height))

    def poll_raw(self) -> RawInput | None:
        """Return the oldest raw item without waiting, or ``None``."""
        try:
            return self._items.popleft()
        except IndexError:
            return None


def translate_raw(item: RawInput) -> Event | None:
    """Translate one raw terminal item into a typed event."""
    kind = item[0]
    if kind == "key":
        _, name, character = item
        if not name:
            return None
        return Key.from_terminal(name, character)
    if kind == "mouse":
        _, mouse_kind, x, y = item
        return Mouse(MouseKind(mouse_kind), x, y)
    if kind == "resize":
        _, width, height = item
        return Resize(max(0, int(width)), max(0, int(height)))
    return None


class EventMultiplexer:
    """Merge background application events, raw terminal input and ticks."""

    def __init__(
        self,
        terminal: TerminalInput,
        tick_rate: float = DEFAULT_TICK_RATE,
        *,
        queue_wait: float = QUEUE_WAIT,
        idle_sleep: float = IDLE_SLEEP,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.terminal = terminal
        self.tick_rate = tick_rate
        self.queue_wait = queue_wait
        self.idle_sleep = idle_sleep
        self._clock = clock
        self._sleep = sleep
        self._queue: queue.Queue[Event] = queue.Queue()
        self._last_tick = clock()

    # -- producer side ---------------------------------------------------------

    def send(self, event: Event) -> None:
        """Queue an application event.  Safe to call from any thread."""
        if is_terminal_event(event):
            raise TypeError(f"{type(event).__name__} is a terminal event")
        self._queue.put(event)

    @property
    def sender(self) -> Callable[[Event], None]:
        return self.send

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    # -- consumer side ---------------------------------------------------------

    def poll(self) -> Event | None:
        """Return the next event, or ``None`` when nothing is due."""
        try:
            if self.queue_wait > 0:
                return self._queue.get(timeout=self.queue_wait)
            return self._queue.get_nowait()
        except queue.Empty:
            pass

        raw = self.terminal.poll_raw()
        while raw is not None:
            event = translate_raw(raw)
            if event is not None:
                return event
            logger.debug("dropping untranslatable terminal input %r", raw)
            raw = self.terminal.poll_raw()

        now = self._clock()
        if now - self._last_tick >= self.tick_rate:
            self._last_tick = now
            return Tick()

        self._sleep(self.idle_sleep)
        return None
