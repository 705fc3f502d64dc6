from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional, Tuple

# timers fire this long after the deadline so the message has really gone
_EXPIRY_SLACK_S = 0.05


class Notifications:
    """Short user-facing messages that disappear after ``ttl_s`` seconds.

    ``on_expire`` is called from a timer thread once a message has lapsed,
    so whoever renders the list can refresh without polling.
    """

    def __init__(
        self,
        ttl_s: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
        on_expire: Optional[Callable[[], None]] = None,
    ) -> None:
        self.ttl_s = ttl_s
        self.on_expire = on_expire
        self._clock = clock
        self._items: List[Tuple[float, str]] = []
        self._lock = threading.Lock()

    def post(self, message: str) -> None:
        with self._lock:
            self._items.append((self._clock() + self.ttl_s, message))
        if self.on_expire is not None:
            timer = threading.Timer(self.ttl_s + _EXPIRY_SLACK_S, self.on_expire)
            timer.daemon = True
            timer.start()

    def active(self) -> List[str]:
        now = self._clock()
        with self._lock:
            self._items = [(exp, msg) for exp, msg in self._items if exp > now]
            return [msg for _, msg in self._items]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
