"""Storage of in-flight QoS messages keyed on packet id."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class InflightMessage:
    """A packet currently in flight, with its retry bookkeeping."""

    packet: Any = None
    sent: int = 0
    resends: int = 0
    expiry: int = 0


class InflightMap:
    """Thread-safe map of in-flight messages with an optional capacity.

    When a capacity above zero is reached, adding a new key evicts the
    oldest stored message.
    """

    def __init__(self, capacity: int = 0) -> None:
        self.capacity = capacity
        self._lock = threading.RLock()
        self._messages: OrderedDict[int, InflightMessage] = OrderedDict()

    @staticmethod
    def _check_key(key: int) -> None:
        if not 0 <= key <= 0xFFFF:
            raise ValueError(f"packet id out of range: {key}")

    def set(self, key: int, message: InflightMessage) -> bool:
        """Store a message; return True if the key was new."""
        self._check_key(key)
        with self._lock:
            is_new = key not in self._messages
            if is_new and 0 < self.capacity <= len(self._messages):
                self._messages.popitem(last=False)
            self._messages[key] = message
            return is_new

    def get(self, key: int) -> InflightMessage | None:
        """Return the message stored under ``key``, or None."""
        with self._lock:
            return self._messages.get(key)

    def get_all(self) -> dict[int, InflightMessage]:
        """Return a snapshot of all in-flight messages."""
        with self._lock:
            return dict(self._messages)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._messages

    def delete(self, key: int) -> bool:
        """Remove a message; return True if it existed."""
        with self._lock:
            return self._messages.pop(key, None) is not None

    def walk(
        self,
        client: Any,
        handler: Callable[[Any, InflightMessage, bool], Any],
    ) -> None:
        """Call ``handler(client, message, True)`` for each message.

        An exception from the handler ends the walk and propagates.
        """
        for message in list(self.get_all().values()):
            handler(client, message, True)