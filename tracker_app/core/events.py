"""In-process change broadcast shared by the record store and its views."""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChangeFeed:
    """Minimal observable: listeners are called with no payload on every change.

    A listener that raises is logged and skipped so one broken view cannot stop
    the others from re-deriving.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self) -> None:
        # Iterate over a copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Change listener %r failed", listener)

    def __len__(self) -> int:
        return len(self._listeners)
