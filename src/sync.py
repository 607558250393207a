"""In-process change notifications between cart sessions sharing one store."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

CART_UPDATED = "cart_updated"

Listener = Callable[[str], Awaitable[None]]


class SyncChannel:
    """Broadcasts a message to every subscriber except the sender.

    Receivers are expected to reload their state from storage; nothing is
    merged field by field.
    """

    def __init__(self) -> None:
        self._listeners: List[Tuple[object, Listener]] = []

    def subscribe(self, owner: object, listener: Listener) -> Callable[[], None]:
        entry = (owner, listener)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    async def publish(self, message: str, sender: Optional[object] = None) -> None:
        for owner, listener in list(self._listeners):
            if owner is sender:
                continue
            try:
                await listener(message)
            except Exception:
                # A failing listener does not block delivery to the rest.
                logger.exception("Sync listener failed for message %s", message)
