# SPDX-License-Identifier: MIT

import logging
from typing import Any, Callable, NamedTuple, TypeAlias

from eventline.model.entity_id import EntityId

logger = logging.getLogger(__name__)

TASKS_CHANGED = "tasks:changed"

Handler: TypeAlias = Callable[[Any], None]
Unsubscribe: TypeAlias = Callable[[], None]


class Scope(NamedTuple):
    event_id: EntityId
    department_id: EntityId


class EventBus:
    """In-process publish/subscribe channel.

    Handlers run synchronously in subscription order. A failing handler is
    logged and does not prevent the remaining handlers from running.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, topic: str, handler: Handler) -> Unsubscribe:
        self._handlers.setdefault(topic, [])
        if handler not in self._handlers[topic]:
            self._handlers[topic].append(handler)

        def unsubscribe() -> None:
            self.off(topic, handler)

        return unsubscribe

    def off(self, topic: str, handler: Handler) -> None:
        handlers = self._handlers.get(topic)
        if handlers is not None and handler in handlers:
            handlers.remove(handler)

    def emit(self, topic: str, payload: Any) -> None:
        # Copy so handlers may unsubscribe while being notified
        for handler in list(self._handlers.get(topic, [])):
            try:
                handler(payload)
            except Exception:
                logger.exception("handler for %s failed", topic)

    def handler_count(self, topic: str) -> int:
        return len(self._handlers.get(topic, []))

    def emit_tasks_changed(self, event_id: EntityId, department_id: EntityId) -> None:
        self.emit(TASKS_CHANGED, Scope(event_id, department_id))

    def on_tasks_changed(
        self, scope: Callable[[], Scope | None], handler: Callable[[Scope], None]
    ) -> Unsubscribe:
        """Subscribe to task changes for the scope currently returned by ``scope``.

        ``scope`` is evaluated on every notification so that a subscriber
        following page state always compares against the latest selection.
        """

        def scoped_handler(payload: Scope) -> None:
            current = scope()
            if current is not None and payload == current:
                handler(payload)

        return self.on(TASKS_CHANGED, scoped_handler)
