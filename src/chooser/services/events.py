"""Explicit event subscriptions for controller notifications."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from chooser.models.events import ChooserEvent

logger = logging.getLogger(__name__)

Listener = Callable[[ChooserEvent, Any], None]


class EventBus:
    """Delivers notifications synchronously, in emit order."""

    def __init__(self) -> None:
        self._listeners: dict[ChooserEvent, list[Listener]] = defaultdict(list)

    def subscribe(self, event: ChooserEvent, listener: Listener) -> Callable[[], None]:
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return unsubscribe

    def emit(self, event: ChooserEvent, payload: Any = None) -> None:
        logger.debug("emit %s %r", event, payload)
        for listener in list(self._listeners[event]):
            listener(event, payload)
