import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List

log = logging.getLogger(__name__)

UNAUTHORIZED = "auth:unauthorized"

Handler = Callable[..., Any]


class EventBus:
    """Minimal publish/subscribe channel shared by one browser session."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        with self._lock:
            self._handlers[topic].append(handler)

        def unsubscribe():
            with self._lock:
                if handler in self._handlers[topic]:
                    self._handlers[topic].remove(handler)

        return unsubscribe

    def publish(self, topic: str, **payload: Any) -> int:
        """Deliver to every subscriber in subscription order; returns the delivery count."""
        with self._lock:
            handlers = list(self._handlers.get(topic, ()))
        for handler in handlers:
            handler(**payload)
        log.debug(f"Published {topic} to {len(handlers)} subscriber(s)")
        return len(handlers)
