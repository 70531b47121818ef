"""
Listener registry shared by the resolver and the failover client
"""
from typing import Any, Callable

from .types import EventType, FailoverDnsEvent, FailoverDnsEventListener


class EventEmitter:
    """Minimal synchronous event emitter"""

    def __init__(self) -> None:
        self._listeners: list[FailoverDnsEventListener] = []

    def on(self, listener: FailoverDnsEventListener) -> Callable[[], None]:
        """Subscribe to events; returns an unsubscribe function"""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return lambda: self.off(listener)

    def off(self, listener: FailoverDnsEventListener) -> None:
        """Unsubscribe from events"""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event_type: EventType, **data: Any) -> None:
        event = FailoverDnsEvent(type=event_type, data=data)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Ignore listener errors
                pass
