"""
Event system for ledger notifications.

Provides a simple pub/sub mechanism for stake, distribution and claim events.
"""
from typing import Dict, List, Callable, Any, Tuple
import logging

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple event bus for ledger events.

    Events are delivered synchronously in the calling thread. Events raised
    inside an operation are queued with buffer() and delivered by flush()
    once the operation commits; discard() drops them on rollback.
    """

    def __init__(self):
        self.listeners: Dict[str, List[Callable]] = {}
        self._pending: List[Tuple[str, Dict[str, Any]]] = []

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: Event name (e.g., 'stake_changed', 'claim_settled')
            callback: Function to call when event is emitted
        """
        event_type = str(getattr(event_type, "value", event_type))
        if event_type not in self.listeners:
            self.listeners[event_type] = []

        self.listeners[event_type].append(callback)
        logger.debug(f"Subscribed to event: {event_type}")

    def unsubscribe(self, event_type: str, callback: Callable) -> None:
        event_type = str(getattr(event_type, "value", event_type))
        if event_type in self.listeners:
            try:
                self.listeners[event_type].remove(callback)
                logger.debug(f"Unsubscribed from event: {event_type}")
            except ValueError:
                logger.warning(f"Callback not found for event: {event_type}")

    def emit(self, event_type: str, **data: Any) -> None:
        """
        Emit an event to all subscribers.

        Args:
            event_type: Event name
            **data: Event data as keyword arguments
        """
        event_type = str(getattr(event_type, "value", event_type))
        listeners = self.listeners.get(event_type, [])

        if not listeners:
            logger.debug(f"No listeners for event: {event_type}")
            return

        logger.debug(f"Emitting event: {event_type} to {len(listeners)} listener(s)")

        for callback in list(listeners):
            try:
                callback(**data)
            except Exception as e:
                logger.error(f"Error in event callback for {event_type}: {e}", exc_info=True)

    def buffer(self, event_type: str, **data: Any) -> None:
        """Queue an event until the surrounding operation commits."""
        event_type = str(getattr(event_type, "value", event_type))
        self._pending.append((event_type, data))

    def flush(self) -> int:
        pending, self._pending = self._pending, []
        for event_type, data in pending:
            self.emit(event_type, **data)
        return len(pending)

    def discard(self) -> int:
        dropped = len(self._pending)
        self._pending = []
        if dropped:
            logger.debug(f"Discarded {dropped} buffered event(s)")
        return dropped

    def clear(self, event_type: str = None) -> None:
        """
        Clear all listeners for an event type, or all listeners if no type specified.

        Args:
            event_type: Event type to clear, or None to clear all
        """
        if event_type:
            event_type = str(getattr(event_type, "value", event_type))
            self.listeners.pop(event_type, None)
            logger.debug(f"Cleared listeners for event: {event_type}")
        else:
            self.listeners.clear()
            logger.debug("Cleared all event listeners")
