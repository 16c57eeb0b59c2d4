"""
Event System Module

Publish/subscribe dispatcher for replay events. The processor publishes what
happened to each transaction; subscribers decide how to surface it (log
lines, counters, nothing at all).
"""

from enum import Enum
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from collections import Counter
import logging


class ReplayEvent(Enum):
    """Events that can occur while replaying a transaction stream"""

    # Transaction events
    TRANSACTION_APPLIED = "transaction.applied"
    TRANSACTION_REJECTED = "transaction.rejected"

    # Account events
    ACCOUNT_OPENED = "account.opened"
    ACCOUNT_LOCKED = "account.locked"


@dataclass
class EventPayload:
    """Payload for replay events"""
    event_type: ReplayEvent
    entity_type: str
    entity_id: int
    data: Dict[str, Any] = field(default_factory=dict)
    sequence: int = 0  # Position of the triggering transaction in the stream

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'data': self.data,
            'sequence': self.sequence
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventPayload':
        """Create from dictionary"""
        return cls(
            event_type=ReplayEvent(data['event_type']),
            entity_type=data['entity_type'],
            entity_id=data['entity_id'],
            data=data['data'],
            sequence=data.get('sequence', 0)
        )


class EventDispatcher:
    """Central event dispatcher, publish/subscribe pattern"""

    def __init__(self):
        self._handlers: Dict[ReplayEvent, List[Callable]] = {}
        self._global_handlers: List[Callable] = []  # catch-all handlers
        self.logger = logging.getLogger("ledger_replay.events")

    def subscribe(self, event_type: ReplayEvent, handler: Callable) -> None:
        """Subscribe to a specific event type"""
        self._handlers.setdefault(event_type, []).append(handler)
        self.logger.debug(f"Subscribed handler {getattr(handler, '__name__', repr(handler))} to {event_type.value}")

    def subscribe_all(self, handler: Callable) -> None:
        """Subscribe to ALL events"""
        self._global_handlers.append(handler)
        self.logger.debug(f"Subscribed global handler {getattr(handler, '__name__', repr(handler))}")

    def unsubscribe(self, event_type: ReplayEvent, handler: Callable) -> None:
        """Unsubscribe from a specific event type"""
        try:
            self._handlers.get(event_type, []).remove(handler)
        except ValueError:
            self.logger.warning(f"Handler {getattr(handler, '__name__', repr(handler))} was not subscribed to {event_type.value}")

    def publish(self, event: EventPayload) -> None:
        """Publish event to all subscribers"""
        self.logger.debug(f"Publishing event {event.event_type.value} for {event.entity_type}:{event.entity_id}")

        for handler in self._handlers.get(event.event_type, []) + self._global_handlers:
            try:
                handler(event)
            except Exception as e:
                # Log but don't break the replay
                self.logger.error(f"Error in event handler {getattr(handler, '__name__', repr(handler))} for {event.event_type.value}: {e}")

    def clear(self) -> None:
        """Clear all handlers"""
        self._handlers.clear()
        self._global_handlers.clear()

    def get_handler_count(self, event_type: Optional[ReplayEvent] = None) -> int:
        """Get count of handlers for a specific event type or all"""
        if event_type:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values()) + len(self._global_handlers)


class ProcessingStats:
    """Counts applied and rejected transactions, rejections broken down by reason"""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.rejections_by_reason: Counter = Counter()

    def attach(self, dispatcher: EventDispatcher) -> 'ProcessingStats':
        dispatcher.subscribe(ReplayEvent.TRANSACTION_APPLIED, self.on_applied)
        dispatcher.subscribe(ReplayEvent.TRANSACTION_REJECTED, self.on_rejected)
        return self

    def on_applied(self, event: EventPayload) -> None:
        self.applied += 1

    def on_rejected(self, event: EventPayload) -> None:
        self.rejected += 1
        self.rejections_by_reason[event.data.get('reason')] += 1

    @property
    def processed(self) -> int:
        return self.applied + self.rejected

    def to_dict(self) -> Dict[str, Any]:
        return {
            'processed': self.processed,
            'applied': self.applied,
            'rejected': self.rejected,
            'rejections_by_reason': dict(self.rejections_by_reason)
        }
