"""
Message Bus

In-process fan-out of committed domain events (BookingCreated,
PaymentAcknowledged, ...) to subscribers such as the notification
tasks. Delivery is best effort: the booking or payment that raised the
event is already committed, so a subscriber failure is logged and the
next subscriber still runs.
"""

from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Subscribe ``handler`` to ``event_type``; subscribing twice is a no-op."""
        subscribers = self._event_handlers[event_type]
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug(f"{handler.__name__} subscribed to {event_type.__name__}")

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._event_handlers.get(event_type, ()))

    def publish_events(self, events: Iterable[DomainEvent]):
        for event in events:
            name = type(event).__name__
            subscribers = self.handlers_for(type(event))
            if not subscribers:
                logger.debug(f"Nobody listens to {name}")
                continue

            logger.info(f"Dispatching {name} {event.event_id} to {len(subscribers)} handlers")
            logger.debug(f"{name} payload: {event.to_dict()}")
            for handler in subscribers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(f"{handler.__name__} failed on {name} {event.event_id}")


message_bus = MessageBus()
