"""
Volume event bus.

The orchestrator publishes volume:* events after releasing the volume lock;
the notification layer subscribes and broadcasts them to its own clients.
Handlers are registered per wire name, so two event classes sharing a name
reach the same subscribers.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Type

from volume_agent.core.events.domain_event import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class DomainEventBus:
    """
    Fans each published event out to its handlers concurrently.

    A handler that raises is logged; the remaining handlers still run and
    publish() itself never raises.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Register handler for every event of event_type.

        Subscribing the same handler twice is a no-op.
        """
        async with self._lock:
            handlers = self._subscribers.setdefault(event_type.event_name, [])
            if handler in handlers:
                return
            handlers.append(handler)
        logging.debug(f"Handler {handler.__name__} subscribed to {event_type.event_name}")

    async def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> bool:
        async with self._lock:
            handlers = self._subscribers.get(event_type.event_name, [])
            if handler not in handlers:
                return False
            handlers.remove(handler)
            return True

    async def publish(self, event: DomainEvent) -> int:
        """
        Deliver event to its subscribers.

        Returns:
            Number of handlers that raised
        """
        handlers = list(self._subscribers.get(event.event_name, ()))
        if not handlers:
            logging.debug(f"No subscribers for {event.event_name}")
            return 0

        logging.debug(f"Publishing {event.event_name} to {len(handlers)} handler(s)")
        delivered = await asyncio.gather(*(self._deliver(handler, event) for handler in handlers))
        return delivered.count(False)

    @staticmethod
    async def _deliver(handler: EventHandler, event: DomainEvent) -> bool:
        try:
            await handler(event)
        except Exception as e:
            logging.error(
                f"Unhandled exception in handler '{handler.__name__}' for event "
                f"'{event.event_name}': {e}",
                exc_info=True,
            )
            return False
        return True
