"""
Event Bus

Explicit publish/subscribe channel between the rate store and its listeners.

Two implementations:
- LocalEventBus: bounded in-process queue, drained by its owner
- CeleryEventBus: one Celery task per subscriber, executed by workers
"""

import queue
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Dict, List, Tuple

from celery import Celery

from app.config import EVENT_QUEUE_MAX_PENDING
from app.events.rate_change import RateChangeEvent
from app.exceptions import EventPublicationError
from app.utils.logger import create_logger

logger = create_logger(__name__)


class EventBus(ABC):
    """Abstract publish/subscribe interface."""

    @abstractmethod
    def publish(self, event_name: str, event: RateChangeEvent) -> None:
        """
        Hand an event to the bus without waiting for subscribers.

        Raises:
            EventPublicationError: If the bus cannot accept the event
        """
        pass

    @abstractmethod
    def subscribe(self, event_name: str, handler) -> None:
        pass


class LocalEventBus(EventBus):
    """
    In-process bus backed by a bounded queue.

    publish() only enqueues; subscribers run when drain() is called, so the
    publisher never executes listener code. A full queue is reported to the
    publisher instead of blocking it.
    """

    def __init__(self, max_pending: int = EVENT_QUEUE_MAX_PENDING):
        self._queue: "queue.Queue[Tuple[str, RateChangeEvent]]" = queue.Queue(maxsize=max_pending)
        self._handlers: Dict[str, List[Callable]] = defaultdict(list)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def subscribe(self, event_name: str, handler: Callable[[RateChangeEvent], object]) -> None:
        self._handlers[event_name].append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to '{event_name}'")

    def publish(self, event_name: str, event: RateChangeEvent) -> None:
        try:
            self._queue.put_nowait((event_name, event))
        except queue.Full as e:
            raise EventPublicationError(
                f"Event queue full ({self._queue.maxsize} pending), dropped '{event_name}'",
                errors={"event": "queueFull"},
            ) from e

    def drain(self) -> int:
        """
        Deliver every pending event to its subscribers.

        A failing handler is logged and does not stop delivery to the
        remaining handlers or events.

        Returns:
            int: Number of events delivered
        """
        delivered = 0
        while True:
            try:
                event_name, event = self._queue.get_nowait()
            except queue.Empty:
                break

            for handler in list(self._handlers.get(event_name, [])):
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Handler {getattr(handler, '__qualname__', handler)} failed for '{event_name}': {e}",
                        exc_info=True,
                    )

            delivered += 1
            self._queue.task_done()

        return delivered


class CeleryEventBus(EventBus):
    """Bus that fans an event out to Celery tasks, one task per subscriber."""

    def __init__(self, celery_app: Celery):
        self.celery = celery_app
        self._routes: Dict[str, List[str]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: str) -> None:
        """
        Route an event to a Celery task.

        Args:
            event_name: Event name (e.g., "rate.update")
            handler: Registered Celery task name
        """
        self._routes[event_name].append(handler)

    def publish(self, event_name: str, event: RateChangeEvent) -> None:
        payload = event.to_dict()
        for task_name in self._routes.get(event_name, []):
            try:
                self.celery.send_task(task_name, args=[payload])
            except Exception as e:
                raise EventPublicationError(
                    f"Failed to enqueue {task_name} for '{event_name}': {e}",
                    errors={"event": "brokerUnavailable"},
                ) from e

            logger.debug(f"Enqueued {task_name} for '{event_name}' (office {event.office.id})")
