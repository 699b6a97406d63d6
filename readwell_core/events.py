"""
Event channels - batched, single-threaded notification delivery

A host publishes one payload per logical event batch (a list of mutation
records, a list of nodes that entered the viewport, a settings edit).
Handlers run synchronously on the publishing thread, in subscription
order. Cancelling a subscription unregisters it; nothing is interrupted.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Sequence, TypeVar

from .dom.node import Node

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class MutationRecord:
    """Nodes attached and detached by one host mutation"""
    added: List[Node] = field(default_factory=list)
    removed: List[Node] = field(default_factory=list)


class Subscription:
    def __init__(self, channel: 'EventChannel', handler: Callable[[Any], None]):
        self.channel = channel
        self.handler = handler
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self.channel._unsubscribe(self)


class EventChannel(Generic[T]):
    def __init__(self, name: str):
        self.name = name
        self._subscriptions: List[Subscription] = []

    def subscribe(self, handler: Callable[[T], None]) -> Subscription:
        subscription = Subscription(self, handler)
        self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, payload: T) -> None:
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.handler(payload)
            except Exception as e:
                logger.error(f"Handler on channel {self.name!r} failed: {e}", exc_info=True)


class MutationChannel(EventChannel[Sequence[MutationRecord]]):
    def __init__(self):
        super().__init__("mutations")

    def notify(self, *records: MutationRecord) -> None:
        self.publish(list(records))
