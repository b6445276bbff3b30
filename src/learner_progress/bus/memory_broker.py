"""In-memory topic broker for tests and single-process runs.

No external dependencies.  Publishing routes a message into every queue
whose binding matches the routing key and returns; delivery to the
queue's subscribers runs on a separate task per queue, in publish
order.  A slow or failing handler never holds up the publisher.
Delivery goes through the wire codec so consumers never share an
object with the publisher.

Semantics kept from a real topic broker:
- messages older than the queue TTL are dropped, not delivered
- competing subscribers on one queue take turns (round-robin)
- every delivery is acknowledged, whether the handler succeeds or not
- a message stays queued until its handler finishes, so a cancelled
  delivery is redelivered on the next ``drain``
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from learner_progress.core.clock import IClock, WallClock
from learner_progress.core.enums import QueueOutcome
from learner_progress.core.errors import PublishError
from learner_progress.core.interfaces import MessageHandler
from learner_progress.observability import metrics

from .schemas import decode_event, encode_event
from .topology import Topology

logger = logging.getLogger(__name__)


@dataclass
class QueuedMessage:
    routing_key: str
    fields: dict[str, str]
    enqueued_ms: int


@dataclass
class _QueueState:
    messages: deque[QueuedMessage] = field(default_factory=deque)
    handlers: list[MessageHandler] = field(default_factory=list)
    turn: Any = None  # round-robin cycle over handlers
    pump: asyncio.Task | None = None


class MemoryTopicBroker:
    """In-memory topic exchange.  Safe within a single asyncio event loop."""

    def __init__(
        self,
        topology: Topology | None = None,
        clock: IClock | None = None,
        on_handler_error: Callable[[str, str, Exception], None] | None = None,
    ) -> None:
        topology = topology or Topology.default()
        self._topology = Topology(exchange=topology.exchange, queues=())
        self._clock = clock or WallClock()
        self._on_handler_error = on_handler_error
        self._queues: dict[str, _QueueState] = {}
        self._history: list[tuple[str, Any]] = []
        self._forced_failures: dict[str, Exception] = {}
        self._running = False

        # Observability
        self._error_counts: dict[str, int] = defaultdict(int)
        self._expired_counts: dict[str, int] = defaultdict(int)
        self._messages_processed: int = 0

        self.declare(topology)

    @property
    def topology(self) -> Topology:
        return self._topology

    def declare(self, topology: Topology) -> None:
        """Declare the queues of *topology* on this exchange.

        Idempotent: redeclaring an identical queue is a no-op.

        Raises:
            ValueError: other exchange, or a queue name redeclared with a
                different binding or TTL.
        """
        if topology.exchange != self._topology.exchange:
            raise ValueError(
                f"Broker exchange is {self._topology.exchange!r}, "
                f"cannot declare queues for {topology.exchange!r}"
            )
        added = []
        for spec in topology.queues:
            if spec.name in self._queues:
                existing = self._topology.queue(spec.name)
                if existing != spec:
                    raise ValueError(
                        f"Queue {spec.name} already declared as {existing}, got {spec}"
                    )
                continue
            self._queues[spec.name] = _QueueState()
            added.append(spec)
        if added:
            self._topology = Topology(
                exchange=self._topology.exchange,
                queues=self._topology.queues + tuple(added),
            )

    async def start(self) -> None:
        self._running = True

    async def stop(self) -> None:
        """Finish outstanding deliveries, then stop."""
        await self.drain()
        self._running = False

    # ------------------------------------------------------------------
    # Publish / Subscribe
    # ------------------------------------------------------------------

    async def publish(self, routing_key: str, event: Any) -> None:
        """Route *event* to every matching queue and schedule delivery.

        Returns once the message is queued; handlers run afterwards.

        Raises:
            PublishError: on a forced failure or a serialisation error.
        """
        forced = self._forced_failures.get(routing_key)
        if forced is not None:
            raise PublishError(
                f"Send to {self._topology.exchange}/{routing_key} failed: {forced}",
                routing_key=routing_key,
                cause=forced,
            )
        try:
            fields = encode_event(event)
        except Exception as exc:
            raise PublishError(
                f"Cannot serialise {type(event).__name__}: {exc}",
                routing_key=routing_key,
                cause=exc,
            ) from exc

        self._history.append((routing_key, event))
        now_ms = self._clock.now_ms()

        for spec in self._topology.queues_for(routing_key):
            self._queues[spec.name].messages.append(
                QueuedMessage(routing_key, fields, now_ms)
            )
            self._schedule(spec.name)

    async def subscribe(self, queue: str, handler: MessageHandler) -> None:
        """Attach a consumer to a declared queue.  Backlog waits for ``drain``."""
        if queue not in self._queues:
            raise KeyError(f"Queue not declared: {queue}")
        state = self._queues[queue]
        state.handlers.append(handler)
        state.turn = itertools.cycle(list(state.handlers))

    async def drain(self, queue: str | None = None) -> None:
        """Deliver queued messages to subscribers and wait until done.

        Covers both the backlog left before a subscription and deliveries
        already scheduled by ``publish``.  All queues by default.
        """
        names = [queue] if queue is not None else list(self._queues)
        for name in names:
            pump = self._schedule(name)
            if pump is not None:
                await pump

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _schedule(self, queue: str) -> asyncio.Task | None:
        """Start the queue's delivery task unless one is already running."""
        state = self._queues[queue]
        if state.pump is not None and not state.pump.done():
            return state.pump
        if not state.handlers or not state.messages:
            return None
        state.pump = asyncio.create_task(self._deliver(queue), name=f"deliver-{queue}")
        return state.pump

    async def _deliver(self, queue: str) -> None:
        state = self._queues[queue]
        ttl_ms = self._topology.queue(queue).ttl_ms

        while state.messages:
            message = state.messages[0]
            if self._clock.now_ms() - message.enqueued_ms > ttl_ms:
                state.messages.popleft()
                self._expired_counts[queue] += 1
                metrics.record_handler_outcome(queue, QueueOutcome.EXPIRED)
                logger.info(
                    "Dropped expired message on %s (routing_key=%s)",
                    queue,
                    message.routing_key,
                )
                continue

            event = decode_event(message.fields)
            if event is None:
                state.messages.popleft()
                self._error_counts[queue] += 1
                metrics.record_handler_outcome(queue, QueueOutcome.FAILED)
                continue

            handler = next(state.turn)
            try:
                await handler(event)
                self._messages_processed += 1
                metrics.record_handler_outcome(queue, QueueOutcome.PROCESSED)
            except asyncio.CancelledError:
                logger.warning(
                    "Delivery on %s cancelled; message stays queued", queue
                )
                raise
            except Exception as exc:
                self._error_counts[queue] += 1
                metrics.record_handler_outcome(queue, QueueOutcome.FAILED)
                logger.exception(
                    "Handler error on queue=%s routing_key=%s",
                    queue,
                    message.routing_key,
                )
                if self._on_handler_error is not None:
                    try:
                        self._on_handler_error(queue, message.routing_key, exc)
                    except Exception:
                        logger.warning(
                            "on_handler_error callback failed", exc_info=True,
                        )
            state.messages.popleft()

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_error_counts(self) -> dict[str, int]:
        """Return per-queue handler error counts."""
        return dict(self._error_counts)

    def get_expired_counts(self) -> dict[str, int]:
        return dict(self._expired_counts)

    @property
    def messages_processed(self) -> int:
        return self._messages_processed

    def pending(self, queue: str) -> int:
        """Messages waiting in *queue*."""
        return len(self._queues[queue].messages)

    # ------------------------------------------------------------------
    # Testing helpers
    # ------------------------------------------------------------------

    def get_history(self, routing_key: str | None = None) -> list[tuple[str, Any]]:
        """Successful sends, optionally filtered by routing key. For testing."""
        if routing_key is None:
            return list(self._history)
        return [(k, e) for k, e in self._history if k == routing_key]

    def clear_history(self) -> None:
        self._history.clear()

    def fail_on(self, routing_key: str, exc: Exception | None = None) -> None:
        """Make every send on *routing_key* fail. For testing."""
        self._forced_failures[routing_key] = exc or ConnectionError("broker unreachable")

    def clear_failures(self) -> None:
        self._forced_failures.clear()
