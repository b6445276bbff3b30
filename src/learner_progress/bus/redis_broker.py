"""Redis Streams topic broker.

Each declared queue is one Redis Stream (``<exchange>:<queue>``) with a
consumer group named after the queue.  ``publish`` resolves the binding
patterns locally and appends one entry per matching queue, trimming
entries older than the queue TTL with ``MINID``.  Consumers also skip
entries older than the TTL, since ``MINID`` trimming is approximate.

Delivery is acknowledged after the handler returns, and also after it
raises: there is no retry and no dead-letter stream at this layer.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from learner_progress.core.clock import IClock, WallClock
from learner_progress.core.enums import QueueOutcome
from learner_progress.core.errors import PublishError
from learner_progress.core.interfaces import MessageHandler
from learner_progress.observability import metrics

from .schemas import decode_event, encode_event
from .topology import QueueSpec, Topology

logger = logging.getLogger(__name__)


def entry_timestamp_ms(msg_id: str | bytes) -> int:
    """Milliseconds part of a stream entry id (``"<ms>-<seq>"``)."""
    if isinstance(msg_id, bytes):
        msg_id = msg_id.decode()
    return int(str(msg_id).split("-", 1)[0])


class RedisTopicBroker:
    """Production broker backed by Redis Streams."""

    def __init__(
        self,
        topology: Topology | None = None,
        redis_url: str = "redis://localhost:6379/0",
        block_ms: int = 1000,
        batch_size: int = 10,
        clock: IClock | None = None,
        client: aioredis.Redis | None = None,
    ) -> None:
        self._topology = topology or Topology.default()
        self._redis_url = redis_url
        self._redis: aioredis.Redis | None = client
        self._owns_client = client is None
        self._block_ms = block_ms
        self._batch_size = batch_size
        self._clock = clock or WallClock()
        self._subscriptions: list[tuple[QueueSpec, MessageHandler]] = []
        self._tasks: list[asyncio.Task] = []
        self._running = False

        # Observability
        self._error_counts: dict[str, int] = defaultdict(int)
        self._messages_processed: int = 0

    @property
    def topology(self) -> Topology:
        return self._topology

    def stream_key(self, queue: str) -> str:
        return f"{self._topology.exchange}:{queue}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Connect to Redis and start consumer loops."""
        if self._redis is None:
            self._redis = aioredis.from_url(self._redis_url, decode_responses=True)
        self._running = True

        for spec, handler in self._subscriptions:
            await self._launch(spec, handler)

    async def stop(self) -> None:
        """Stop consumer loops and close the Redis connection."""
        self._running = False
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        if self._redis is not None and self._owns_client:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Publish / Subscribe
    # ------------------------------------------------------------------

    async def publish(self, routing_key: str, event: Any) -> None:
        """Append *event* to every queue stream bound to *routing_key*.

        Raises:
            PublishError: broker not started, serialisation or Redis failure.
        """
        if self._redis is None:
            raise PublishError("RedisTopicBroker not started", routing_key=routing_key)

        try:
            fields = encode_event(event)
        except Exception as exc:
            raise PublishError(
                f"Cannot serialise {type(event).__name__}: {exc}",
                routing_key=routing_key,
                cause=exc,
            ) from exc
        fields["routing_key"] = routing_key

        now_ms = self._clock.now_ms()
        for spec in self._topology.queues_for(routing_key):
            try:
                await self._redis.xadd(
                    self.stream_key(spec.name),
                    fields,
                    minid=str(max(now_ms - spec.ttl_ms, 0)),
                    approximate=True,
                )
            except RedisError as exc:
                raise PublishError(
                    f"XADD to {spec.name} failed: {exc}",
                    routing_key=routing_key,
                    cause=exc,
                ) from exc

    async def subscribe(self, queue: str, handler: MessageHandler) -> None:
        """Register a handler for *queue*.

        Can be called before or after start().
        """
        spec = self._topology.queue(queue)
        self._subscriptions.append((spec, handler))
        if self._running and self._redis is not None:
            await self._launch(spec, handler)

    async def _launch(self, spec: QueueSpec, handler: MessageHandler) -> None:
        await self._ensure_group(spec.name)
        task = asyncio.create_task(
            self._consume_loop(spec, handler),
            name=f"consumer-{spec.name}",
        )
        self._tasks.append(task)

    # ------------------------------------------------------------------
    # Consumer loop
    # ------------------------------------------------------------------

    async def _consume_loop(self, spec: QueueSpec, handler: MessageHandler) -> None:
        assert self._redis is not None
        stream = self.stream_key(spec.name)
        consumer_name = f"{spec.name}-worker"

        while self._running:
            try:
                entries = await self._redis.xreadgroup(
                    groupname=spec.name,
                    consumername=consumer_name,
                    streams={stream: ">"},
                    count=self._batch_size,
                    block=self._block_ms,
                )
                if not entries:
                    continue

                for _stream, messages in entries:
                    for msg_id, fields in messages:
                        await self.process_message(spec, handler, msg_id, fields)

            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Consumer loop error for %s", spec.name)
                self._error_counts[spec.name] += 1
                await asyncio.sleep(1)

    async def process_message(
        self,
        spec: QueueSpec,
        handler: MessageHandler,
        msg_id: str,
        fields: dict[str, str],
    ) -> None:
        """Handle one stream entry, then ack it regardless of outcome."""
        assert self._redis is not None
        stream = self.stream_key(spec.name)

        try:
            if self._clock.now_ms() - entry_timestamp_ms(msg_id) > spec.ttl_ms:
                metrics.record_handler_outcome(spec.name, QueueOutcome.EXPIRED)
                logger.info("Dropped expired message %s on %s", msg_id, spec.name)
                return

            event = decode_event(fields)
            if event is None:
                self._error_counts[spec.name] += 1
                metrics.record_handler_outcome(spec.name, QueueOutcome.FAILED)
                return

            await handler(event)
            self._messages_processed += 1
            metrics.record_handler_outcome(spec.name, QueueOutcome.PROCESSED)

        except asyncio.CancelledError:
            raise
        except Exception:
            self._error_counts[spec.name] += 1
            metrics.record_handler_outcome(spec.name, QueueOutcome.FAILED)
            logger.exception(
                "Handler error on %s msg=%s routing_key=%s",
                spec.name,
                msg_id,
                fields.get("routing_key", ""),
            )
        finally:
            await self._redis.xack(stream, spec.name, msg_id)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_error_counts(self) -> dict[str, int]:
        return dict(self._error_counts)

    @property
    def messages_processed(self) -> int:
        return self._messages_processed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _ensure_group(self, queue: str) -> None:
        """Create consumer group, ignoring BUSYGROUP if it already exists."""
        assert self._redis is not None
        try:
            await self._redis.xgroup_create(
                self.stream_key(queue), queue, id="0", mkstream=True,
            )
        except aioredis.ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise
