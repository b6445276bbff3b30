"""Protocol interfaces for collaborators the core depends on.

Implementations can be swapped (memory/redis, fake/real) without
changing callers.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from learner_progress.bus.topology import Topology
    from learner_progress.domain.events import CourseCompletedEvent
    from learner_progress.domain.learner import Learner

MessageHandler = Callable[["CourseCompletedEvent"], Awaitable[None]]


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

@runtime_checkable
class ILearnerRepository(Protocol):
    """Load/save for the Learner aggregate.  Each call is atomic."""

    def load(self, learner_id: int) -> Learner:
        """Raise ``LearnerNotFoundError`` if absent."""
        ...

    def save(self, learner: Learner) -> Learner: ...

    def find_all(self) -> list[Learner]: ...


# ---------------------------------------------------------------------------
# Broker
# ---------------------------------------------------------------------------

@runtime_checkable
class IBroker(Protocol):
    """Topic exchange with durable queues."""

    @property
    def topology(self) -> Topology: ...

    async def publish(self, routing_key: str, event: CourseCompletedEvent) -> None:
        """Send one copy of *event* to every queue bound to *routing_key*.

        Raises ``PublishError`` on failure.
        """
        ...

    async def subscribe(self, queue: str, handler: MessageHandler) -> None: ...

    async def start(self) -> None: ...
    async def stop(self) -> None: ...


# ---------------------------------------------------------------------------
# Recommendation
# ---------------------------------------------------------------------------

@runtime_checkable
class ITextGenerator(Protocol):
    """Opaque language-model capability: prompt in, text out."""

    def generate(self, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# Consumer idempotency
# ---------------------------------------------------------------------------

@runtime_checkable
class IIdempotencyStore(Protocol):
    """Keys of side effects that already ran (or are running)."""

    async def contains(self, key: str) -> bool: ...

    async def add(self, key: str) -> bool:
        """Atomically claim *key*; ``False`` if already claimed."""
        ...

    async def remove(self, key: str) -> None: ...
