"""Topic exchange topology: one exchange, durable queues, pattern bindings.

Routing follows topic-exchange rules.  Routing keys and binding
patterns are dot-separated words; in a pattern ``*`` matches exactly
one word and ``#`` matches zero or more words.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

# Routing keys used by the publisher.
COURSE_COMPLETED_KEY = "course.completed"
NOTIFICATION_KEY = "notification.course.completed"
ANALYTICS_KEY = "analytics.gamification"

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS


@lru_cache(maxsize=256)
def topic_matches(pattern: str, routing_key: str) -> bool:
    """Return True if *routing_key* matches the binding *pattern*."""
    return _match(tuple(pattern.split(".")), tuple(routing_key.split(".")))


def _match(pattern: tuple[str, ...], words: tuple[str, ...]) -> bool:
    if not pattern:
        return not words
    head, rest = pattern[0], pattern[1:]
    if head == "#":
        # Zero words, or swallow one and try again.
        return _match(rest, words) or (bool(words) and _match(pattern, words[1:]))
    if not words:
        return False
    if head == "*" or head == words[0]:
        return _match(rest, words[1:])
    return False


@dataclass(frozen=True)
class QueueSpec:
    name: str
    binding: str
    ttl_ms: int
    durable: bool = True

    def accepts(self, routing_key: str) -> bool:
        return topic_matches(self.binding, routing_key)


@dataclass(frozen=True)
class Topology:
    exchange: str
    queues: tuple[QueueSpec, ...]

    @classmethod
    def default(cls) -> Topology:
        return cls(
            exchange="gamification.events",
            queues=(
                QueueSpec("gamification.course.completed", COURSE_COMPLETED_KEY, DAY_MS),
                QueueSpec("gamification.notification", "notification.#", HOUR_MS),
                QueueSpec("gamification.analytics", "analytics.#", 7 * DAY_MS),
            ),
        )

    def queues_for(self, routing_key: str) -> list[QueueSpec]:
        """Every queue whose binding matches *routing_key*, in declaration order."""
        return [q for q in self.queues if q.accepts(routing_key)]

    def queue(self, name: str) -> QueueSpec:
        for q in self.queues:
            if q.name == name:
                return q
        raise KeyError(f"Queue not declared: {name}")

    @property
    def queue_names(self) -> list[str]:
        return [q.name for q in self.queues]
