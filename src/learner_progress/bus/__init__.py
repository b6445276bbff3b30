"""Topic-routed broker layer: topology, wire codec, memory and Redis brokers."""

from learner_progress.bus.broker import create_broker
from learner_progress.bus.memory_broker import MemoryTopicBroker
from learner_progress.bus.redis_broker import RedisTopicBroker
from learner_progress.bus.topology import QueueSpec, Topology, topic_matches

__all__ = [
    "MemoryTopicBroker",
    "QueueSpec",
    "RedisTopicBroker",
    "Topology",
    "create_broker",
    "topic_matches",
]
