"""Course-completion fan-out: publisher and the three independent consumers."""

from learner_progress.messaging.consumer import GamificationEventConsumer
from learner_progress.messaging.publisher import DESTINATIONS, Destination, EventPublisher

__all__ = ["DESTINATIONS", "Destination", "EventPublisher", "GamificationEventConsumer"]
