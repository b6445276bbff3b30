"""Test EventPublisher fan-out and per-send failure isolation."""

import asyncio
import logging

from prometheus_client import REGISTRY

from learner_progress.bus.topology import ANALYTICS_KEY, COURSE_COMPLETED_KEY, NOTIFICATION_KEY
from learner_progress.messaging.publisher import DESTINATIONS, Destination, EventPublisher


def _published(key: str) -> float:
    return REGISTRY.get_sample_value(
        "progress_events_published_total", {"routing_key": key}
    ) or 0.0


def _failures(key: str) -> float:
    return REGISTRY.get_sample_value(
        "progress_publish_failures_total", {"routing_key": key}
    ) or 0.0


class TestFanOut:
    async def test_passed_event_sends_three(self, publisher, broker, make_event):
        delivered = await publisher.publish(make_event(passed=True))

        assert delivered == [COURSE_COMPLETED_KEY, NOTIFICATION_KEY, ANALYTICS_KEY]
        assert [key for key, _ in broker.get_history()] == delivered

    async def test_failed_event_skips_notification(self, publisher, broker, make_event):
        delivered = await publisher.publish(make_event(passed=False, course_average=6.0))

        assert delivered == [COURSE_COMPLETED_KEY, ANALYTICS_KEY]
        assert broker.get_history(NOTIFICATION_KEY) == []

    async def test_same_event_on_every_key(self, publisher, broker, make_event):
        event = make_event()
        await publisher.publish(event)
        assert {id(e) for _, e in broker.get_history()} == {id(event)}

    def test_declared_destinations(self):
        assert [d.routing_key for d in DESTINATIONS] == [
            COURSE_COMPLETED_KEY,
            NOTIFICATION_KEY,
            ANALYTICS_KEY,
        ]


class TestIsolation:
    async def test_notification_failure_does_not_block_analytics(
        self, publisher, broker, make_event
    ):
        broker.fail_on(NOTIFICATION_KEY)

        delivered = await publisher.publish(make_event())

        assert delivered == [COURSE_COMPLETED_KEY, ANALYTICS_KEY]
        assert len(broker.get_history(ANALYTICS_KEY)) == 1

    async def test_primary_failure_is_isolated(self, publisher, broker, make_event):
        broker.fail_on(COURSE_COMPLETED_KEY)

        delivered = await publisher.publish(make_event())

        assert delivered == [NOTIFICATION_KEY, ANALYTICS_KEY]

    async def test_total_outage_never_raises(self, publisher, broker, make_event):
        for key in (COURSE_COMPLETED_KEY, NOTIFICATION_KEY, ANALYTICS_KEY):
            broker.fail_on(key)

        assert await publisher.publish(make_event()) == []

    async def test_failure_is_logged(self, publisher, broker, make_event, caplog):
        broker.fail_on(ANALYTICS_KEY)
        with caplog.at_level(logging.WARNING, logger="learner_progress.messaging.publisher"):
            await publisher.publish(make_event(learner_id=42))

        messages = [r.getMessage() for r in caplog.records]
        assert any(
            "Send failed" in m and ANALYTICS_KEY in m and "42" in m for m in messages
        )

    async def test_slow_broker_times_out(self, make_event):
        class SlowBroker:
            topology = None

            def __init__(self):
                self.sent = []

            async def publish(self, routing_key, event):
                if routing_key == COURSE_COMPLETED_KEY:
                    await asyncio.sleep(10)
                self.sent.append(routing_key)

        slow = SlowBroker()
        publisher = EventPublisher(slow, send_timeout=0.01)

        delivered = await publisher.publish(make_event())

        assert delivered == [NOTIFICATION_KEY, ANALYTICS_KEY]
        assert slow.sent == [NOTIFICATION_KEY, ANALYTICS_KEY]


class TestMetrics:
    async def test_success_and_failure_counters(self, publisher, broker, make_event):
        ok_before = _published(COURSE_COMPLETED_KEY)
        fail_before = _failures(NOTIFICATION_KEY)
        broker.fail_on(NOTIFICATION_KEY)

        await publisher.publish(make_event())

        assert _published(COURSE_COMPLETED_KEY) == ok_before + 1
        assert _failures(NOTIFICATION_KEY) == fail_before + 1


class TestCustomDestinations:
    async def test_custom_table(self, broker, make_event):
        publisher = EventPublisher(
            broker,
            destinations=(
                Destination("analytics.high", lambda e: e.course_average >= 9.0),
                Destination(ANALYTICS_KEY),
            ),
        )

        assert await publisher.publish(make_event(course_average=9.5)) == [
            "analytics.high",
            ANALYTICS_KEY,
        ]
        assert await publisher.publish(make_event(course_average=8.0)) == [ANALYTICS_KEY]


class TestConsumerDecoupling:
    async def test_slow_handler_does_not_fail_send(self, broker, make_event):
        handled = []

        async def slow(event):
            await asyncio.sleep(0.2)
            handled.append(event)

        await broker.subscribe("gamification.course.completed", slow)
        publisher = EventPublisher(broker, send_timeout=0.05)

        delivered = await publisher.publish(make_event())

        assert delivered == [COURSE_COMPLETED_KEY, NOTIFICATION_KEY, ANALYTICS_KEY]
        await broker.drain()
        assert len(handled) == 1
        assert broker.pending("gamification.course.completed") == 0

    async def test_failing_handlers_do_not_reach_publisher(self, broker, make_event):
        async def bad(event):
            raise RuntimeError("side effect down")

        for queue in broker.topology.queue_names:
            await broker.subscribe(queue, bad)

        delivered = await EventPublisher(broker).publish(
            make_event(passed=False, course_average=5.0)
        )
        await broker.drain()

        assert delivered == [COURSE_COMPLETED_KEY, ANALYTICS_KEY]
        assert broker.get_error_counts() == {
            "gamification.course.completed": 1,
            "gamification.analytics": 1,
        }
