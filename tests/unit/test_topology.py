"""Test topic pattern matching and the default topology."""

import pytest

from learner_progress.bus.topology import (
    ANALYTICS_KEY,
    COURSE_COMPLETED_KEY,
    NOTIFICATION_KEY,
    QueueSpec,
    Topology,
    topic_matches,
)


class TestTopicMatches:
    @pytest.mark.parametrize(
        "pattern, key, expected",
        [
            ("course.completed", "course.completed", True),
            ("course.completed", "course.completed.extra", False),
            ("course.completed", "course", False),
            ("notification.#", "notification.course.completed", True),
            ("notification.#", "notification", True),
            ("notification.#", "analytics.gamification", False),
            ("analytics.#", "analytics.gamification", True),
            ("*.completed", "course.completed", True),
            ("*.completed", "completed", False),
            ("#", "anything.at.all", True),
            ("a.#.z", "a.z", True),
            ("a.#.z", "a.b.c.z", True),
            ("a.#.z", "a.b.c", False),
            ("a.*.z", "a.b.z", True),
            ("a.*.z", "a.b.c.z", False),
        ],
    )
    def test_patterns(self, pattern, key, expected):
        assert topic_matches(pattern, key) is expected


class TestDefaultTopology:
    def test_exchange_and_queues(self, topology):
        assert topology.exchange == "gamification.events"
        assert topology.queue_names == [
            "gamification.course.completed",
            "gamification.notification",
            "gamification.analytics",
        ]

    def test_ttls(self, topology):
        ttl = {q.name: q.ttl_ms for q in topology.queues}
        assert ttl["gamification.course.completed"] == 86_400_000
        assert ttl["gamification.notification"] == 3_600_000
        assert ttl["gamification.analytics"] == 604_800_000

    def test_all_queues_durable(self, topology):
        assert all(q.durable for q in topology.queues)

    @pytest.mark.parametrize(
        "key, queue",
        [
            (COURSE_COMPLETED_KEY, "gamification.course.completed"),
            (NOTIFICATION_KEY, "gamification.notification"),
            (ANALYTICS_KEY, "gamification.analytics"),
        ],
    )
    def test_each_publisher_key_reaches_exactly_one_queue(self, topology, key, queue):
        assert [q.name for q in topology.queues_for(key)] == [queue]

    def test_unknown_key_reaches_nothing(self, topology):
        assert topology.queues_for("billing.invoice") == []

    def test_queue_lookup(self, topology):
        assert topology.queue("gamification.analytics").binding == "analytics.#"
        with pytest.raises(KeyError):
            topology.queue("missing")

    def test_overlapping_bindings_fan_out(self):
        topo = Topology(
            exchange="x",
            queues=(QueueSpec("all", "#", 1000), QueueSpec("courses", "course.*", 1000)),
        )
        assert [q.name for q in topo.queues_for("course.completed")] == ["all", "courses"]
