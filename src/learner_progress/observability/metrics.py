"""Prometheus metrics.

Publisher, broker and analytics counters for monitoring via Grafana.
"""

from __future__ import annotations

import threading

from prometheus_client import Counter, Histogram, start_http_server

from learner_progress.core.enums import QueueOutcome

# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------

EVENTS_PUBLISHED = Counter(
    "progress_events_published_total",
    "Broker sends that succeeded",
    ["routing_key"],
)

PUBLISH_FAILURES = Counter(
    "progress_publish_failures_total",
    "Broker sends that failed and were swallowed",
    ["routing_key"],
)

# ---------------------------------------------------------------------------
# Consuming
# ---------------------------------------------------------------------------

HANDLER_MESSAGES = Counter(
    "progress_handler_messages_total",
    "Messages taken off a queue, by outcome",
    ["queue", "outcome"],
)

# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

COURSES_COMPLETED = Counter(
    "progress_courses_completed_total",
    "Course completions seen by analytics",
    ["passed"],
)

COURSE_AVERAGE = Histogram(
    "progress_course_average",
    "Distribution of course averages",
    buckets=(2.0, 4.0, 6.0, 7.0, 8.0, 9.0, 10.0),
)

_server_lock = threading.Lock()
_server_started = False


def record_publish(routing_key: str, ok: bool) -> None:
    if ok:
        EVENTS_PUBLISHED.labels(routing_key=routing_key).inc()
    else:
        PUBLISH_FAILURES.labels(routing_key=routing_key).inc()


def record_handler_outcome(queue: str, outcome: QueueOutcome) -> None:
    HANDLER_MESSAGES.labels(queue=queue, outcome=outcome.value).inc()


def record_completion(course_average: float, passed: bool) -> None:
    COURSES_COMPLETED.labels(passed=str(passed).lower()).inc()
    COURSE_AVERAGE.observe(course_average)


def start_metrics_server(port: int = 9090) -> None:
    """Start the Prometheus HTTP endpoint once per process."""
    global _server_started
    with _server_lock:
        if _server_started:
            return
        start_http_server(port)
        _server_started = True
