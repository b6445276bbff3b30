"""Enumerations used across the learner progress platform."""

from enum import Enum


class Mode(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"


class PerformanceLevel(str, Enum):
    """Course score classification, best first."""

    EXCELLENT = "excellent"          # >= 9.0
    VERY_GOOD = "very_good"          # >= 8.0
    GOOD = "good"                    # > 7.0
    AVERAGE = "average"              # >= 6.0
    BELOW_AVERAGE = "below_average"


class StrategyType(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AVERAGE_OUT_OF_RANGE = "AVERAGE_OUT_OF_RANGE"
    NEGATIVE_CREDITS = "NEGATIVE_CREDITS"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    INVALID_LEARNER = "INVALID_LEARNER"
    NOT_FOUND = "NOT_FOUND"
    PUBLISH_FAILED = "PUBLISH_FAILED"
    CONSUMER_FAILED = "CONSUMER_FAILED"
    CONFIG_ERROR = "CONFIG_ERROR"

    # Enrollment
    COURSE_FULL = "COURSE_FULL"
    PREREQUISITE_NOT_MET = "PREREQUISITE_NOT_MET"
    ALREADY_ENROLLED = "ALREADY_ENROLLED"


class QueueOutcome(str, Enum):
    PROCESSED = "processed"
    FAILED = "failed"
    EXPIRED = "expired"
    DUPLICATE = "duplicate"
