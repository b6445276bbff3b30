"""Custom exception hierarchy for the learner progress platform.

Every error carries a stable ``code``, a human ``message`` and an
optional ``cause``.  Domain errors (validation, not-found) reach the
caller unchanged; infrastructure errors (publish, consumer) are caught
at their own boundary.
"""

from __future__ import annotations

from .enums import ErrorCode


class ProgressError(Exception):
    """Base exception for all learner progress errors."""

    default_code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code) if code is not None else self.default_code
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}


# --- Validation ---
class ValidationError(ProgressError, ValueError):
    """Input or state violates a domain invariant."""

    default_code = ErrorCode.VALIDATION_ERROR


class AverageOutOfRangeError(ValidationError):
    """Course average outside [0.0, 10.0]."""

    default_code = ErrorCode.AVERAGE_OUT_OF_RANGE


class NegativeCreditsError(ValidationError):
    """Credit amount below zero."""

    default_code = ErrorCode.NEGATIVE_CREDITS


class InsufficientCreditsError(ValidationError):
    """Deduction larger than the available balance."""

    default_code = ErrorCode.INSUFFICIENT_CREDITS

    def __init__(self, available: int, required: int) -> None:
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient credits: has {available}, needs {required}"
        )


class InvalidLearnerError(ValidationError):
    """Learner attributes are invalid (e.g. empty name)."""

    default_code = ErrorCode.INVALID_LEARNER


# --- Lookup ---
class NotFoundError(ProgressError, LookupError):
    """Requested entity does not exist."""

    default_code = ErrorCode.NOT_FOUND


class LearnerNotFoundError(NotFoundError):
    def __init__(self, learner_id: int) -> None:
        self.learner_id = learner_id
        super().__init__(f"Learner not found: {learner_id}")


class StrategyNotFoundError(NotFoundError):
    def __init__(self, strategy_type: object) -> None:
        self.strategy_type = strategy_type
        super().__init__(f"Unknown credit strategy: {strategy_type!r}")


# --- Enrollment ---
class EnrollmentError(ProgressError):
    """Enrollment rule violated.  ``code`` is one of the enrollment codes."""

    default_code = ErrorCode.COURSE_FULL


# --- Infrastructure ---
class PublishError(ProgressError):
    """Broker send failed.  Never escapes ``EventPublisher``."""

    default_code = ErrorCode.PUBLISH_FAILED

    def __init__(
        self,
        message: str,
        routing_key: str = "",
        cause: BaseException | None = None,
    ) -> None:
        self.routing_key = routing_key
        super().__init__(message, cause=cause)


class ConsumerError(ProgressError):
    """Handler side effect failed.  Owned by the broker consume loop."""

    default_code = ErrorCode.CONSUMER_FAILED


class ConfigError(ProgressError):
    """Invalid or missing configuration."""

    default_code = ErrorCode.CONFIG_ERROR
