"""Event type registry and wire codec.

A message is a flat ``{"_type": <class name>, "_data": <json>}`` mapping,
the same shape for the memory and Redis brokers.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from learner_progress.domain.events import CourseCompletedEvent

logger = logging.getLogger(__name__)

EVENT_TYPE_MAP: dict[str, type[BaseModel]] = {
    CourseCompletedEvent.__name__: CourseCompletedEvent,
}

# Bump when a schema changes in a backward-incompatible way.
SCHEMA_VERSIONS: dict[str, int] = {name: 1 for name in EVENT_TYPE_MAP}


def get_event_class(event_type_name: str) -> type[BaseModel] | None:
    """Look up event class by name."""
    return EVENT_TYPE_MAP.get(event_type_name)


def encode_event(event: BaseModel) -> dict[str, str]:
    """Serialise *event* into broker message fields."""
    return {
        "_type": type(event).__name__,
        "_data": event.model_dump_json(by_alias=True),
    }


def decode_event(fields: dict[str, str]) -> BaseModel | None:
    """Deserialise broker message fields.  Malformed input yields None."""
    event_type_name = fields.get("_type")
    event_data = fields.get("_data")

    if not event_type_name or not event_data:
        logger.warning("Malformed message: %s", fields)
        return None

    event_cls = get_event_class(event_type_name)
    if not event_cls:
        logger.warning("Unknown event type: %s", event_type_name)
        return None

    try:
        return event_cls.model_validate_json(event_data)
    except PydanticValidationError:
        logger.warning("Undecodable %s payload", event_type_name, exc_info=True)
        return None
