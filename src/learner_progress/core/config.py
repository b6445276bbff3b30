"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .enums import Mode, StrategyType

if TYPE_CHECKING:
    from learner_progress.bus.topology import Topology


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class BrokerConfig(BaseModel):
    exchange: str = "gamification.events"

    course_completed_queue: str = "gamification.course.completed"
    notification_queue: str = "gamification.notification"
    analytics_queue: str = "gamification.analytics"

    course_completed_binding: str = "course.completed"
    notification_binding: str = "notification.#"
    analytics_binding: str = "analytics.#"

    course_completed_ttl_ms: int = 86_400_000  # 24h
    notification_ttl_ms: int = 3_600_000       # 1h
    analytics_ttl_ms: int = 604_800_000        # 7d

    redis_url: str = "redis://localhost:6379/0"
    block_ms: int = 1000
    batch_size: int = 10

    # Skip side effects already done for a (handler, learner, course count).
    idempotent_consumers: bool = False
    idempotency_ttl_seconds: int = 604_800

    def topology(self) -> Topology:
        """Build the exchange/queue/binding layout described by this config."""
        from learner_progress.bus.topology import QueueSpec, Topology

        return Topology(
            exchange=self.exchange,
            queues=(
                QueueSpec(
                    name=self.course_completed_queue,
                    binding=self.course_completed_binding,
                    ttl_ms=self.course_completed_ttl_ms,
                ),
                QueueSpec(
                    name=self.notification_queue,
                    binding=self.notification_binding,
                    ttl_ms=self.notification_ttl_ms,
                ),
                QueueSpec(
                    name=self.analytics_queue,
                    binding=self.analytics_binding,
                    ttl_ms=self.analytics_ttl_ms,
                ),
            ),
        )


class CreditsConfig(BaseModel):
    strategy: StrategyType = StrategyType.STANDARD


class LLMConfig(BaseModel):
    base_url: str = "http://localhost:11434"
    model: str = "llama3"
    timeout_seconds: float = 60.0


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"
    metrics_port: int = 9090


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    mode: Mode = Mode.MEMORY

    broker: BrokerConfig = Field(default_factory=BrokerConfig)
    credits: CreditsConfig = Field(default_factory=CreditsConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "PROGRESS_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: if the file exists but cannot be parsed.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            from .errors import ConfigError

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(
                    f"Invalid config file {path}: {exc}", cause=exc
                ) from exc

    if overrides:
        data.update(overrides)

    return Settings(**data)
