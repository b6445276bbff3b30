"""CLI entry point for the learner progress platform."""

from __future__ import annotations

import asyncio
import json

import click

from .core.config import load_settings
from .core.enums import Mode


@click.group()
def main() -> None:
    """Learner progress and gamification events."""


@main.command()
@click.option("--config", default=None, help="Config file path")
def topology(config: str | None) -> None:
    """Print the exchange, queues, bindings and TTLs."""
    topo = load_settings(config_path=config).broker.topology()
    click.echo(f"exchange: {topo.exchange} (topic)")
    for q in topo.queues:
        click.echo(
            f"  {q.name:<32} binding={q.binding:<20} ttl={q.ttl_ms // 1000}s"
            f" durable={q.durable}"
        )


@main.command()
@click.option("--config", default=None, help="Config file path")
@click.option("--name", required=True, help="Learner name")
@click.option("--average", "averages", multiple=True, type=float, required=True,
              help="Course average (repeatable)")
@click.option("--initial-credits", default=0, type=int, help="Starting credit balance")
@click.option("--strategy", type=click.Choice(["standard", "premium"]), default=None,
              help="Credit strategy override")
@click.option("--redis", "use_redis", is_flag=True, help="Publish to Redis instead of in memory")
def complete(
    config: str | None,
    name: str,
    averages: tuple[float, ...],
    initial_credits: int,
    strategy: str | None,
    use_redis: bool,
) -> None:
    """Complete courses for a new learner and publish the events."""
    from pydantic import ValidationError as PydanticValidationError

    from .application.dto import CourseCompletionRequest, CreateLearnerRequest
    from .core.errors import ProgressError
    from .main import run_completions

    try:
        CreateLearnerRequest(name=name, initial_credits=initial_credits)
        for average in averages:
            CourseCompletionRequest(average=average)
    except PydanticValidationError as exc:
        raise click.BadParameter(str(exc)) from exc

    overrides: dict = {"mode": (Mode.REDIS if use_redis else Mode.MEMORY).value}
    if strategy:
        overrides["credits"] = {"strategy": strategy}

    try:
        view = asyncio.run(
            run_completions(
                name,
                list(averages),
                initial_credits=initial_credits,
                config_path=config,
                overrides=overrides,
            )
        )
    except ProgressError as exc:
        raise click.ClickException(f"[{exc.code.value}] {exc.message}") from exc
    click.echo(json.dumps(view, indent=2))


@main.command()
@click.option("--config", default=None, help="Config file path")
def consume(config: str | None) -> None:
    """Run the certificate, notification and analytics consumers on Redis."""
    from .main import run_consumer

    try:
        asyncio.run(run_consumer(config_path=config, overrides={"mode": Mode.REDIS.value}))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
