"""make-async-function CLI.

Wires a bus and a controller, calls the bound function and dispatches
the outcome action, then prints how the call settled.

Usage:
    make-async-function run                                    # SAVE -> SAVE_SUCCESS
    make-async-function run --outcome reject --payload Bummer!
    make-async-function --log-level debug run --start FETCH --resolve FETCH_OK --reject FETCH_FAILED
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import click

from .actions import Action
from .bus import Bus
from .config import AsyncFunctionConfig, is_missing
from .controller import LifecycleController
from .errors import MakeAsyncFunctionError, RejectedError
from .settings import Settings

# Outcome options
OUTCOME_RESOLVE = "resolve"
OUTCOME_REJECT = "reject"


def parse_value(text: str | None) -> Any:
    """Decode JSON if possible, otherwise keep the raw string."""
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


async def simulate(
    config: AsyncFunctionConfig,
    arg: Any,
    outcome: str,
    payload: Any,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Call the bound function once and settle it with one action."""
    action_bus = Bus()
    dispatched: list[dict[str, Any]] = []
    action_bus.subscribe_all(lambda action: dispatched.append(action.model_dump(exclude_defaults=True)))

    outcome_type = config.resolve if outcome == OUTCOME_RESOLVE else config.reject
    if not isinstance(outcome_type, str) or is_missing(outcome_type):
        raise click.UsageError(f"--{outcome} must be a non-empty action type")

    with LifecycleController(action_bus, settings) as controller:
        async_function = controller.activate(config)
        future = async_function(arg)
        # Let the call be observed as pending before it settles
        await asyncio.sleep(0)

        action_bus.dispatch(Action(type=outcome_type, payload=payload))

        try:
            value = await future
            result: dict[str, Any] = {"status": "resolved", "value": value}
        except RejectedError as e:
            result = {"status": "rejected", "value": e.error}

    result["dispatched"] = dispatched
    return result


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Logging verbosity",
)
def main(log_level: str) -> None:
    """Awaitable functions settled by bus actions."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--start", default="SAVE", show_default=True, help="Action type dispatched by the call")
@click.option("--resolve", default="SAVE_SUCCESS", show_default=True, help="Action type that resolves the call")
@click.option("--reject", default="SAVE_ERROR", show_default=True, help="Action type that rejects the call")
@click.option("--arg", default=None, help="Call argument (JSON or string)")
@click.option(
    "--outcome",
    type=click.Choice([OUTCOME_RESOLVE, OUTCOME_REJECT]),
    default=OUTCOME_RESOLVE,
    show_default=True,
    help="Which action to dispatch after the call",
)
@click.option("--payload", default=None, help="Outcome action payload (JSON or string)")
@click.option("--strict", is_flag=True, help="Treat any config problem as an error")
def run(
    start: str,
    resolve: str,
    reject: str,
    arg: str | None,
    outcome: str,
    payload: str | None,
    strict: bool,
) -> None:
    """Call an async function once and print how it settled."""
    settings = Settings.from_env()
    if strict:
        settings = Settings(environment=settings.environment, strict=True)
    config = AsyncFunctionConfig(start=start, resolve=resolve, reject=reject)

    try:
        result = asyncio.run(simulate(config, parse_value(arg), outcome, parse_value(payload), settings))
    except MakeAsyncFunctionError as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
