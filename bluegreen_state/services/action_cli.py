from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import time
from typing import Callable

from botocore.exceptions import BotoCoreError

from bluegreen_state.core.config import Settings, get_settings
from bluegreen_state.domain.colors import list_actions
from bluegreen_state.domain.errors import StoreUnavailableError
from bluegreen_state.services.color_actions import ActionResult, run_action
from bluegreen_state.services.deployment_state import DeploymentStateRepository
from bluegreen_state.services.dynamodb_store import DynamoStateStore
from bluegreen_state.services.observability import configure_logging, emit_structured_log

COMPONENT = "bluegreen.cli"


def annotate(level: str, message: str) -> None:
    """Print a workflow command the host orchestrator turns into an annotation."""
    flattened = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::{level}::{flattened}", flush=True)


def write_outputs(outputs: dict[str, str], output_path: str) -> None:
    if not output_path:
        return
    lines = "".join(f"{name}={value}\n" for name, value in outputs.items())
    with Path(output_path).open("a", encoding="utf-8") as handle:
        handle.write(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read, initialize, set or toggle the active blue/green color")
    parser.add_argument("--action", default=None, help=f"One of: {', '.join(list_actions())}")
    parser.add_argument("--deployment-key", default=None)
    parser.add_argument("--color", default=None, help="Target color for set-active")
    parser.add_argument("--initial-color", default=None, help="Color written by init when no state exists")
    parser.add_argument("--table-name", default=None)
    parser.add_argument("--region", dest="aws_region", default=None)
    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        "action": args.action,
        "deployment_key": args.deployment_key,
        "color": args.color,
        "initial_color": args.initial_color,
        "table_name": args.table_name,
        "aws_region": args.aws_region,
    }
    update = {name: value for name, value in overrides.items() if value is not None}
    if not update:
        return settings
    return Settings.model_validate({**settings.model_dump(), **update})


def execute(
    settings: Settings,
    *,
    client=None,
    sleep: Callable[[float], None] = time.sleep,
) -> ActionResult:
    try:
        store = DynamoStateStore.from_settings(settings, client=client, sleep=sleep)
    except (BotoCoreError, ValueError) as exc:
        return ActionResult.failed(StoreUnavailableError(f"Failed to create DynamoDB client: {exc}"))

    repository = DeploymentStateRepository(store, settings=settings)
    return run_action(settings=settings, repository=repository)


def report(result: ActionResult, settings: Settings) -> int:
    if not result.ok:
        annotate("error", f"Action failed: {result.detail}")
        print(json.dumps(result.to_payload()))
        return 1

    if result.was_existing:
        annotate(
            "warning",
            f"Deployment {settings.deployment_key.strip()} already exists with active color: "
            f"{result.active_color.value}",
        )

    try:
        write_outputs(result.outputs(), settings.output_path)
    except OSError as exc:
        emit_structured_log(
            component=COMPONENT,
            event="outputs_write_failed",
            level=logging.ERROR,
            deployment_key=settings.deployment_key,
            run_id=settings.run_id,
            output_path=settings.output_path,
            error=str(exc),
        )
        annotate("error", f"Action failed: could not write outputs: {exc}")
        return 1

    print(json.dumps(result.to_payload()))
    return 0


def main(
    argv: list[str] | None = None,
    *,
    settings: Settings | None = None,
    client=None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    resolved = _apply_overrides(settings if settings is not None else get_settings(), args)

    emit_structured_log(
        component=COMPONENT,
        event="invocation_started",
        deployment_key=resolved.deployment_key,
        table_name=resolved.table_name,
        run_id=resolved.run_id,
        action=resolved.action,
        workflow=resolved.workflow,
    )
    result = execute(resolved, client=client, sleep=sleep)
    return report(result, resolved)


if __name__ == "__main__":
    raise SystemExit(main())
