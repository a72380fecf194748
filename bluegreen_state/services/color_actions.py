from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable

from bluegreen_state.core.config import Settings
from bluegreen_state.domain.colors import Action, Color, complement, parse_action, validate_color
from bluegreen_state.domain.errors import ErrorKind, MissingInputError, StateNotFoundError, StateToggleError
from bluegreen_state.models.common import utcnow_iso
from bluegreen_state.services.deployment_state import DeploymentStateRepository
from bluegreen_state.services.observability import emit_structured_log

COMPONENT = "bluegreen.actions"


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    action: Action | None = None
    active_color: Color | None = None
    inactive_color: Color | None = None
    previous_color: Color | None = None
    table_created: bool | None = None
    was_existing: bool | None = None
    error_kind: ErrorKind | None = None
    detail: str | None = None

    @classmethod
    def failed(cls, error: StateToggleError, action: Action | None = None) -> ActionResult:
        return cls(ok=False, action=action, error_kind=error.kind, detail=str(error))

    def outputs(self) -> dict[str, str]:
        """Named string outputs for the host orchestrator; empty on failure."""
        if not self.ok or self.active_color is None or self.inactive_color is None:
            return {}
        values = {
            "active-color": self.active_color.value,
            "inactive-color": self.inactive_color.value,
        }
        if self.action == Action.INIT:
            values["table-created"] = "true" if self.table_created else "false"
        if self.action in {Action.SET_ACTIVE, Action.TOGGLE}:
            values["previous-color"] = self.previous_color.value if self.previous_color else ""
        return values

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "ok" if self.ok else "failed",
            "action": self.action.value if self.action else None,
            "active_color": self.active_color.value if self.active_color else None,
            "inactive_color": self.inactive_color.value if self.inactive_color else None,
            "previous_color": self.previous_color.value if self.previous_color else None,
            "table_created": self.table_created,
            "was_existing": self.was_existing,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "detail": self.detail,
        }


def _require_state(repository: DeploymentStateRepository, deployment_key: str):
    state = repository.get(deployment_key)
    if state is None:
        raise StateNotFoundError(deployment_key)
    return state


def initialize(
    repository: DeploymentStateRepository,
    *,
    deployment_key: str,
    initial_color: str | None = None,
) -> ActionResult:
    color = validate_color(initial_color or Color.BLUE.value)
    table_created = repository.ensure_table()

    existing = repository.get(deployment_key)
    if existing is not None:
        emit_structured_log(
            component=COMPONENT,
            event="init_state_exists",
            level=logging.WARNING,
            deployment_key=deployment_key,
            table_name=repository.table_name,
            active_color=existing.active_color.value,
        )
        return ActionResult(
            ok=True,
            action=Action.INIT,
            active_color=existing.active_color,
            inactive_color=complement(existing.active_color),
            table_created=table_created,
            was_existing=True,
        )

    repository.put(
        deployment_key,
        color,
        {
            "action": Action.INIT.value,
            "initialized_at": utcnow_iso(),
            "initial_color": color.value,
        },
    )
    return ActionResult(
        ok=True,
        action=Action.INIT,
        active_color=color,
        inactive_color=complement(color),
        table_created=table_created,
        was_existing=False,
    )


def get_active(repository: DeploymentStateRepository, *, deployment_key: str) -> ActionResult:
    repository.ensure_table()
    state = _require_state(repository, deployment_key)
    return ActionResult(
        ok=True,
        action=Action.GET_ACTIVE,
        active_color=state.active_color,
        inactive_color=complement(state.active_color),
    )


def get_inactive(repository: DeploymentStateRepository, *, deployment_key: str) -> ActionResult:
    active = get_active(repository, deployment_key=deployment_key)
    return ActionResult(
        ok=True,
        action=Action.GET_INACTIVE,
        active_color=active.active_color,
        inactive_color=active.inactive_color,
    )


def set_active(
    repository: DeploymentStateRepository,
    *,
    deployment_key: str,
    color: str | None,
) -> ActionResult:
    if not color or not color.strip():
        raise MissingInputError("color", Action.SET_ACTIVE.value)
    target = validate_color(color)
    repository.ensure_table()

    current = repository.get(deployment_key)
    previous = current.active_color if current is not None else None
    repository.put(
        deployment_key,
        target,
        {
            "action": Action.SET_ACTIVE.value,
            "previous_color": previous.value if previous else None,
        },
    )
    return ActionResult(
        ok=True,
        action=Action.SET_ACTIVE,
        active_color=target,
        inactive_color=complement(target),
        previous_color=previous,
    )


def toggle(repository: DeploymentStateRepository, *, deployment_key: str) -> ActionResult:
    repository.ensure_table()
    current = _require_state(repository, deployment_key)

    previous = current.active_color
    target = complement(previous)
    repository.put(
        deployment_key,
        target,
        {
            "action": Action.TOGGLE.value,
            "previous_color": previous.value,
        },
    )
    return ActionResult(
        ok=True,
        action=Action.TOGGLE,
        active_color=target,
        inactive_color=previous,
        previous_color=previous,
    )


_HANDLERS: dict[Action, Callable[[DeploymentStateRepository, Settings, str], ActionResult]] = {
    Action.INIT: lambda repo, settings, key: initialize(
        repo,
        deployment_key=key,
        initial_color=settings.initial_color,
    ),
    Action.GET_ACTIVE: lambda repo, settings, key: get_active(repo, deployment_key=key),
    Action.SET_ACTIVE: lambda repo, settings, key: set_active(repo, deployment_key=key, color=settings.color),
    Action.GET_INACTIVE: lambda repo, settings, key: get_inactive(repo, deployment_key=key),
    Action.TOGGLE: lambda repo, settings, key: toggle(repo, deployment_key=key),
}


def run_action(*, settings: Settings, repository: DeploymentStateRepository) -> ActionResult:
    action: Action | None = None
    deployment_key = settings.deployment_key.strip()
    try:
        action = parse_action(settings.action)
        if not deployment_key:
            raise MissingInputError("deployment-key", action.value)

        emit_structured_log(
            component=COMPONENT,
            event="action_started",
            deployment_key=deployment_key,
            table_name=repository.table_name,
            run_id=settings.run_id,
            action=action.value,
        )
        result = _HANDLERS[action](repository, settings, deployment_key)
    except StateToggleError as exc:
        emit_structured_log(
            component=COMPONENT,
            event="action_failed",
            level=logging.ERROR,
            deployment_key=deployment_key or None,
            table_name=repository.table_name,
            run_id=settings.run_id,
            action=action.value if action else settings.action,
            error_kind=exc.kind.value,
            detail=str(exc),
        )
        return ActionResult.failed(exc, action)

    emit_structured_log(
        component=COMPONENT,
        event="action_completed",
        deployment_key=deployment_key,
        table_name=repository.table_name,
        run_id=settings.run_id,
        **result.to_payload(),
    )
    return result
