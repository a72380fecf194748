from __future__ import annotations

from typing import Any

from bluegreen_state.core.config import Settings
from bluegreen_state.domain.colors import Color
from bluegreen_state.models.common import utcnow_iso
from bluegreen_state.models.deployment_state import DeploymentState, normalize_metadata
from bluegreen_state.services.dynamodb_store import DynamoStateStore
from bluegreen_state.services.observability import emit_structured_log

COMPONENT = "bluegreen.repository"


class DeploymentStateRepository:
    def __init__(self, store: DynamoStateStore, *, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    @property
    def table_name(self) -> str:
        return self.store.table_name

    def ensure_table(self) -> bool:
        if self.store.table_exists():
            emit_structured_log(
                component=COMPONENT,
                event="table_exists",
                table_name=self.table_name,
                run_id=self.settings.run_id,
            )
            return False

        emit_structured_log(
            component=COMPONENT,
            event="table_missing",
            table_name=self.table_name,
            run_id=self.settings.run_id,
        )
        self.store.create_table()
        self.store.wait_until_active()
        emit_structured_log(
            component=COMPONENT,
            event="table_created",
            table_name=self.table_name,
            run_id=self.settings.run_id,
        )
        return True

    def get(self, deployment_key: str) -> DeploymentState | None:
        item = self.store.get_item(deployment_key)
        if item is None:
            return None
        return DeploymentState.from_item(item)

    def put(
        self,
        deployment_key: str,
        color: Color,
        metadata: dict[str, Any] | None = None,
    ) -> DeploymentState:
        merged = normalize_metadata(metadata)
        merged.update(self.settings.provenance_metadata)
        state = DeploymentState(
            deployment_key=deployment_key,
            active_color=color,
            last_updated=utcnow_iso(),
            metadata=merged,
        )
        self.store.put_item(state.to_item())
        emit_structured_log(
            component=COMPONENT,
            event="state_written",
            deployment_key=deployment_key,
            table_name=self.table_name,
            run_id=self.settings.run_id,
            active_color=color.value,
        )
        return state
