from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bluegreen_state.domain.colors import Color, validate_color

PARTITION_KEY = "deployment_key"


def normalize_metadata(metadata: dict[str, Any] | None) -> dict[str, str]:
    """Coerce metadata to a string mapping, dropping keys whose value is None."""
    return {str(key): str(value) for key, value in (metadata or {}).items() if value is not None}


@dataclass(frozen=True)
class DeploymentState:
    deployment_key: str
    active_color: Color
    last_updated: str
    metadata: dict[str, str] = field(default_factory=dict)

    def to_item(self) -> dict[str, Any]:
        return {
            PARTITION_KEY: self.deployment_key,
            "active_color": self.active_color.value,
            "last_updated": self.last_updated,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> DeploymentState:
        return cls(
            deployment_key=str(item[PARTITION_KEY]),
            active_color=validate_color(item.get("active_color")),
            last_updated=str(item.get("last_updated") or ""),
            metadata=normalize_metadata(item.get("metadata")),
        )
