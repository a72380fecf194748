"""Persisted record shapes for blue/green deployment state."""

from bluegreen_state.models.deployment_state import DeploymentState, normalize_metadata

__all__ = [
    "DeploymentState",
    "normalize_metadata",
]
