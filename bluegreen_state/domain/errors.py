from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    MISSING_INPUT = "MISSING_INPUT"
    INVALID_COLOR = "INVALID_COLOR"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    STATE_NOT_FOUND = "STATE_NOT_FOUND"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    TABLE_NOT_READY = "TABLE_NOT_READY"


class StateToggleError(Exception):
    """Base class for every failure an action can report."""

    kind: ErrorKind = ErrorKind.STORE_UNAVAILABLE


class MissingInputError(StateToggleError):
    kind = ErrorKind.MISSING_INPUT

    def __init__(self, input_name: str, action: str | None = None) -> None:
        self.input_name = input_name
        if action:
            message = f"{input_name} input is required for {action} action"
        else:
            message = f"{input_name} input is required"
        super().__init__(message)


class InvalidColorError(StateToggleError):
    kind = ErrorKind.INVALID_COLOR

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__('Color must be either "blue" or "green"')


class UnknownActionError(StateToggleError):
    kind = ErrorKind.UNKNOWN_ACTION

    def __init__(self, action: str, valid_actions: list[str]) -> None:
        self.action = action
        super().__init__(f"Unknown action: {action}. Valid actions are: {', '.join(valid_actions)}")


class StateNotFoundError(StateToggleError):
    kind = ErrorKind.STATE_NOT_FOUND

    def __init__(self, deployment_key: str) -> None:
        self.deployment_key = deployment_key
        super().__init__(f"No deployment state found for key: {deployment_key}. Run 'init' action first.")


class StoreUnavailableError(StateToggleError):
    kind = ErrorKind.STORE_UNAVAILABLE


class TableNotReadyError(StateToggleError):
    kind = ErrorKind.TABLE_NOT_READY

    def __init__(self, table_name: str, attempts: int) -> None:
        self.table_name = table_name
        self.attempts = attempts
        super().__init__(f"Table {table_name} did not become active after {attempts} attempts")
