from __future__ import annotations

from enum import Enum

from bluegreen_state.domain.errors import InvalidColorError, MissingInputError, UnknownActionError


class Color(str, Enum):
    BLUE = "blue"
    GREEN = "green"


class Action(str, Enum):
    INIT = "init"
    GET_ACTIVE = "get-active"
    SET_ACTIVE = "set-active"
    GET_INACTIVE = "get-inactive"
    TOGGLE = "toggle"


_COMPLEMENTS: dict[Color, Color] = {
    Color.BLUE: Color.GREEN,
    Color.GREEN: Color.BLUE,
}


def validate_color(value: str | None) -> Color:
    if not isinstance(value, str):
        raise InvalidColorError(value)
    try:
        return Color(value.strip().lower())
    except ValueError as exc:
        raise InvalidColorError(value) from exc


def complement(color: Color) -> Color:
    return _COMPLEMENTS[color]


def list_actions() -> list[str]:
    return [action.value for action in Action]


def parse_action(value: str | None) -> Action:
    normalized = (value or "").strip().lower()
    if not normalized:
        raise MissingInputError("action")
    try:
        return Action(normalized)
    except ValueError as exc:
        raise UnknownActionError(normalized, list_actions()) from exc
