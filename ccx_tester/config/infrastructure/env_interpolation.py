"""Recursive ${ENV_VAR} / ${ENV_VAR:-default} interpolation for raw settings data."""

import os
import re
from collections.abc import Callable
from typing import TypeAlias

_ENV_VAR_PATTERN = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}"
)

RawValue: TypeAlias = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def collect_missing_vars(data: RawValue) -> list[str]:
    """
    Return the names of every referenced env var that is unset and has no
    inline default, in first-seen order.
    """
    missing: list[str] = []

    def _record(text: str) -> str:
        for match in _ENV_VAR_PATTERN.finditer(text):
            name = match.group("name")
            if (
                match.group("default") is None
                and name not in os.environ
                and name not in missing
            ):
                missing.append(name)
        return text

    _walk(data, _record)
    return missing


def interpolate(data: RawValue) -> RawValue:
    """
    Return a copy of data with every ${ENV_VAR} reference substituted.

    Call `collect_missing_vars` first; an unset variable without a default
    raises KeyError here.
    """
    return _walk(data, lambda text: _ENV_VAR_PATTERN.sub(_substitute, text))


def _substitute(match: re.Match[str]) -> str:
    name = match.group("name")
    default = match.group("default")
    if default is not None:
        return os.environ.get(name, default)
    return os.environ[name]


def _walk(data: RawValue, on_string: Callable[[str], str]) -> RawValue:
    if isinstance(data, str):
        return on_string(data)
    if isinstance(data, list):
        return [_walk(item, on_string) for item in data]
    if isinstance(data, dict):
        return {key: _walk(value, on_string) for key, value in data.items()}
    return data
