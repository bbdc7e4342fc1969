"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        raise MissingConfigurationError(missing)

    return values


def _parse_number[T: (int, float)](name: str, parse: type[T], default: T, minimum: T) -> T:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = parse(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}", variable=name
        ) from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}", variable=name)
    return value


def env_int(name: str, *, default: int, minimum: int = 0) -> int:
    """Return an integer environment variable, or ``default`` when unset/blank."""

    return _parse_number(name, int, default, minimum)


def env_float(name: str, *, default: float, minimum: float = 0.0) -> float:
    """Return a float environment variable, or ``default`` when unset/blank."""

    return _parse_number(name, float, default, minimum)
