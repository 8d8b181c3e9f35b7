"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

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
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def require_env_var(name: str) -> str:
    """Return a required environment variable by name."""

    return require_env_vars([name])[name]


def first_env_var(*names: str) -> str:
    """Return the first non-blank variable among ``names``.

    Used where a setting has been renamed and the legacy name is still honoured.
    """

    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value
    missing_list = " or ".join(names)
    raise MissingConfigurationError(f"Missing configuration for: {missing_list}")
