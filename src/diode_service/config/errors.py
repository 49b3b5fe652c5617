"""Errors raised while loading service settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ConfigurationError(RuntimeError):
    """A setting is present but unusable; ``setting`` names the variable when known."""

    def __init__(self, message: str, *, setting: str | None = None) -> None:
        super().__init__(message)
        self.setting = setting


class MissingConfigurationError(ConfigurationError):
    """One or more required variables are unset or blank."""

    def __init__(self, missing: Sequence[str]) -> None:
        names = tuple(sorted(missing))
        super().__init__(f"Missing configuration for: {', '.join(names)}")
        self.missing = names
