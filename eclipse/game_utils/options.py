"""
Declarative Options System for Eclipse games.

This module provides a way to define game options declaratively, so that
defaults, bounds and validation live next to the option itself.

Usage:
    @dataclass
    class MyGameOptions(GameOptions):
        total_rounds: int = option_field(
            IntOption(default=5, min_val=1, max_val=10,
                      label="Rounds per game"))
        ruleset: str = option_field(
            MenuOption(default="standard",
                       choices=["standard", "casual"],
                       label="Ruleset"))
        spectate: bool = option_field(
            BoolOption(default=False, label="All seats controlled by AI"))
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from mashumaro.mixins.json import DataClassJSONMixin


@dataclass
class OptionMeta:
    """Metadata for a game option."""

    default: Any
    label: str  # Human-readable description of the option

    def describe(self, value: Any) -> str:
        """Get the label with the current value interpolated."""
        return f"{self.label}: {value}"

    def validate_and_convert(self, value: str) -> tuple[bool, Any]:
        """Validate and convert input string to the option's type.

        Returns (success, converted_value). If success is False, converted_value
        is the original string.
        """
        raise NotImplementedError


@dataclass
class IntOption(OptionMeta):
    """Integer option with min/max validation."""

    min_val: int = 0
    max_val: int = 100

    def validate_and_convert(self, value: str) -> tuple[bool, Any]:
        try:
            int_val = int(value)
            int_val = max(self.min_val, min(self.max_val, int_val))
            return True, int_val
        except ValueError:
            return False, value


@dataclass
class MenuOption(OptionMeta):
    """Menu selection option."""

    choices: list[str] = field(default_factory=list)

    def validate_and_convert(self, value: str) -> tuple[bool, Any]:
        if value in self.choices:
            return True, value
        return False, value


@dataclass
class BoolOption(OptionMeta):
    """Boolean toggle option."""

    def describe(self, value: Any) -> str:
        return f"{self.label}: {'on' if value else 'off'}"

    def validate_and_convert(self, value: str) -> tuple[bool, Any]:
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True, True
        if lowered in ("false", "0", "no", "off"):
            return True, False
        return False, value


def option_field(meta: OptionMeta) -> Any:
    """Create a dataclass field with option metadata attached.

    Usage:
        total_rounds: int = option_field(IntOption(default=5, ...))
    """
    return field(default=meta.default, metadata={"option_meta": meta})


def get_all_option_metas(options_class: type) -> dict[str, OptionMeta]:
    """Get all OptionMeta instances from an options class."""
    result = {}
    for f in fields(options_class):
        meta = f.metadata.get("option_meta")
        if meta is not None:
            result[f.name] = meta
    return result


@dataclass
class GameOptions(DataClassJSONMixin):
    """Base class for game options with declarative option support.

    Subclasses should use option_field() for options that can be changed
    through set_option():

        @dataclass
        class MyOptions(GameOptions):
            total_rounds: int = option_field(IntOption(...))
            ruleset: str = option_field(MenuOption(...))

            # Regular fields without option_field work normally
            internal_state: int = 0
    """

    def get_option_metas(self) -> dict[str, OptionMeta]:
        """Get all option metadata for this options instance."""
        return get_all_option_metas(type(self))

    def set_option(self, option_name: str, value: str) -> str | None:
        """Validate and apply a raw option value. Returns error code or None."""
        meta = self.get_option_metas().get(option_name)
        if meta is None:
            return "unknown-option"

        success, converted = meta.validate_and_convert(value)
        if not success:
            return "invalid-option-value"

        setattr(self, option_name, converted)
        return None

    def describe(self) -> list[str]:
        """Get one line per declared option with its current value."""
        return [
            meta.describe(getattr(self, name))
            for name, meta in self.get_option_metas().items()
        ]
