# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines `CheckPolicy`, the enum controlling how a subcommand reacts to excess
positional arguments or unexpected named arguments.

Example:
    CheckPolicy("warn")  → CheckPolicy.WARN
    CheckPolicy("ERROR") → CheckPolicy.ERROR (case-insensitive)
"""
from __future__ import annotations

from enum import Enum


class CheckPolicy(Enum):
    """
    Behavior when a command line does not match the declared schema.

    Members:
        ERROR: Fail the run with a user-facing error and usage instructions.
        WARN: Print a warning and continue.
        IGNORE: Do nothing.
    """

    ERROR = "error"
    WARN = "warn"
    IGNORE = "ignore"

    @classmethod
    def _missing_(cls, value: object) -> CheckPolicy:
        if not isinstance(value, str):
            raise ValueError(f"Invalid {cls.__name__}: {value!r}")
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Invalid {cls.__name__}: '{value}'. Must be one of: {valid}")

    def __str__(self) -> str:
        return self.value
