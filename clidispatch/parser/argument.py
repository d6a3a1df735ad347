# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the argument declarations a subcommand is built from.

- `NamedArgument`: a flag passed as `--name value`, `--name=value`, `-n value`
  or, when valueless, just `--name`.
- `PositionalArgument`: a value identified by its position after the subcommand name.
- `ArgBuilder` / `arg()`: an immutable fluent builder producing `NamedArgument`s.
  Every builder method returns a new builder, so partially-configured builders can
  be shared safely.

Example:
    named_args = {
        "output": arg().description("Where to write").default("out.txt"),
        "force": arg().description("Overwrite existing files").valueless(),
        "target": arg().aliases("t").required(),
    }

Declarations are normalized (placeholders filled, aliases merged, `optional` forced
where a default exists) when the owning `Subcommand` is built.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NamedArgument(BaseModel):
    """
    Declaration of a named argument.

    Attributes:
        description (str | None): Help text shown by the help command.
        optional (bool): Whether the argument may be omitted. Named arguments are
            required unless marked optional, valueless, or given a default.
        valueless (bool): Whether the argument never takes a value. Valueless
            arguments always resolve to a bool.
        default (str | None): Value used when the argument is omitted or left blank.
        aliases (tuple[str, ...]): Alternative names, e.g. a single-letter short form.
    """

    model_config = ConfigDict(frozen=True)

    description: str | None = None
    optional: bool = False
    valueless: bool = False
    default: str | None = None
    aliases: tuple[str, ...] = Field(default_factory=tuple)

    def usage(self, name: str) -> str:
        """Return the usage fragment for this argument, e.g. `[--name <name>]`."""
        fragment = f"--{name}" if self.valueless else f"--{name} <{name}>"
        return f"[{fragment}]" if self.optional else fragment


class PositionalArgument(BaseModel):
    """
    Declaration of a positional argument.

    Attributes:
        name (str): Name shown in usage and error messages.
        description (str | None): Help text shown by the help command.
        optional (bool): Whether the argument may be omitted. Must not be given
            together with `default`, which already implies it.
        default (str | None): Value used when the argument is omitted.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    optional: bool = False
    default: str | None = None

    def usage(self) -> str:
        """Return the usage fragment for this argument, e.g. `[<name>]`."""
        return f"[<{self.name}>]" if self.optional else f"<{self.name}>"


class ArgBuilder:
    """Fluent, immutable builder for `NamedArgument`."""

    __slots__ = ("_spec",)

    def __init__(self, spec: NamedArgument | None = None) -> None:
        self._spec = spec or NamedArgument()

    def _with(self, **changes: Any) -> ArgBuilder:
        return ArgBuilder(self._spec.model_copy(update=changes))

    def description(self, description: str) -> ArgBuilder:
        """Set the help text for this named argument."""
        return self._with(description=description)

    def optional(self) -> ArgBuilder:
        """
        Mark this named argument as optional.

        The handler receives a string if one was passed, `None` if the argument was
        passed without a value, and `Unset` if it was omitted.
        """
        return self._with(optional=True)

    def required(self) -> ArgBuilder:
        """
        Mark this named argument as required.

        On a valueless argument this forces the user to pass the flag, which is
        useful for confirmations like `--yes-really`. The handler then always
        receives `True`.
        """
        return self._with(optional=False)

    def valueless(self) -> ArgBuilder:
        """
        Mark this named argument as valueless.

        `app --verbose value1` is then parsed as `app value1 --verbose`, not as
        `app --verbose=value1`. The handler receives `True` if the flag was passed
        and `False` otherwise.
        """
        return self._with(valueless=True, optional=True)

    def default(self, value: str) -> ArgBuilder:
        """Set a default value for this named argument. Also marks it as optional."""
        return self._with(default=value, optional=True)

    def aliases(self, *aliases: str) -> ArgBuilder:
        """Set alternative names for this named argument."""
        return self._with(aliases=tuple(aliases))

    def build(self) -> NamedArgument:
        return self._spec

    def __repr__(self) -> str:
        return f"ArgBuilder({self._spec!r})"


def arg() -> ArgBuilder:
    """Start declaring a named argument. Named arguments are required by default."""
    return ArgBuilder()
