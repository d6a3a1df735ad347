# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""command.py

Defines the `Subcommand` class for clidispatch, along with the argument schema it
owns (`ArgOptions`) and the resolved options handed to its handler (`CommandOptions`).

A Subcommand is built once, when it is registered with an `Application`. At that
point its argument declarations are normalized:

- named arguments get a placeholder description, the command-level aliases that
  target them, and `optional=True` when they carry a default
- positional arguments get `optional=True` when they carry a default, and the list
  is checked so that no required positional follows an optional one
- every alias is folded into a single alias → canonical name table

Any problem found here is a configuration error, raised immediately to the
integrator.

At dispatch time `Subcommand.run()` re-tokenizes the command line with the
command's valueless names, enforces the schema (count checks, defaults, required
arguments, alias folding, unexpected arguments), and calls the handler.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from rich.text import Text

from clidispatch.console import error_console
from clidispatch.exceptions import InvalidHandlerError, crash, fail, invalid_config
from clidispatch.logger import logger
from clidispatch.parser.argument import ArgBuilder, NamedArgument, PositionalArgument
from clidispatch.parser.check_policy import CheckPolicy
from clidispatch.parser.tokenizer import parse_args
from clidispatch.utils import Unset, UnsetType

if TYPE_CHECKING:
    from clidispatch.application import Application

NamedArgValue = str | bool | None | UnsetType


@dataclass(frozen=True)
class CommandOptions:
    """
    Fully resolved arguments passed to a command handler.

    Attributes:
        command_name (str): Name of the subcommand that was run.
        positional_args (list[str | None]): Positional values in declared order.
            Omitted optional positionals are `None`. Excess values are kept at the end.
        named_args (dict[str, NamedArgValue]): Named values keyed by canonical name.
            Valueless arguments are bools, omitted optional arguments are `Unset`,
            and arguments passed without a value are `None`.
        unparsed_args (tuple[str, ...]): Every token passed to the subcommand, not
            including the subcommand name.
        runtime_args (tuple[str, str]): The interpreter and script path that
            started the application.
    """

    command_name: str
    positional_args: list[str | None]
    named_args: dict[str, NamedArgValue]
    unparsed_args: tuple[str, ...]
    runtime_args: tuple[str, str]


class ArgOptions(BaseModel):
    """
    The arguments a subcommand accepts.

    Attributes:
        named_args (dict[str, NamedArgument]): Named arguments by canonical name.
            `ArgBuilder`s and plain mappings are accepted as well.
        aliases (dict[str, str]): Alias → canonical name for named arguments.
        positional_args (list[PositionalArgument]): Positional arguments in order.
        positional_arg_count_check (CheckPolicy): What to do when more positional
            arguments are passed than declared. Defaults to `ignore`.
        unexpected_named_arg_check (CheckPolicy): What to do when an undeclared
            named argument is passed. Defaults to `error`.
        allow_help_named_arg (bool): Whether `app command --help` is treated as
            `app help command`. Defaults to True.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    named_args: dict[str, NamedArgument] = Field(default_factory=dict)
    aliases: dict[str, str] = Field(default_factory=dict)
    positional_args: list[PositionalArgument] = Field(default_factory=list)
    positional_arg_count_check: CheckPolicy = CheckPolicy.IGNORE
    unexpected_named_arg_check: CheckPolicy = CheckPolicy.ERROR
    allow_help_named_arg: bool = True

    @field_validator("named_args", mode="before")
    @classmethod
    def _build_named_args(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                name: spec.build() if isinstance(spec, ArgBuilder) else spec
                for name, spec in value.items()
            }
        return value

    @field_validator(
        "positional_arg_count_check", "unexpected_named_arg_check", mode="before"
    )
    @classmethod
    def _coerce_policy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return CheckPolicy(value)
        return value

    def valueless_names(self) -> list[str]:
        """Return the canonical names and aliases of every valueless argument."""
        names: list[str] = []
        for name, spec in self.named_args.items():
            if spec.valueless:
                names.extend(spec.aliases)
                names.append(name)
        return names


class Subcommand(BaseModel):
    """
    Represents one subcommand of an application.

    Attributes:
        name (str): Name used to invoke the subcommand.
        handler (Callable): Called with `(CommandOptions, Application)`. May return
            None, an int exit code, or an awaitable resolving to either.
        description (str | None): Shown in help output.
        arg_options (ArgOptions): The normalized argument schema.
        default_command (bool): Whether this subcommand runs when no subcommand
            name is given.
        subcategory_app (Application | None): The nested application, if this
            subcommand is a category.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    handler: Any
    description: str | None = None
    arg_options: ArgOptions = Field(default_factory=ArgOptions)
    default_command: bool = False
    subcategory_app: Any = None

    @field_validator("handler")
    @classmethod
    def _validate_handler(cls, handler: Any) -> Callable[..., Any]:
        if not callable(handler):
            invalid_config(f"handler {handler!r} is not callable", InvalidHandlerError)
        try:
            signature = inspect.signature(handler)
        except (TypeError, ValueError):
            return handler
        try:
            signature.bind(None, None)
        except TypeError:
            invalid_config(
                f"handler {handler!r} must accept (options, application)",
                InvalidHandlerError,
            )
        return handler

    @model_validator(mode="after")
    def _normalize_arg_options(self) -> Subcommand:
        options = self.arg_options

        named_args: dict[str, NamedArgument] = {}
        for name, spec in options.named_args.items():
            command_level = tuple(
                alias
                for alias, target in options.aliases.items()
                if target == name and alias not in spec.aliases
            )
            named_args[name] = spec.model_copy(
                update={
                    "description": spec.description or "No description provided",
                    "aliases": spec.aliases + command_level,
                    "optional": spec.optional or spec.default is not None,
                }
            )

        aliases = dict(options.aliases)
        for name, spec in named_args.items():
            for alias in spec.aliases:
                aliases[alias] = name

        positional_args: list[PositionalArgument] = []
        optional_started = False
        for index, positional in enumerate(options.positional_args):
            if positional.default is not None:
                if "optional" in positional.model_fields_set:
                    invalid_config(
                        f"in subcommand {self.name}: positional argument {index} has a "
                        "default value, therefore it is optional, but \"optional\" was "
                        "specified again. Please delete the redundant property."
                    )
                positional = PositionalArgument.model_construct(
                    _fields_set=positional.model_fields_set,
                    **{**positional.model_dump(), "optional": True},
                )
            if optional_started and not positional.optional:
                invalid_config(
                    f"in subcommand {self.name}: Required positional arguments, or ones "
                    "with a default value, cannot follow optional ones."
                )
            if positional.optional:
                optional_started = True
            positional_args.append(positional)

        self.arg_options = options.model_copy(
            update={
                "named_args": named_args,
                "aliases": aliases,
                "positional_args": positional_args,
            }
        )
        return self

    def usage(self) -> str:
        """Return the argument part of this subcommand's usage line."""
        fragments = [positional.usage() for positional in self.arg_options.positional_args]
        fragments.extend(
            spec.usage(name) for name, spec in self.arg_options.named_args.items()
        )
        return " ".join(fragments)

    def _report(self, policy: CheckPolicy, message: str, usage_hint: str) -> None:
        if policy == CheckPolicy.ERROR:
            fail(f"{message}\n{usage_hint}")
        elif policy == CheckPolicy.WARN:
            logger.warning("[%s] %s", self.name, message)
            error_console.print(Text(f"Warning: {message}", style="warning"), soft_wrap=True)

    def run(
        self, args: list[str], runtime_args: tuple[str, str], application: Application
    ) -> Any:
        """
        Run this subcommand.

        Do not call directly. Call the application's `run()` method instead, which
        prepares the application and picks the subcommand.

        Returns:
            Whatever the handler returns, without interpreting it.

        Raises:
            ApplicationError: If the command line does not satisfy the schema.
            InternalError: If the application was not prepared by `run()`.
        """
        if application.source_directory is None:
            crash(
                "application.source_directory is None. "
                "Don't call subcommand.run() directly"
            )
        if application.get_only_command() is not None:
            usage_hint = f"for usage instructions, run {application.name} --help"
        else:
            usage_hint = f"for usage instructions, run {application.name} help {self.name}"

        arg_options = self.arg_options
        parsed = parse_args(args, arg_options.valueless_names())
        named_args: dict[str, NamedArgValue] = dict(parsed.named_args)
        positional_args: list[str | None] = list(parsed.positional_args)

        declared_count = len(arg_options.positional_args)
        if len(positional_args) > declared_count:
            self._report(
                arg_options.positional_arg_count_check,
                f"this subcommand expects at most {declared_count} positional "
                f"arguments, but {len(positional_args)} arguments were passed",
                usage_hint,
            )

        supplied_count = len(positional_args)
        for index, positional in enumerate(arg_options.positional_args):
            if index < supplied_count:
                continue
            if positional.default is not None:
                positional_args.append(positional.default)
            elif positional.optional:
                positional_args.append(None)
            else:
                required_count = sum(
                    1 for spec in arg_options.positional_args if not spec.optional
                )
                fail(
                    f'Missing required positional argument "{positional.name}"\n'
                    f"this subcommand expects at least {required_count} positional "
                    f"arguments, but {supplied_count} arguments were passed\n"
                    f"{usage_hint}"
                )

        for name, value in list(named_args.items()):
            canonical = arg_options.aliases.get(name)
            if canonical:
                if named_args.get(canonical) is None:
                    named_args[canonical] = value
                del named_args[name]

        if arg_options.unexpected_named_arg_check != CheckPolicy.IGNORE:
            for name, value in list(named_args.items()):
                if (
                    name in arg_options.named_args
                    or name in arg_options.aliases
                    or name in ("help", "?")
                ):
                    continue
                suffix = "" if value is None else f"={value}"
                self._report(
                    arg_options.unexpected_named_arg_check,
                    f"Unexpected argument --{name}{suffix}",
                    usage_hint,
                )

        for name, spec in arg_options.named_args.items():
            present = name in named_args
            if named_args.get(name) is None and not (spec.valueless and present):
                if spec.default is not None:
                    named_args[name] = spec.default
                elif spec.optional:
                    if not spec.valueless:
                        named_args[name] = None if present else Unset
                else:
                    value_hint = "" if spec.valueless else " <value>"
                    fail(
                        f'No value specified for required named argument "{name}".\n'
                        f"To specify it, run the command with --{name}{value_hint}\n"
                        f"{usage_hint}"
                    )
            if spec.valueless:
                named_args[name] = named_args.get(name, Unset) is None

        return self.handler(
            CommandOptions(
                command_name=self.name,
                positional_args=positional_args,
                named_args=named_args,
                unparsed_args=tuple(args),
                runtime_args=runtime_args,
            ),
            application,
        )
