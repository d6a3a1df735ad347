# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Main class for constructing and running clidispatch applications.

An `Application` owns a registry of subcommands and aliases, and `run()` turns a
raw argument vector into exactly one subcommand invocation:

1. A provisional tokenize pass (without any valueless knowledge) finds the first
   positional token.
2. That token selects a registered subcommand or alias, otherwise the default
   subcommand runs (the built-in `help` command unless another was marked default).
3. `--help` / `--?` reroutes to the help command when the selected subcommand
   allows it.
4. The subcommand re-tokenizes with its own valueless names, resolves its schema,
   and calls its handler. The handler's return value becomes the exit code.

User-facing failures are printed as `Error: <message>` on stderr. Any other error
is reported as an unhandled runtime error with a rich traceback. Pass
`RunOptions(throw_on_error=True)` to get the raw exception instead, which is what
tests usually want.

Categories are nested applications registered as a subcommand whose handler
simply runs the nested application with the remaining tokens.

Example:
    app = Application("deploy", "Deploys things.")

    @app.command("push", "Push a build.").aliases("p").args(
        named_args={"force": arg().valueless().aliases("f")},
        positional_args=[{"name": "target"}],
    ).impl
    def push(options, application):
        ...

    app.main()
"""
from __future__ import annotations

import asyncio
import inspect
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Mapping, NoReturn, Sequence

from rich.table import Table
from rich.text import Text

from clidispatch.command import ArgOptions, CommandOptions, Subcommand
from clidispatch.console import console, error_console
from clidispatch.exceptions import (
    ApplicationError,
    CommandAlreadyExistsError,
    NonZeroExitError,
    crash,
    invalid_config,
)
from clidispatch.logger import logger
from clidispatch.parser.argument import PositionalArgument
from clidispatch.parser.check_policy import CheckPolicy
from clidispatch.parser.tokenizer import parse_args


@dataclass(frozen=True)
class RunOptions:
    """
    Extra options to customize the behavior of `Application.run()`.

    Attributes:
        throw_on_error (bool): Re-raise errors from the subcommand instead of
            printing them. Useful for writing tests.
        set_exit_code_on_handler_return (bool): Use a numeric handler return value
            as the exit code returned by `run()`. Otherwise a non-zero return value
            raises `NonZeroExitError`.
        exit_process_on_handler_return (bool): Call `sys.exit()` as soon as the
            handler returns a numeric exit code.
    """

    throw_on_error: bool = False
    set_exit_code_on_handler_return: bool = True
    exit_process_on_handler_return: bool = False


@dataclass(frozen=True)
class CommandBuilder:
    """
    Immutable builder returned by `Application.command()`.

    Each method returns a new builder. `impl()` registers the subcommand and
    returns the handler unchanged, so it also works as a decorator.
    """

    _application: Application
    _name: str
    _description: str | None = None
    _default: bool = False
    _aliases: tuple[str, ...] = ()
    _arg_options: ArgOptions = field(default_factory=ArgOptions)

    def description(self, description: str) -> CommandBuilder:
        """Set the description for this subcommand."""
        return replace(self, _description=description)

    def aliases(self, *aliases: str) -> CommandBuilder:
        """Add additional names that can be used to run this subcommand."""
        return replace(self, _aliases=tuple(aliases))

    def default(self) -> CommandBuilder:
        """
        Make this subcommand the one invoked when no subcommand is specified.

        Only one subcommand can be marked as the default one.
        """
        return replace(self, _default=True)

    def args(
        self, arg_options: ArgOptions | Mapping[str, Any] | None = None, /, **options: Any
    ) -> CommandBuilder:
        """
        Define the arguments this subcommand accepts.

        Accepts an `ArgOptions`, a mapping of its fields, keyword arguments, or a
        mix of these (keywords win).
        """
        merged = dict(arg_options) if arg_options is not None else {}
        merged.update(options)
        return replace(self, _arg_options=ArgOptions.model_validate(merged))

    def impl(self, handler: Callable[..., Any]) -> Callable[..., Any]:
        """
        Set the function called when this subcommand is run, and register it.

        Return value handling:
        - an int (sync or async) becomes the exit code of the run
        - None (sync or async) leaves the exit code at 0
        """
        subcommand = Subcommand(
            name=self._name,
            handler=handler,
            description=self._description,
            arg_options=self._arg_options,
            default_command=self._default,
        )
        self._application.add_command(subcommand, aliases=self._aliases)
        return handler


class Application:
    """
    Represents an entire application, with multiple subcommands.

    Attributes:
        name (str): The name used to run this application. Used in usage hints.
        description (str): Shown in help output.
        commands (dict[str, Subcommand]): Registered subcommands by name.
        aliases (dict[str, str]): Subcommand alias → subcommand name.
        default_subcommand (Subcommand): Run when no subcommand name is given.
        source_directory (Path | None): Directory containing the running script.
            Set by `run()`.
    """

    def __init__(self, name: str, description: str = "") -> None:
        self.name: str = name
        self.description: str = description
        self.commands: dict[str, Subcommand] = {}
        self.aliases: dict[str, str] = {}
        self.source_directory: Path | None = None
        self._current_run_options: RunOptions | None = None

        help_command = Subcommand(
            name="help",
            handler=self.run_help_command,
            description=(
                "Displays help information about all subcommands or a specific "
                "subcommand."
            ),
            arg_options=ArgOptions(
                positional_args=[
                    PositionalArgument(
                        name="subcommand",
                        description="The subcommand to get information about.",
                        optional=True,
                    )
                ],
                positional_arg_count_check=CheckPolicy.IGNORE,
                unexpected_named_arg_check=CheckPolicy.WARN,
            ),
        )
        self.commands["help"] = help_command
        self.default_subcommand: Subcommand = help_command

    def __repr__(self) -> str:
        return f"Application(name={self.name!r}, commands={list(self.commands)!r})"

    def command(self, name: str, description: str | None = None) -> CommandBuilder:
        """
        Start declaring a subcommand of this application.

        Example:
            app.command("build", "Builds the project.").aliases("b").args(
                named_args={"release": arg().valueless()},
            ).impl(build)
        """
        return CommandBuilder(self, name, description)

    def add_command(self, subcommand: Subcommand, aliases: Sequence[str] = ()) -> None:
        """Register a prebuilt subcommand, optionally with subcommand aliases."""
        if subcommand.name in self.commands:
            invalid_config(
                f'Cannot register a subcommand with name "{subcommand.name}" because '
                "there is already a subcommand with that name",
                CommandAlreadyExistsError,
            )
        if subcommand.default_command:
            if self.default_subcommand.default_command:
                invalid_config(
                    f'Cannot make "{subcommand.name}" the default subcommand because '
                    f'"{self.default_subcommand.name}" is already the default',
                    CommandAlreadyExistsError,
                )
            self.default_subcommand = subcommand
        self.commands[subcommand.name] = subcommand
        for alias in aliases:
            self.aliases[alias] = subcommand.name
        logger.debug("[%s] Registered subcommand '%s'", self.name, subcommand.name)

    def only_command(self) -> CommandBuilder:
        """
        Same as `command()`, for applications with only one subcommand.

        The subcommand takes the application's name and description and is made the
        default, which also makes help output read as a single command.
        """
        if len(self.commands) > 1:
            invalid_config(
                "only_command() is not valid here: there are already other commands "
                "defined"
            )
        return self.command(self.name, self.description).default()

    def category(
        self, name: str, description: str, callback: Callable[[Application], Any]
    ) -> Application:
        """
        Create a category of subcommands, invoked by passing the category name
        before the subcommand name.

        Example:
            app.category("db", "Database commands.", lambda db: (
                db.command("migrate").impl(migrate),
            ))

        At the command line:
        - `app db migrate`
        - `app db --help`
        - `app help db`
        - `app db help migrate`
        """
        category = Application(f"{self.name} {name}", description)

        async def run_category(options: CommandOptions, application: Application):
            run_options = self._current_run_options or RunOptions()
            logger.debug("[%s] Delegating to category '%s'", self.name, category.name)
            return await category.run(
                [*options.runtime_args, *options.unparsed_args], run_options
            )

        self.command(name, description).args(
            unexpected_named_arg_check=CheckPolicy.IGNORE,
            positional_arg_count_check=CheckPolicy.IGNORE,
            allow_help_named_arg=False,
        ).impl(run_category)
        self.commands[name].subcategory_app = category
        callback(category)
        return self

    def alias(self, alias: str, target: str) -> Application:
        """Create an alias for a subcommand."""
        self.aliases[alias] = target
        return self

    def get_only_command(self) -> str | None:
        """
        Return the name of this application's only subcommand, if it exists and is
        named after the application. Otherwise return None.
        """
        names = [name for name in self.commands if name != "help"]
        if len(names) == 1 and names[0] == self.name:
            return names[0]
        return None

    def _render_command_help(self, command: Subcommand) -> None:
        aliases = [alias for alias, name in self.aliases.items() if name == command.name]
        kind = "command" if self.get_only_command() else "subcommand"
        if self.name == command.name and command.default_command:
            usage = f"Usage: {self.name}"
        else:
            usage = f"Usage: {self.name} {command.name}"
        fragment = command.usage()
        if fragment:
            usage = f"{usage} {fragment}"

        console.print()
        console.print(Text(f"Help for {kind} {command.name}:", style="command"))
        if command.description:
            console.print(Text(command.description, style="description"))
        console.print(Text(usage, style="usage"))
        console.print()

        arg_options = command.arg_options
        if arg_options.named_args:
            for name, spec in arg_options.named_args.items():
                console.print(
                    Text.assemble((f"<{name}>", "argument"), f": {spec.description}")
                )
            console.print()
        if arg_options.positional_args:
            for positional in arg_options.positional_args:
                line = Text(f"<{positional.name}>", style="argument")
                if positional.description:
                    line.append(f": {positional.description}")
                console.print(line)
            console.print()
        if aliases:
            console.print(Text(f"Aliases: {', '.join(aliases)}", style="alias"))

    def _render_app_help(self) -> None:
        console.print(Text(f"{self.name}: {self.description}", style="command"))
        console.print()
        console.print(
            Text(f"Usage: {self.name} [subcommand] [options]", style="usage")
        )
        console.print(Text("List of all subcommands:"))
        console.print()
        table = Table.grid(padding=(0, 2))
        table.add_column(style="argument", no_wrap=True)
        table.add_column(style="description")
        for command in self.commands.values():
            table.add_row(
                f"  {command.name}:", command.description or "No description provided."
            )
        for alias, name in self.aliases.items():
            table.add_row(f"  {alias}:", f"alias for {name}")
        console.print(table)

    def run_help_command(self, options: CommandOptions, application: Application) -> int:
        """Run the help command for this application. Do not call directly."""
        target = next(iter(options.positional_args), None) or self.get_only_command()
        if not target:
            self._render_app_help()
            return 0

        command_name = target if target in self.commands else self.aliases.get(target, target)
        command = self.commands.get(command_name)
        if command is None:
            console.print(
                Text(
                    f"Unknown subcommand {target}. Run {self.name} help for a list of "
                    "all commands."
                ),
                soft_wrap=True,
            )
            return 0
        if command.subcategory_app is not None:
            nested: Application = command.subcategory_app
            return nested.run_help_command(
                replace(
                    options,
                    command_name="help",
                    positional_args=list(options.positional_args[1:]),
                ),
                nested,
            )
        self._render_command_help(command)
        return 0

    def _select_command(self, args: list[str]) -> tuple[list[str], Subcommand]:
        parsed = parse_args(args)
        first = parsed.first_positional_arg
        if first and first in self.commands:
            new_args, command = args[1:], self.commands[first]
        elif first and first in self.aliases:
            target = self.commands.get(self.aliases[first])
            if target is None:
                invalid_config(
                    f'Subcommand "{first}" was aliased to {self.aliases[first]}, '
                    "which is not a valid subcommand"
                )
            new_args, command = args[1:], target
        else:
            new_args, command = args, self.default_subcommand

        if command.arg_options.allow_help_named_arg and (
            "help" in parsed.named_args or "?" in parsed.named_args
        ):
            # The help command needs the subcommand name, so nothing is consumed.
            return args, self.commands["help"]
        return new_args, command

    async def run(
        self, raw_args: Sequence[str], run_options: RunOptions | None = None
    ) -> int:
        """
        Run the application.

        Args:
            raw_args (Sequence[str]): The full argument vector, starting with the
                interpreter and the script path, e.g.
                `[sys.executable, "app.py", "build", "--release"]`.
            run_options (RunOptions | None): Behavior overrides, mostly for tests.

        Returns:
            int: The exit code for the process.

        Raises:
            InternalError: If `raw_args` does not start with the interpreter and
                script path.
            ConfigurationError: If a subcommand alias points to a missing subcommand.
        """
        if len(raw_args) < 2:
            crash(
                "Application.run() received invalid argv: it should start with "
                '"python path/to/script.py"'
            )
        run_options = run_options or RunOptions()
        runtime_args = (raw_args[0], raw_args[1])
        self._current_run_options = run_options
        self.source_directory = Path(raw_args[1]).resolve().parent

        # Valueless arguments are only known once the subcommand is, so the args are
        # tokenized twice: here to pick the subcommand, and again by the subcommand.
        args = list(raw_args[2:])
        new_args, command = self._select_command(args)
        logger.debug("[%s] Dispatching to '%s': %s", self.name, command.name, new_args)

        exit_code = 0
        try:
            result = command.run(new_args, runtime_args, self)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, int) and not isinstance(result, bool):
                if command.subcategory_app is not None:
                    # The nested run has already reported its own failure.
                    exit_code = result
                elif run_options.set_exit_code_on_handler_return:
                    exit_code = result
                    if run_options.exit_process_on_handler_return:
                        sys.exit(result)
                elif result != 0:
                    raise NonZeroExitError(result)
        except Exception as error:
            if run_options.throw_on_error:
                raise
            if isinstance(error, ApplicationError):
                error_console.print(
                    Text(f"Error: {error.message}", style="error"), soft_wrap=True
                )
                exit_code = error.exit_code
            else:
                logger.error(
                    "[%s] Unhandled error in '%s': %s", self.name, command.name, error
                )
                error_console.print(
                    Text(
                        "The command encountered an unhandled runtime error.",
                        style="error",
                    )
                )
                error_console.print_exception()
                exit_code = 1
        return exit_code

    def main(
        self, argv: Sequence[str] | None = None, run_options: RunOptions | None = None
    ) -> NoReturn:
        """
        Run the application and exit the process with its exit code.

        Args:
            argv (Sequence[str] | None): Arguments in `sys.argv` form (script path
                first). Defaults to `sys.argv`.
            run_options (RunOptions | None): Behavior overrides.
        """
        argv = sys.argv if argv is None else argv
        sys.exit(asyncio.run(self.run([sys.executable, *argv], run_options)))
