# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""config.py
Configuration loader for clidispatch applications.

An application can be declared in YAML or TOML instead of Python:

    name: deploy
    description: Deploys things.
    commands:
      - name: push
        description: Push a build.
        handler: my_project.commands.push
        aliases: [p]
        named_args:
          force:
            description: Overwrite the remote build.
            valueless: true
            aliases: [f]
        positional_args:
          - name: target
            description: Where to push.
    categories:
      - name: db
        description: Database commands.
        config: db.yaml

Handlers are dotted import paths. Categories either list their commands inline or
point to another config file, resolved relative to the including file.
"""
from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Callable

import toml
import yaml
from pydantic import BaseModel, Field

from clidispatch.application import Application
from clidispatch.exceptions import invalid_config
from clidispatch.logger import logger
from clidispatch.parser.argument import NamedArgument, PositionalArgument
from clidispatch.parser.check_policy import CheckPolicy

MAX_CATEGORY_DEPTH = 5


def import_handler(dotted_path: str) -> Callable[..., Any]:
    """Dynamically imports a callable from a dotted path like 'my.module.func'."""
    module_path, _, attr = dotted_path.rpartition(".")
    if not module_path:
        invalid_config(f"Invalid handler path: {dotted_path}")
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as error:
        logger.error("Failed to import module '%s': %s", module_path, error)
        invalid_config(
            f"Could not import '{dotted_path}': {error}. Ensure the module is "
            "installed and discoverable via PYTHONPATH."
        )
    try:
        handler = getattr(module, attr)
    except AttributeError as error:
        logger.error(
            "Module '%s' does not have attribute '%s': %s", module_path, attr, error
        )
        invalid_config(f"Module '{module_path}' has no attribute '{attr}'")
    return handler


class RawNamedArgument(BaseModel):
    """Raw named argument model for clidispatch configuration."""

    description: str | None = None
    optional: bool | None = None
    valueless: bool = False
    default: str | None = None
    aliases: list[str] = Field(default_factory=list)

    def to_argument(self) -> NamedArgument:
        optional = self.optional
        if optional is None:
            optional = self.valueless or self.default is not None
        return NamedArgument(
            description=self.description,
            optional=optional,
            valueless=self.valueless,
            default=self.default,
            aliases=tuple(self.aliases),
        )


class RawPositionalArgument(BaseModel):
    """Raw positional argument model for clidispatch configuration."""

    name: str
    description: str | None = None
    optional: bool = False
    default: str | None = None

    def to_argument(self) -> PositionalArgument:
        # Only forward what was written, so a redundant `optional` is still reported.
        return PositionalArgument(**self.model_dump(exclude_unset=True))


class RawCommand(BaseModel):
    """Raw command model for clidispatch configuration."""

    name: str
    handler: str
    description: str | None = None
    default: bool = False
    aliases: list[str] = Field(default_factory=list)

    named_args: dict[str, RawNamedArgument] = Field(default_factory=dict)
    arg_aliases: dict[str, str] = Field(default_factory=dict)
    positional_args: list[RawPositionalArgument] = Field(default_factory=list)
    positional_arg_count_check: CheckPolicy = CheckPolicy.IGNORE
    unexpected_named_arg_check: CheckPolicy = CheckPolicy.ERROR
    allow_help_named_arg: bool = True

    def register(self, application: Application) -> None:
        builder = application.command(self.name, self.description).aliases(*self.aliases)
        if self.default:
            builder = builder.default()
        builder.args(
            named_args={
                name: spec.to_argument() for name, spec in self.named_args.items()
            },
            aliases=self.arg_aliases,
            positional_args=[spec.to_argument() for spec in self.positional_args],
            positional_arg_count_check=self.positional_arg_count_check,
            unexpected_named_arg_check=self.unexpected_named_arg_check,
            allow_help_named_arg=self.allow_help_named_arg,
        ).impl(import_handler(self.handler))


class RawCategory(BaseModel):
    """Raw category model for clidispatch configuration."""

    name: str
    description: str = ""
    config: str | None = None
    commands: list[RawCommand] = Field(default_factory=list)
    categories: list[RawCategory] = Field(default_factory=list)

    def register(
        self, application: Application, parent_path: Path | None, depth: int
    ) -> None:
        if depth > MAX_CATEGORY_DEPTH:
            raise ValueError(
                f"Maximum category depth exceeded ({MAX_CATEGORY_DEPTH} levels deep)"
            )
        commands, categories = self.commands, self.categories
        source_path = parent_path
        if self.config:
            source_path = Path(self.config)
            if parent_path:
                source_path = (parent_path.parent / source_path).resolve()
            included = AppConfig.model_validate(
                {"name": self.name, **read_config(source_path)}
            )
            commands, categories = included.commands, included.categories

        def populate(category: Application) -> None:
            for command in commands:
                command.register(category)
            for nested in categories:
                nested.register(category, source_path, depth + 1)

        application.category(self.name, self.description, populate)


class AppConfig(BaseModel):
    """clidispatch application configuration model."""

    name: str
    description: str = ""
    commands: list[RawCommand] = Field(default_factory=list)
    categories: list[RawCategory] = Field(default_factory=list)

    def to_application(self, source_path: Path | None = None) -> Application:
        application = Application(self.name, self.description)
        for command in self.commands:
            command.register(application)
        for category in self.categories:
            category.register(application, source_path, depth=1)
        return application


def read_config(path: Path) -> dict[str, Any]:
    """Read a YAML or TOML config file into a dictionary."""
    if not path.is_file():
        raise FileNotFoundError(f"No such config file: {path}")

    suffix = path.suffix
    with path.open("r", encoding="UTF-8") as config_file:
        if suffix in (".yaml", ".yml"):
            raw_config = yaml.safe_load(config_file)
        elif suffix == ".toml":
            raw_config = toml.load(config_file)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    if not isinstance(raw_config, dict):
        raise ValueError(
            "Configuration file must contain a dictionary with a list of commands.\n"
            "Example:\n"
            "name: 'my-cli'\n"
            "commands:\n"
            "  - name: 'build'\n"
            "    description: 'Example command'\n"
            "    handler: 'my_module.my_function'"
        )
    return raw_config


def loader(file_path: Path | str) -> Application:
    """
    Load a clidispatch application from a YAML or TOML file.

    Each command should be defined as a dictionary with at least:
    - name: the subcommand name
    - handler: dotted import path to a function taking (options, application)

    Args:
        file_path (Path | str): Path to the config file (YAML or TOML).

    Returns:
        Application: An application with the configured commands and categories.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file format is unsupported or the file cannot be parsed.
        pydantic.ValidationError: If the document does not match the schema.
        ConfigurationError: If a handler cannot be imported or a command is
            declared incorrectly.
    """
    if isinstance(file_path, (str, Path)):
        path = Path(file_path)
    else:
        raise TypeError("file_path must be a string or Path object.")

    raw_config = read_config(path)
    raw_config.setdefault("name", path.stem)
    return AppConfig.model_validate(raw_config).to_application(path)
