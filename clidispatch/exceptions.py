# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines all custom exception classes used in the clidispatch framework, along with
the guard helpers that raise them.

Errors fall into three families:
- User-facing failures (`ApplicationError`), raised while resolving a command line.
  The dispatcher catches these and prints `Error: <message>` without a traceback.
- Configuration errors (`ConfigurationError` and subclasses), raised while commands
  are being registered. These are never caught by the dispatcher and are expected
  to halt program startup.
- Internal invariant violations (`InternalError`), raised when something that
  should be impossible happens. These propagate with full diagnostic detail.

Exception Hierarchy:
- ClidispatchError
    ├── ApplicationError
    │     └── NonZeroExitError
    ├── ConfigurationError
    │     ├── CommandAlreadyExistsError
    │     └── InvalidHandlerError
    └── InternalError
"""
from typing import NoReturn


class ClidispatchError(Exception):
    """Base exception for the clidispatch framework."""


class ApplicationError(ClidispatchError):
    """
    Exception raised for user-facing failures.

    Carries the process exit code the dispatcher should report. The message is shown
    to the end user as-is, so it should already contain any usage hint.
    """

    def __init__(self, message: str = "", exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class ConfigurationError(ClidispatchError):
    """Exception raised when commands or arguments are declared incorrectly."""


class CommandAlreadyExistsError(ConfigurationError):
    """Exception raised when a command with the same name (or a second default) is registered."""


class InvalidHandlerError(ConfigurationError):
    """Exception raised when a command handler is not callable with (options, application)."""


class InternalError(ClidispatchError):
    """Exception raised when an internal invariant is violated."""


class NonZeroExitError(ApplicationError):
    """Exception raised when a handler returns a non-zero exit code that nobody captures."""

    def __init__(self, exit_code: int) -> None:
        super().__init__(f"Non-zero exit code: {exit_code}", exit_code)


def fail(message: str, exit_code: int = 1) -> NoReturn:
    """
    Raise an `ApplicationError`, terminating the current run with a plain error message.

    Use this to write guard clauses inside command handlers.
    """
    raise ApplicationError(message, exit_code)


def invalid_config(
    message: str, error_type: type[ConfigurationError] = ConfigurationError
) -> NoReturn:
    """Raise a configuration error for an invalid command or argument declaration."""
    raise error_type(f"clidispatch configuration error: {message}")


def crash(message: str) -> NoReturn:
    """Raise an `InternalError` for a condition that should be impossible."""
    raise InternalError(f"{message}. This is an error with clidispatch.")
