"""
Clidispatch CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import logging

from .application import Application, CommandBuilder, RunOptions
from .command import ArgOptions, CommandOptions, Subcommand
from .exceptions import ApplicationError, fail
from .parser import CheckPolicy, arg
from .utils import Unset

logger = logging.getLogger("clidispatch")


__all__ = [
    "Application",
    "ApplicationError",
    "ArgOptions",
    "CheckPolicy",
    "CommandBuilder",
    "CommandOptions",
    "RunOptions",
    "Subcommand",
    "Unset",
    "arg",
    "fail",
]
