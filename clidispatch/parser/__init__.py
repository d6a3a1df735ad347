"""
Clidispatch CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

from .argument import ArgBuilder, NamedArgument, PositionalArgument, arg
from .check_policy import CheckPolicy
from .tokenizer import ParsedArgs, parse_args

__all__ = [
    "ArgBuilder",
    "CheckPolicy",
    "NamedArgument",
    "ParsedArgs",
    "PositionalArgument",
    "arg",
    "parse_args",
]
