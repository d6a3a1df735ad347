# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Token-level command line grammar for clidispatch.

`parse_args()` turns a flat list of tokens into named-argument assignments and a
sequence of positional values. It knows nothing about any command schema except
the set of argument names that never take a value, so it is used twice per run:
once by the dispatcher (with no valueless knowledge) to find the subcommand, and
once by the subcommand itself with its own valueless names.

Grammar, checked in order for each token:
- `--`              every remaining token, separator included, becomes positional
- `--name=value`    assigns `value` (possibly empty) to `name`
- `--name`          takes the next token as its value unless that token starts with
                    `-` or `name` is valueless, in which case the value is `None`
- `-xyz`            compound short flags: `x` and `y` are set to `None`, `z` follows
                    the same lookahead rule as `--name`
- anything else     positional

Example:
    >>> parse_args(["-nPNi", "eth0"]).named_args
    {'i': 'eth0', 'n': None, 'P': None, 'N': None}
"""
from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Sequence

LONG_WITH_VALUE = re.compile(r"--(.+?)=(.*)", re.DOTALL)
LONG = re.compile(r"--(.+)", re.DOTALL)
SHORT = re.compile(r"-(\w+)", re.ASCII)


@dataclass
class ParsedArgs:
    """Result of tokenizing a command line."""

    named_args: dict[str, str | None] = field(default_factory=dict)
    positional_args: list[str] = field(default_factory=list)
    first_positional_arg: str | None = None


def _takes_value(name: str, remaining: deque[str], valueless: set[str]) -> bool:
    if remaining and remaining[0].startswith("-"):
        return False
    return name not in valueless


def parse_args(
    tokens: Sequence[str], valueless_names: Iterable[str] = ()
) -> ParsedArgs:
    """
    Parse command line tokens into named and positional arguments.

    Args:
        tokens (Sequence[str]): The tokens to parse, without the interpreter and
            script path.
        valueless_names (Iterable[str]): Names (canonical and aliases) of arguments
            that never consume the following token.

    Returns:
        ParsedArgs: Named assignments, positional values, and the first token if it
            was positional.
    """
    valueless = set(valueless_names)
    remaining = deque(tokens)
    result = ParsedArgs()
    index = 0
    while remaining:
        index += 1
        token = remaining.popleft()

        if token == "--":
            result.positional_args.append(token)
            result.positional_args.extend(remaining)
            break

        if match := LONG_WITH_VALUE.fullmatch(token):
            name, value = match.groups()
            result.named_args[name] = value
        elif match := LONG.fullmatch(token):
            name = match.group(1)
            if _takes_value(name, remaining, valueless):
                result.named_args[name] = remaining.popleft() if remaining else None
            else:
                result.named_args[name] = None
        elif match := SHORT.match(token):
            *leading, last = match.group(1)
            if _takes_value(last, remaining, valueless):
                result.named_args[last] = remaining.popleft() if remaining else None
            else:
                result.named_args[last] = None
            for name in leading:
                result.named_args[name] = None
        else:
            result.positional_args.append(token)
            if index == 1:
                result.first_positional_arg = token

    return result
