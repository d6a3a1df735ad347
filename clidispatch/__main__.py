"""
Clidispatch CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.

Runs an application declared in a config file:

    python -m clidispatch path/to/clidispatch.yaml build --release

When the first argument is not a config file, the config is discovered with
`find_config()` instead and every argument is passed through.
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import Sequence

from clidispatch.config import loader
from clidispatch.console import error_console
from clidispatch.utils import setup_logging

CONFIG_SUFFIXES = (".yaml", ".yml", ".toml")


def find_config() -> Path | None:
    candidates = [
        Path.cwd() / "clidispatch.yaml",
        Path.cwd() / "clidispatch.toml",
        Path.cwd() / ".clidispatch.yaml",
        Path.cwd() / ".clidispatch.toml",
        Path(os.environ.get("CLIDISPATCH_CONFIG", "clidispatch.yaml")),
        Path.home() / ".config" / "clidispatch" / "clidispatch.yaml",
        Path.home() / ".config" / "clidispatch" / "clidispatch.toml",
    ]
    return next((p for p in candidates if p.is_file()), None)


def bootstrap(args: list[str]) -> tuple[Path | None, list[str]]:
    """Pick the config file and make its directory importable for handlers."""
    if args and Path(args[0]).suffix in CONFIG_SUFFIXES and Path(args[0]).is_file():
        config_path: Path | None = Path(args[0])
        args = args[1:]
    else:
        config_path = find_config()
    if config_path and str(config_path.parent.resolve()) not in sys.path:
        sys.path.insert(0, str(config_path.parent.resolve()))
    return config_path, args


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    config_path, args = bootstrap(args)
    if config_path is None:
        error_console.print(
            "No clidispatch config found. Pass a .yaml or .toml file, or set "
            "CLIDISPATCH_CONFIG.",
            style="error",
        )
        return 1
    setup_logging(json_log_to_file=True)
    application = loader(config_path)
    return asyncio.run(application.run([sys.executable, str(config_path), *args]))


if __name__ == "__main__":
    sys.exit(main())
