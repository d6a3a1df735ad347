# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""Global console instances for clidispatch applications."""
from rich.console import Console

from clidispatch.themes import get_theme

console = Console(theme=get_theme())
error_console = Console(theme=get_theme(), stderr=True)
