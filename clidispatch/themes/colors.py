# Clidispatch CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Color palette and rich theme used by clidispatch output.

`OneColors` exposes the One Dark palette as plain hex strings. Every color also
has a bold variant reachable with a `_b` suffix (e.g. `OneColors.DARK_RED_b`),
generated by `ColorsMeta`, so they can be used directly as rich styles:

    console.print(Text("Error", style=OneColors.DARK_RED_b))
"""
from rich.style import Style
from rich.theme import Theme


class ColorsMeta(type):
    """Metaclass that adds bold `<NAME>_b` variants for every color attribute."""

    def __new__(mcs, name, bases, namespace):
        colors = {
            key: value
            for key, value in namespace.items()
            if key.isupper() and isinstance(value, str)
        }
        for key, value in colors.items():
            namespace[f"{key}_b"] = f"bold {value}"
        return super().__new__(mcs, name, bases, namespace)


class OneColors(metaclass=ColorsMeta):
    BLACK = "#282C34"
    WHITE = "#ABB2BF"
    COMMENT_GREY = "#5C6370"
    DARK_RED = "#BE5046"
    LIGHT_RED = "#E06C75"
    GREEN = "#98C379"
    DARK_YELLOW = "#D19A66"
    LIGHT_YELLOW = "#E5C07B"
    BLUE = "#61AFEF"
    MAGENTA = "#C678DD"
    CYAN = "#56B6C2"


def get_theme() -> Theme:
    """Return the rich theme shared by the stdout and stderr consoles."""
    return Theme(
        {
            "usage": Style.parse(OneColors.CYAN_b),
            "command": Style.parse(OneColors.BLUE_b),
            "argument": Style.parse(OneColors.GREEN),
            "description": Style.parse(OneColors.WHITE),
            "alias": Style.parse(OneColors.MAGENTA),
            "error": Style.parse(OneColors.DARK_RED_b),
            "warning": Style.parse(OneColors.LIGHT_YELLOW_b),
        }
    )
