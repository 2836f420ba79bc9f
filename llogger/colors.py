"""
ANSI styling for level labels and spinner icons.

The multiplexer treats every line as an opaque string, so styling has to be
baked in before a line reaches it. Rich's `Style.render` turns a style
definition such as "white on red" into the raw escape sequence, which lets
us keep using Rich's style grammar without going through `Console.print`
(that would write immediately, bypassing the frame buffer).

Styles are rendered in the 256-colour palette; Rich downgrades colours such
as `dark_orange` for us, and every modern terminal understands the result.
"""

from rich.color import ColorSystem
from rich.style import Style

COLOR_SYSTEM = ColorSystem.EIGHT_BIT

# Styles for the default indicator icons
SPINNER_STYLE = "cyan"
SUCCESS_STYLE = "green"
FAIL_STYLE = "red"
CONSOLE_RUNNING_STYLE = "black on grey85"
CONSOLE_SUCCESS_STYLE = "white on green"
CONSOLE_FAIL_STYLE = "white on red"


def colorize(text: str, style: str | None, enabled: bool = True) -> str:
    """Wrap `text` in the escape codes for `style`, or return it untouched."""
    if not enabled or not style:
        return text
    return Style.parse(style).render(text, color_system=COLOR_SYSTEM)
