"""
Row-count estimation for rendered terminal content.

The multiplexer redraws its spinners in place: before writing a new frame it
moves the cursor back up over the previous one and clears it. To move up the
right number of rows it has to know how many rows the previous frame
*occupied*, which is not the same as how many newlines it contained:

  - A line longer than the terminal is wide wraps onto extra rows.
  - ANSI escape sequences (colours, cursor moves) take bytes but no columns.
  - Wide characters (CJK, most emoji) take two columns each.

`content_height` accounts for all three. Rich already knows how to decode
ANSI text (`Text.from_ansi`) and how wide a string is on screen
(`cell_len`), so we lean on it instead of maintaining our own tables.
"""

from math import ceil

from rich.cells import cell_len
from rich.text import Text

from .buffer import TAB_REPLACEMENT


def visible_width(line: str) -> int:
    """Number of terminal columns a single line takes once escapes are stripped.

    Tabs count as the same three columns lines are expanded to before output.
    """
    return cell_len(Text.from_ansi(line.replace("\t", TAB_REPLACEMENT)).plain)


def content_height(text: str, width: int) -> int:
    """Count the terminal rows `text` occupies at `width` columns.

    Each newline-separated segment takes at least one row (an empty spinner
    label still sits on a row that has to be erased), plus one more row for
    every `width` columns it overflows.

    Args:
        text: Rendered content, possibly containing ANSI escape sequences.
        width: Terminal width in columns. Values below 1 are treated as 1.

    Returns:
        The number of rows, always >= 1.
    """
    width = max(1, width)
    return sum(max(1, ceil(visible_width(segment) / width)) for segment in text.split("\n"))
