"""Plain output lines waiting for the next redraw."""

# Terminals expand tabs to the next stop, which makes wrapped width
# unpredictable. Lines are stored with tabs already expanded.
TAB_REPLACEMENT = "   "


class FrameBuffer:
    """Ordered queue of plain lines emitted since the last frame was drawn."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def append(self, line: str) -> None:
        self._lines.append(line.replace("\t", TAB_REPLACEMENT))

    def drain(self) -> list[str]:
        """Return every pending line in arrival order and empty the buffer."""
        lines, self._lines = self._lines, []
        return lines

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __iter__(self):
        return iter(list(self._lines))
