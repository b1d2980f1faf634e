"""Split geometry for the editor pane.

Horizontal splits put the editor to the right of the shell and size it
from the client width; vertical splits put it above the shell and leave
the shell a fixed number of rows.
"""

from dataclasses import dataclass

HORIZONTAL = "horizontal"
VERTICAL = "vertical"

DEFAULT_PANE_WIDTH = 80
DEFAULT_SHELL_WIDTH = 132
DEFAULT_SHELL_HEIGHT = 15


@dataclass(frozen=True)
class SplitGeometry:
    method: str
    size: int

    @property
    def flag(self) -> str:
        """tmux split direction: 'h' or 'v'."""
        return "h" if self.method == HORIZONTAL else "v"


def compute_split(
    client_width: int,
    pane_width: int | None = None,
    pane_count: int | None = None,
    shell_width: int = DEFAULT_SHELL_WIDTH,
    shell_height: int = DEFAULT_SHELL_HEIGHT,
    method: str = HORIZONTAL,
) -> SplitGeometry:
    """Compute how to split the window for a new editor pane.

    Without an explicit width or count, the editor takes everything the
    shell doesn't need, but never less than one default pane width.
    With either set, the editor is sized to hold as many side-by-side
    editor columns of *pane_width* as fit (each plus a one-cell
    separator), at least one, and no more than *pane_count*.
    """
    if method == VERTICAL:
        return SplitGeometry(VERTICAL, shell_height)

    width = pane_width or DEFAULT_PANE_WIDTH
    available = client_width - shell_width

    if pane_width is None and pane_count is None:
        size = available if available >= width else width
        return SplitGeometry(HORIZONTAL, size)

    count = max(available // (width + 1), 1)
    if pane_count is not None:
        count = min(count, pane_count)
    return SplitGeometry(HORIZONTAL, (width + 1) * count - 1)
