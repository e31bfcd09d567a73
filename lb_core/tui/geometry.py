"""Screen geometry and mouse hit-testing.

Pure functions over terminal cell coordinates: where the list panels
sit for the current layout, where a centered select dialog sits, and
what a click at (x, y) lands on.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Iterable

# Terminals at least this wide show panels on the left half and the
# detail pane on the right half.
WIDE_LAYOUT_MIN_WIDTH = 80

MODAL_WIDTH = 40
# Border and padding rows around the option list (top + bottom).
MODAL_CHROME_ROWS = 4
# First option row, relative to the dialog's top row.
MODAL_OPTIONS_OFFSET = 2

WHEEL_STEP = 3


@dataclass(frozen=True)
class Bounds:
    """Half-open rectangle: rows [top, bottom), columns [left, right)."""

    top: int
    bottom: int
    left: int
    right: int

    def contains(self, x: int, y: int) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom


def is_wide(width: int) -> bool:
    return width >= WIDE_LAYOUT_MIN_WIDTH


def panel_width(width: int) -> int:
    return width // 2 if is_wide(width) else width


def calculate_panel_bounds(
    width: int, stack: Iterable[tuple[Hashable, int]],
) -> dict[Hashable, Bounds]:
    """Stack panels vertically from row 0.

    Args:
        width: Terminal width in cells.
        stack: (panel, height) pairs for the visible panels, top to bottom.
    """
    bounds = {}
    right = panel_width(width)
    y = 0
    for panel, height in stack:
        bounds[panel] = Bounds(top=y, bottom=y + height, left=0, right=right)
        y += height
    return bounds


def panel_at(bounds: dict[Hashable, Bounds], x: int, y: int) -> Hashable | None:
    for panel, b in bounds.items():
        if b.contains(x, y):
            return panel
    return None


def item_index_at(y: int, bounds: Bounds) -> int:
    """Row inside a bordered panel; negative when the click hit the top border."""
    return y - bounds.top - 1


def in_detail_pane(x: int, width: int) -> bool:
    """True when x falls in the right-hand detail pane of the wide layout."""
    return is_wide(width) and x >= width // 2


def modal_bounds(width: int, height: int, option_count: int) -> Bounds:
    modal_height = option_count + MODAL_CHROME_ROWS
    left = (width - MODAL_WIDTH) // 2
    top = (height - modal_height) // 2
    return Bounds(top=top, bottom=top + modal_height, left=left, right=left + MODAL_WIDTH)


class HitKind(Enum):
    DISMISS = "dismiss"
    OPTION = "option"
    NONE = "none"


@dataclass(frozen=True)
class ModalHit:
    kind: HitKind
    index: int = -1


def modal_hit(x: int, y: int, width: int, height: int, option_count: int) -> ModalHit:
    """Classify a click against a centered select dialog.

    Outside the dialog -> DISMISS; on an option row -> OPTION with its
    index; anywhere else inside (title, padding) -> NONE.
    """
    b = modal_bounds(width, height, option_count)
    if not b.contains(x, y):
        return ModalHit(HitKind.DISMISS)
    index = y - (b.top + MODAL_OPTIONS_OFFSET)
    if 0 <= index < option_count:
        return ModalHit(HitKind.OPTION, index)
    return ModalHit(HitKind.NONE)
