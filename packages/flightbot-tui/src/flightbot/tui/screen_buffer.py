"""Double-buffered cell grid with row-level differential output.

The :class:`ScreenBuffer` owns two grids: the frame being drawn and the
frame the terminal currently shows.  :meth:`ScreenBuffer.draw` compares the
two row by row and emits escape output only for rows that changed.
"""

from __future__ import annotations

from dataclasses import dataclass

from flightbot.tui.colors import DEFAULT_ATTR, RESET, Attr, StyleLike, ensure_attr
from flightbot.tui.utils import grapheme_width, iter_graphemes

CLEAR_SCREEN = "\x1b[2J"


def cursor_to(x: int, y: int) -> str:
    """Absolute cursor positioning (1-based column *x*, row *y*)."""
    return f"\x1b[{y};{x}H"


def clamp(value: int, low: int, high: int) -> int:
    if value < low:
        return low
    if value > high:
        return high
    return value


@dataclass(frozen=True)
class Cell:
    """One terminal position.

    ``continuation`` marks the right half of a two-column glyph; such a
    cell carries no glyph of its own.
    """

    char: str = " "
    attr: Attr = DEFAULT_ATTR
    continuation: bool = False

    def same_as(self, other: Cell) -> bool:
        if self is other:
            return True
        return (
            self.char == other.char
            and self.continuation == other.continuation
            and self.attr.key == other.attr.key
        )


BLANK_CELL = Cell()


class ScreenBuffer:
    """Fixed-size grid of :class:`Cell` objects, row-major, 1-based API."""

    def __init__(self, width: int, height: int) -> None:
        self.width = max(1, int(width or 1))
        self.height = max(1, int(height or 1))
        self._cells: list[Cell] = self._create_cells()
        self._prev_cells: list[Cell] = list(self._cells)
        self._force_full = False

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        """Rebuild both grids; the next :meth:`draw` clears and repaints."""
        self.width = max(1, int(width or 1))
        self.height = max(1, int(height or 1))
        self._cells = self._create_cells()
        self._prev_cells = list(self._cells)
        self._force_full = True

    def cell_at(self, x: int, y: int) -> Cell:
        if x < 1 or x > self.width or y < 1 or y > self.height:
            raise IndexError(f"cell ({x}, {y}) outside {self.width}x{self.height} grid")
        return self._cells[(y - 1) * self.width + (x - 1)]

    def row_text(self, y: int) -> str:
        """Return the glyphs of row *y* without styling (for inspection)."""
        offset = (y - 1) * self.width
        return "".join(
            cell.char for cell in self._cells[offset : offset + self.width] if not cell.continuation
        )

    # ------------------------------------------------------------------
    # Drawing primitives
    # ------------------------------------------------------------------

    def clear(self, char: str = " ") -> None:
        self.fill(char=char)

    def fill(
        self,
        x: int = 1,
        y: int = 1,
        width: int | None = None,
        height: int | None = None,
        char: str = " ",
        attr: Attr | StyleLike = DEFAULT_ATTR,
    ) -> None:
        """Fill a rectangle (clamped to the grid) with *char*."""
        width = self.width if width is None else width
        height = self.height if height is None else height
        if width <= 0 or height <= 0:
            return
        resolved = ensure_attr(attr)
        start_x = clamp(x, 1, self.width)
        start_y = clamp(y, 1, self.height)
        end_x = clamp(x + width - 1, 1, self.width)
        end_y = clamp(y + height - 1, 1, self.height)
        cell = Cell(char or " ", resolved, False)
        for row in range(start_y, end_y + 1):
            self._split_wide_pair(start_x, row)
            self._split_wide_pair(end_x, row)
            offset = (row - 1) * self.width
            for col in range(start_x, end_x + 1):
                self._cells[offset + col - 1] = cell

    def put(
        self,
        x: int,
        y: int,
        text: str,
        attr: Attr | StyleLike = DEFAULT_ATTR,
    ) -> int:
        """Write *text* starting at column *x* of row *y*.

        Zero-width clusters are skipped, writing stops at the right edge,
        and a two-column glyph that would overhang the last column is
        dropped.  Returns the column after the last cell written.
        """
        if not text or y < 1 or y > self.height:
            return x
        resolved = ensure_attr(attr)
        col = clamp(x, 1, self.width)
        for g in iter_graphemes(text):
            w = grapheme_width(g)
            if w == 0:
                continue
            if col > self.width:
                break
            if w == 2 and col == self.width:
                break
            self._split_wide_pair(col, y)
            self._split_wide_pair(col + w - 1, y)
            self._set_cell(col, y, Cell(g, resolved, False))
            if w == 2:
                self._set_cell(col + 1, y, Cell("", resolved, True))
                col += 2
            else:
                col += 1
        return col

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def draw(self, delta: bool = True) -> str:
        """Return the escape output that brings the terminal up to date.

        With *delta* (the default) only rows that differ from the previous
        frame are emitted.  After a :meth:`resize` the first call clears
        the screen and repaints every row.  Calling ``draw`` again without
        an intervening mutation returns an empty string.
        """
        full = self._force_full or not delta
        out: list[str] = []
        if self._force_full:
            out.append(CLEAR_SCREEN)
        for row in range(1, self.height + 1):
            if not full and not self._row_changed(row):
                continue
            out.append(cursor_to(1, row))
            out.append(self._row_to_string(row))
        self._force_full = False
        if not out:
            return ""
        out.append(RESET)
        self._prev_cells = list(self._cells)
        return "".join(out)

    def _row_changed(self, row: int) -> bool:
        offset = (row - 1) * self.width
        cells = self._cells
        prev = self._prev_cells
        for idx in range(offset, offset + self.width):
            if not cells[idx].same_as(prev[idx]):
                return True
        return False

    def _row_to_string(self, row: int) -> str:
        offset = (row - 1) * self.width
        parts: list[str] = []
        active_key = DEFAULT_ATTR.key
        for cell in self._cells[offset : offset + self.width]:
            if cell.attr.key != active_key:
                parts.append(cell.attr.sequence)
                active_key = cell.attr.key
            if not cell.continuation:
                parts.append(cell.char or " ")
        if active_key != DEFAULT_ATTR.key:
            parts.append(RESET)
        return "".join(parts)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _create_cells(self) -> list[Cell]:
        return [BLANK_CELL] * (self.width * self.height)

    def _set_cell(self, x: int, y: int, cell: Cell) -> None:
        if x < 1 or x > self.width or y < 1 or y > self.height:
            return
        self._cells[(y - 1) * self.width + (x - 1)] = cell

    def _split_wide_pair(self, x: int, y: int) -> None:
        """Blank the other half of a two-column glyph about to lose cell *x*."""
        if x < 1 or x > self.width or y < 1 or y > self.height:
            return
        offset = (y - 1) * self.width
        cell = self._cells[offset + x - 1]
        if cell.continuation:
            if x > 1:
                lead = self._cells[offset + x - 2]
                self._cells[offset + x - 2] = Cell(" ", lead.attr, False)
        elif x < self.width:
            right = self._cells[offset + x]
            if right.continuation:
                self._cells[offset + x] = Cell(" ", right.attr, False)
