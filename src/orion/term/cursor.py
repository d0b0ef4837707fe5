"""Cursor position calculator for the multi-line input box.

The input value is laid out into visual rows: one or more per ``\\n``
separated line, wrapped by display width. The frame builder draws exactly
these rows, and :func:`locate_cursor` maps a logical offset onto them, so the
physical cursor always lands on the cell the inline cursor was drawn on.
"""

from __future__ import annotations

from dataclasses import dataclass

from orion.term.utils import grapheme_width, split_graphemes


@dataclass(frozen=True)
class InputRow:
    """One visual row of the input buffer.

    ``start``/``end`` are offsets into the full value; ``line_index`` is the
    logical (newline-separated) line the row belongs to and ``first`` marks
    its first visual row.
    """

    line_index: int
    start: int
    end: int
    text: str
    first: bool


def _unit_width(unit: str) -> int:
    return 3 if unit == "\t" else grapheme_width(unit)


def layout_input(value: str, width: int) -> list[InputRow]:
    """Split *value* into visual rows of at most ``width - 1`` columns.

    One column per row stays free so a cursor sitting after the last
    character of a row still fits on that row.
    """
    limit = max(1, width - 1)
    rows: list[InputRow] = []
    offset = 0

    for line_index, line in enumerate(value.split("\n")):
        row_start = offset
        row_width = 0
        first = True
        for unit in split_graphemes(line):
            w = _unit_width(unit)
            if row_width + w > limit and row_width > 0:
                rows.append(InputRow(line_index, row_start, offset, value[row_start:offset], first))
                row_start = offset
                row_width = 0
                first = False
            offset += len(unit)
            row_width += w
        rows.append(InputRow(line_index, row_start, offset, value[row_start:offset], first))
        # Skip the newline separator
        offset += 1

    return rows


def locate_cursor(rows: list[InputRow], offset: int) -> tuple[int, int]:
    """Map a logical *offset* to ``(row_index, column)`` within *rows*.

    The column is measured in terminal cells. An offset at a wrap boundary
    belongs to the start of the following row of the same line.
    """
    if not rows:
        return 0, 0

    for index, row in enumerate(rows):
        next_row = rows[index + 1] if index + 1 < len(rows) else None
        continues = next_row is not None and next_row.line_index == row.line_index
        if row.start <= offset < row.end or (offset == row.end and not continues):
            prefix = row.text[: offset - row.start]
            return index, sum(_unit_width(u) for u in split_graphemes(prefix))

    last = rows[-1]
    return len(rows) - 1, sum(_unit_width(u) for u in split_graphemes(last.text))
