"""Line editor: state transitions over a multi-line input buffer.

Every operation mutates a :class:`LineBufferState` and nothing else; no I/O
happens here. Cursor steps are grapheme-aware, so one backspace removes a
whole user-perceived character (an emoji with modifiers, a letter with a
combining accent) rather than a single code point.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from orion.term.utils import split_graphemes

DEFAULT_HISTORY_SIZE = 100

_WORD_AHEAD_RE = re.compile(r"^\s*\S+")
_WORD_BEHIND_RE = re.compile(r"\S+\s*$")

_QUOTE_CHARS = ("'", '"', "`")
_OPEN_BRACKETS = "([{"
_CLOSE_BRACKETS = ")]}"


@dataclass
class LineBufferState:
    value: str = ""
    cursor_position: int = 0
    # Oldest first, most recent last
    history: list[str] = field(default_factory=list)
    history_index: int = -1
    is_multiline: bool = False
    suggestions: list[str] = field(default_factory=list)
    selected_suggestion_index: int = 0
    showing_suggestions: bool = False


def should_continue_multiline(text: str) -> bool:
    """Decide whether Enter should continue the input on a new line.

    True when any of the quote characters ``'``, ``"`` or backtick occurs an
    odd number of times, or when opening brackets outnumber closing ones.
    This is a counting heuristic: escaped or nested quotes are not
    understood, so a lone apostrophe (``don't``) also continues the input.
    """
    if any(text.count(quote) % 2 for quote in _QUOTE_CHARS):
        return True
    opened = sum(text.count(ch) for ch in _OPEN_BRACKETS)
    closed = sum(text.count(ch) for ch in _CLOSE_BRACKETS)
    return opened > closed


class LineEditor:
    """Editing operations for the input line buffer."""

    def __init__(
        self,
        state: LineBufferState | None = None,
        *,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        self.state = state if state is not None else LineBufferState()
        self.history_size = history_size

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def value(self) -> str:
        return self.state.value

    @property
    def cursor(self) -> int:
        return self.state.cursor_position

    def _before(self) -> str:
        return self.state.value[: self.state.cursor_position]

    def _after(self) -> str:
        return self.state.value[self.state.cursor_position :]

    def _edited(self) -> None:
        # Editing a recalled entry turns it into a fresh draft
        self.state.history_index = -1

    def set_value(self, text: str, cursor: int | None = None) -> None:
        """Replace the buffer; the cursor goes to the end unless given."""
        self.state.value = text
        pos = len(text) if cursor is None else cursor
        self.state.cursor_position = max(0, min(pos, len(text)))
        self.state.is_multiline = "\n" in text
        self._edited()

    # ------------------------------------------------------------------
    # Insertion / deletion
    # ------------------------------------------------------------------

    def insert_char(self, text: str) -> None:
        """Insert *text* at the cursor and move the cursor past it."""
        if not text:
            return
        s = self.state
        s.value = self._before() + text + self._after()
        s.cursor_position += len(text)
        if "\n" in text:
            s.is_multiline = True
        self._edited()

    def insert_newline(self) -> None:
        self.insert_char("\n")

    def backspace(self) -> None:
        s = self.state
        if s.cursor_position == 0:
            return
        unit = split_graphemes(self._before())[-1]
        s.value = s.value[: s.cursor_position - len(unit)] + self._after()
        s.cursor_position -= len(unit)
        s.is_multiline = "\n" in s.value
        self._edited()

    def delete_forward(self) -> None:
        s = self.state
        if s.cursor_position >= len(s.value):
            return
        unit = split_graphemes(self._after())[0]
        s.value = self._before() + s.value[s.cursor_position + len(unit) :]
        s.is_multiline = "\n" in s.value
        self._edited()

    def delete_to_line_end(self) -> None:
        """Delete from the cursor to the end of the current line (not the newline)."""
        after = self._after()
        newline = after.find("\n")
        cut = len(after) if newline == -1 else newline
        if cut == 0:
            return
        s = self.state
        s.value = self._before() + after[cut:]
        s.is_multiline = "\n" in s.value
        self._edited()

    def delete_to_line_start(self) -> None:
        """Delete from the start of the current line up to the cursor."""
        before = self._before()
        line_start = before.rfind("\n") + 1
        if line_start == len(before):
            return
        s = self.state
        s.value = before[:line_start] + self._after()
        s.cursor_position = line_start
        s.is_multiline = "\n" in s.value
        self._edited()

    def delete_word_backward(self) -> None:
        """Delete the word before the cursor plus any whitespace after it."""
        if self.state.cursor_position == 0:
            return
        end = self.state.cursor_position
        self.move_word_backward()
        start = self.state.cursor_position
        s = self.state
        s.value = s.value[:start] + s.value[end:]
        s.is_multiline = "\n" in s.value
        self._edited()

    # ------------------------------------------------------------------
    # Cursor movement
    # ------------------------------------------------------------------

    def move_cursor(self, delta: int) -> None:
        """Move by *delta* grapheme clusters, clamped to the buffer."""
        s = self.state
        if delta < 0:
            units = split_graphemes(self._before())
            steps = min(-delta, len(units))
            s.cursor_position -= sum(len(u) for u in units[len(units) - steps :])
        elif delta > 0:
            units = split_graphemes(self._after())
            s.cursor_position += sum(len(u) for u in units[:delta])

    def move_to_line_start(self) -> None:
        before = self._before()
        self.state.cursor_position = before.rfind("\n") + 1

    def move_to_line_end(self) -> None:
        newline = self._after().find("\n")
        if newline == -1:
            self.state.cursor_position = len(self.state.value)
        else:
            self.state.cursor_position += newline

    def move_word_forward(self) -> None:
        match = _WORD_AHEAD_RE.match(self._after())
        if match:
            self.state.cursor_position += match.end()
        else:
            self.state.cursor_position = len(self.state.value)

    def move_word_backward(self) -> None:
        match = _WORD_BEHIND_RE.search(self._before())
        if match:
            self.state.cursor_position = match.start()
        else:
            self.state.cursor_position = 0

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def navigate_history(self, direction: int) -> None:
        """Walk the submission history.

        ``-1`` moves to an older entry (the most recent one first), ``+1``
        moves to a newer one and finally back to an empty buffer.
        """
        s = self.state
        if direction < 0 and s.history_index < len(s.history) - 1:
            s.history_index += 1
        elif direction > 0 and s.history_index > -1:
            s.history_index -= 1
        else:
            return

        if s.history_index == -1:
            s.value = ""
        else:
            s.value = s.history[len(s.history) - 1 - s.history_index]
        s.cursor_position = len(s.value)
        s.is_multiline = "\n" in s.value

    def add_to_history(self, text: str) -> None:
        history = self.state.history
        history.append(text)
        while len(history) > self.history_size:
            history.pop(0)

    def clear_history(self) -> None:
        self.state.history.clear()
        self.state.history_index = -1

    # ------------------------------------------------------------------
    # Enter / submission
    # ------------------------------------------------------------------

    def handle_enter(self) -> str | None:
        """Either continue the input on a new line or submit it.

        Returns the submitted line, or ``None`` when nothing was submitted.
        """
        if should_continue_multiline(self.state.value):
            self.insert_newline()
            return None
        return self.submit()

    def submit(self) -> str | None:
        """Finalize the buffer.

        A buffer that is blank after trimming is cleared and nothing is
        returned. Otherwise the trimmed text is recorded in history, the
        buffer is reset, and the text is returned.
        """
        line = self.state.value.strip()
        s = self.state
        s.value = ""
        s.cursor_position = 0
        s.history_index = -1
        s.is_multiline = False
        if not line:
            return None
        self.add_to_history(line)
        return line
