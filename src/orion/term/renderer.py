"""Diff renderer: owns the render state and redraws it without flicker.

Every mutator marks the state dirty and (re)arms a single debounce timer;
when it fires the whole frame is rebuilt and compared with the last one
written. An identical frame produces no output at all. Otherwise the frame
is sent in one ``write``: cursor home (or a full clear when the screen
contents can no longer be trusted), the frame, an erase-below when the new
frame is shorter, and an absolute move to the input cursor.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from orion.term.config import SessionConfig
from orion.term.frame import Frame, render_frame
from orion.term.render_state import (
    ConfirmationDialog,
    DiffPayload,
    Message,
    MessageRole,
    ProcessingStatus,
    RenderState,
)
from orion.term.theme import Theme, default_theme

if TYPE_CHECKING:
    from orion.term.terminal import Terminal

logger = logging.getLogger(__name__)

CURSOR_HOME = "\x1b[H"
CLEAR_SCREEN = "\x1b[2J"
CLEAR_TO_END = "\x1b[J"


class DiffRenderer:
    """Coalesces state mutations into minimal terminal writes."""

    def __init__(
        self,
        terminal: Terminal,
        *,
        theme: Theme | None = None,
        config: SessionConfig | None = None,
    ) -> None:
        self.terminal = terminal
        self.theme = theme or default_theme()
        self.config = config or SessionConfig()
        self.state = RenderState()

        self._width = terminal.columns
        self._height = terminal.rows

        # Render scheduling
        self._timer: asyncio.TimerHandle | None = None

        # Last frame written, for comparison
        self._previous: Frame | None = None
        self._needs_clear = True

        # Metrics
        self._write_count = 0
        self._full_redraw_count = 0

        self._destroyed = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def write_count(self) -> int:
        """Number of frames written to the terminal."""
        return self._write_count

    @property
    def full_redraws(self) -> int:
        """Number of frames that started with a full screen clear."""
        return self._full_redraw_count

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def previous_frame(self) -> Frame | None:
        return self._previous

    @property
    def pending(self) -> bool:
        """Whether a redraw is scheduled but has not run yet."""
        return self._timer is not None

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def add_message(
        self,
        role: MessageRole,
        content: str,
        *,
        tool_name: str | None = None,
        file_name: str | None = None,
        diff: DiffPayload | None = None,
    ) -> Message | None:
        """Append a message unless an identical one is already stored.

        Returns the stored message, or ``None`` for a duplicate.
        """
        message = Message(role, content, tool_name=tool_name, file_name=file_name, diff=diff)
        if self.state.has_message(message):
            logger.debug("Skipping duplicate %s message", role)
            return None
        self.state.messages.append(message)
        self.mark_dirty()
        return message

    def update_input(self, value: str, cursor_position: int) -> None:
        self.state.input_value = value
        self.state.cursor_position = max(0, min(cursor_position, len(value)))
        self.mark_dirty()

    def set_processing(
        self,
        status: bool | ProcessingStatus,
        elapsed: float | None = None,
    ) -> None:
        """Set the processing indicator.

        ``True``/``False`` are shorthands for ``"processing"``/``"idle"``.
        *elapsed* is shown in the status line while processing.
        """
        if status is True:
            status = "processing"
        elif status is False:
            status = "idle"
        self.state.processing_status = status
        self.state.processing_time = elapsed if self.state.is_processing else None
        self.mark_dirty()

    def set_auto_edit(self, enabled: bool) -> None:
        self.state.auto_edit = enabled
        self.mark_dirty()

    def set_model(self, model: str) -> None:
        self.state.current_model = model
        self.mark_dirty()

    def set_active_file(self, file_name: str | None) -> None:
        self.state.active_file = file_name
        self.mark_dirty()

    def set_mcp_status(self, status: str | None) -> None:
        self.state.mcp_status = status
        self.mark_dirty()

    def set_token_count(self, count: int | None) -> None:
        self.state.token_count = count
        self.mark_dirty()

    def show_confirmation(
        self,
        title: str,
        message: str,
        options: list[str],
        diff: DiffPayload | None = None,
    ) -> ConfirmationDialog:
        dialog = ConfirmationDialog(title, message, list(options), diff)
        self.state.confirmation = dialog
        self.mark_dirty()
        return dialog

    def hide_confirmation(self) -> None:
        self.state.confirmation = None
        self.mark_dirty()

    def select_confirmation_option(self, direction: int) -> str | None:
        """Move the dialog selection by *direction*, wrapping around.

        Returns the newly selected option.
        """
        dialog = self.state.confirmation
        if dialog is None or not dialog.options:
            return None
        dialog.selected_index = (dialog.selected_index + direction) % len(dialog.options)
        self.mark_dirty()
        return dialog.options[dialog.selected_index]

    def show_suggestions(self, suggestions: list[str], selected_index: int = 0) -> None:
        if not suggestions:
            self.hide_suggestions()
            return
        self.state.suggestions = list(suggestions)
        self.state.selected_suggestion_index = selected_index % len(suggestions)
        self.state.showing_suggestions = True
        self.mark_dirty()

    def hide_suggestions(self) -> None:
        self.state.suggestions = []
        self.state.selected_suggestion_index = 0
        self.state.showing_suggestions = False
        self.mark_dirty()

    def select_suggestion(self, index: int) -> None:
        if not self.state.suggestions:
            return
        self.state.selected_suggestion_index = index % len(self.state.suggestions)
        self.mark_dirty()

    def clear(self) -> None:
        """Drop the transcript."""
        self.state.messages.clear()
        self.mark_dirty()

    # ------------------------------------------------------------------
    # Terminal events
    # ------------------------------------------------------------------

    def handle_resize(self, columns: int | None = None, rows: int | None = None) -> None:
        """Pick up the new terminal size; the next frame starts from a clear screen."""
        self._width = columns if columns is not None else self.terminal.columns
        self._height = rows if rows is not None else self.terminal.rows
        logger.debug("Terminal resized to %dx%d", self._width, self._height)
        self._needs_clear = True
        self.mark_dirty()

    def request_full_redraw(self) -> None:
        self._needs_clear = True
        self.mark_dirty()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def mark_dirty(self) -> None:
        """Schedule a redraw after the debounce window.

        A pending redraw is cancelled and re-armed, so a burst of mutations
        produces one frame. Without a running event loop the redraw happens
        immediately.
        """
        if self._destroyed:
            return
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running event loop -- render synchronously
            self.flush()
            return
        self._timer = loop.call_later(self.config.debounce_seconds, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        self.flush()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def build_frame(self) -> Frame:
        return render_frame(self.state, self._width, self._height, self.theme, self.config)

    def flush(self) -> bool:
        """Draw now if anything changed. Returns whether a write happened."""
        self._cancel_timer()
        if self._destroyed:
            return False
        frame = self.build_frame()
        previous = self._previous
        if not self._needs_clear and frame == previous:
            return False

        out: list[str] = []
        if self._needs_clear:
            out.append(CLEAR_SCREEN + CURSOR_HOME)
            self._full_redraw_count += 1
        else:
            out.append(CURSOR_HOME)
        out.append(frame.text)
        if not self._needs_clear and previous is not None and len(frame.lines) < len(previous.lines):
            out.append(CLEAR_TO_END)
        out.append(frame.cursor_sequence())

        self.terminal.write("".join(out))
        self._write_count += 1
        self._previous = frame
        self._needs_clear = False
        return True

    def destroy(self) -> None:
        """Cancel any pending redraw and park the cursor below the frame."""
        if self._destroyed:
            return
        self._cancel_timer()
        self._destroyed = True
        if self._previous is not None:
            self.terminal.write(f"\x1b[{len(self._previous.lines)};1H\r\n")
