"""Terminal session: wires input decoding, line editing and rendering.

A :class:`TerminalSession` owns one terminal for its lifetime. Key events
from the :class:`~orion.term.input_decoder.InputDecoder` are resolved to
editor actions through the keybindings, applied to the line buffer (or the
suggestion list, or the confirmation dialog), and mirrored into the
:class:`~orion.term.renderer.DiffRenderer`. Applications talk to it through
three callbacks and the renderer's mutator surface.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from orion.term.config import SessionConfig
from orion.term.errors import OrionTermError
from orion.term.input_decoder import InputDecoder
from orion.term.keybindings import SPECIAL_KEY_NAMES, EditorAction, KeybindingsManager
from orion.term.keys import KeyEvent, KeyId
from orion.term.line_editor import LineEditor
from orion.term.render_state import DiffPayload, Message, MessageRole, ProcessingStatus
from orion.term.renderer import DiffRenderer
from orion.term.suggestions import SuggestionOverlay, SuggestionSource
from orion.term.terminal import ProcessTerminal, Terminal
from orion.term.theme import Theme

logger = logging.getLogger(__name__)


class TerminalSession:
    """An interactive input line plus a rendered chat screen.

    Callbacks:

    * ``on_completed_line(text)``: a submitted (trimmed, non-empty) line, or
      the chosen option of a confirmation dialog.
    * ``on_special_key(name)``: one of ``ctrl+c``, ``ctrl+l``, ``escape``,
      ``shift+tab``.
    * ``get_suggestions(prefix)``: candidates for the text after the
      trigger prefix.

    Exceptions raised by callbacks propagate out of the input handler.
    """

    def __init__(
        self,
        *,
        terminal: Terminal | None = None,
        on_completed_line: Callable[[str], None] | None = None,
        on_special_key: Callable[[str], None] | None = None,
        get_suggestions: SuggestionSource | None = None,
        config: SessionConfig | None = None,
        theme: Theme | None = None,
        keybindings: dict[EditorAction, KeyId | list[KeyId]] | None = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.terminal: Terminal = terminal or ProcessTerminal(write_log=self.config.write_log or None)
        self.on_completed_line = on_completed_line
        self.on_special_key = on_special_key

        self.renderer = DiffRenderer(self.terminal, theme=theme, config=self.config)
        self.editor = LineEditor(history_size=self.config.history_size)
        self.suggestions = SuggestionOverlay(get_suggestions, trigger=self.config.trigger)
        self.keybindings = KeybindingsManager(keybindings)
        self.decoder = InputDecoder(
            self.handle_event,
            escape_timeout=self.config.escape_timeout_seconds,
        )

        self._started = False
        self._stopped = False
        self._closed: asyncio.Event | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    def start(self) -> None:
        """Take over the terminal and draw the first frame."""
        if self._started:
            raise OrionTermError("session already started")
        self._started = True
        self._closed = asyncio.Event()
        self.terminal.start(
            self.handle_input,
            self._on_resize,
            on_line=self.submit_line,
            on_eof=self.exit,
        )
        if self.terminal.line_mode:
            logger.info("Terminal session running in line-buffered mode")
        self.renderer.handle_resize()

    def stop(self) -> None:
        """Release the terminal. Calling it more than once is harmless."""
        if not self._started or self._stopped:
            return
        self._stopped = True
        self.decoder.close()
        self.renderer.destroy()
        self.terminal.stop()
        if self._closed is not None:
            self._closed.set()

    def exit(self) -> None:
        """Ask :meth:`run` to return."""
        if self._closed is not None:
            self._closed.set()

    async def run(self) -> None:
        """Start the session and serve input until :meth:`exit` is called."""
        self.start()
        assert self._closed is not None
        try:
            await self._closed.wait()
        finally:
            self.stop()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self, data: bytes | str) -> None:
        """Feed raw terminal input."""
        if self._stopped:
            return
        self.decoder.feed(data)

    def submit_line(self, text: str) -> None:
        """Submit a whole line at once (line-buffered input)."""
        self.editor.set_value(text)
        self._submit(self.editor.submit())

    def handle_event(self, event: KeyEvent) -> None:
        """Apply one decoded key event."""
        if event.kind in ("char", "text", "paste"):
            if self.renderer.state.confirmation is not None:
                return
            self.editor.insert_char(event.text)
            self._after_edit()
            return

        action = self.keybindings.action_for(event.key)
        if action is None:
            logger.debug("No binding for key %r", event.key)
            return

        if self.renderer.state.confirmation is not None:
            self._handle_confirmation(action)
            return

        if action in SPECIAL_KEY_NAMES:
            self._handle_special(action)
            return

        if self.editor.state.showing_suggestions and self._handle_suggestion(action):
            return

        self._handle_edit(action)

    def _handle_confirmation(self, action: EditorAction) -> None:
        if action == "up":
            self.renderer.select_confirmation_option(-1)
        elif action == "down":
            self.renderer.select_confirmation_option(1)
        elif action == "submit":
            dialog = self.renderer.state.confirmation
            if dialog is not None and dialog.options:
                self._emit_line(dialog.options[dialog.selected_index])
        elif action == "redraw":
            self._handle_special(action)
        elif action in ("cancel", "interrupt"):
            self._emit_special(SPECIAL_KEY_NAMES[action])

    def _handle_special(self, action: EditorAction) -> None:
        if action == "redraw":
            self.renderer.request_full_redraw()
        elif action == "cancel":
            if self.editor.state.showing_suggestions:
                self.suggestions.dismiss(self.editor.state)
                self._sync()
                return
            self.renderer.set_processing(False)
        self._emit_special(SPECIAL_KEY_NAMES[action])

    def _handle_suggestion(self, action: EditorAction) -> bool:
        state = self.editor.state
        if action == "up":
            self.suggestions.select_previous(state)
        elif action == "down":
            self.suggestions.select_next(state)
        elif action in ("tab", "submit"):
            self.suggestions.accept(state)
        else:
            return False
        self._sync()
        return True

    def _handle_edit(self, action: EditorAction) -> None:
        editor = self.editor
        if action == "cursorLeft":
            editor.move_cursor(-1)
        elif action == "cursorRight":
            editor.move_cursor(1)
        elif action == "cursorWordLeft":
            editor.move_word_backward()
        elif action == "cursorWordRight":
            editor.move_word_forward()
        elif action == "cursorLineStart":
            editor.move_to_line_start()
        elif action == "cursorLineEnd":
            editor.move_to_line_end()
        elif action == "up":
            editor.navigate_history(-1)
        elif action == "down":
            editor.navigate_history(1)
        elif action == "tab":
            self._after_edit()
            return
        elif action == "submit":
            self._submit(editor.handle_enter())
            return
        else:
            if action == "deleteCharBackward":
                editor.backspace()
            elif action == "deleteCharForward":
                editor.delete_forward()
            elif action == "deleteWordBackward":
                editor.delete_word_backward()
            elif action == "deleteToLineStart":
                editor.delete_to_line_start()
            elif action == "deleteToLineEnd":
                editor.delete_to_line_end()
            elif action == "newLine":
                editor.insert_newline()
            self._after_edit()
            return
        self._sync()

    def _after_edit(self) -> None:
        self.suggestions.refresh(self.editor.state)
        self._sync()

    def _submit(self, line: str | None) -> None:
        self.suggestions.hide(self.editor.state)
        self._sync()
        if line is not None:
            self._emit_line(line)

    def _sync(self) -> None:
        """Mirror the line buffer into the render state."""
        state = self.editor.state
        self.renderer.update_input(state.value, state.cursor_position)
        if state.showing_suggestions:
            self.renderer.show_suggestions(state.suggestions, state.selected_suggestion_index)
        elif self.renderer.state.showing_suggestions:
            self.renderer.hide_suggestions()

    def _emit_line(self, line: str) -> None:
        if self.on_completed_line is not None:
            self.on_completed_line(line)

    def _emit_special(self, name: str) -> None:
        if self.on_special_key is not None:
            self.on_special_key(name)

    def _on_resize(self) -> None:
        self.renderer.handle_resize()

    # ------------------------------------------------------------------
    # Line buffer access
    # ------------------------------------------------------------------

    @property
    def value(self) -> str:
        return self.editor.value

    @property
    def history(self) -> list[str]:
        return list(self.editor.state.history)

    def set_value(self, text: str) -> None:
        self.editor.set_value(text)
        self._after_edit()

    def clear_history(self) -> None:
        self.editor.clear_history()

    # ------------------------------------------------------------------
    # Render-state mutators
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
        return self.renderer.add_message(
            role, content, tool_name=tool_name, file_name=file_name, diff=diff
        )

    def set_processing(self, status: bool | ProcessingStatus, elapsed: float | None = None) -> None:
        self.renderer.set_processing(status, elapsed)

    def set_auto_edit(self, enabled: bool) -> None:
        self.renderer.set_auto_edit(enabled)

    def set_model(self, model: str) -> None:
        self.renderer.set_model(model)

    def set_active_file(self, file_name: str | None) -> None:
        self.renderer.set_active_file(file_name)

    def set_mcp_status(self, status: str | None) -> None:
        self.renderer.set_mcp_status(status)

    def set_token_count(self, count: int | None) -> None:
        self.renderer.set_token_count(count)

    def show_confirmation(
        self,
        title: str,
        message: str,
        options: list[str],
        diff: DiffPayload | None = None,
    ) -> None:
        self.renderer.show_confirmation(title, message, options, diff)

    def hide_confirmation(self) -> None:
        self.renderer.hide_confirmation()

    def clear(self) -> None:
        self.renderer.clear()
