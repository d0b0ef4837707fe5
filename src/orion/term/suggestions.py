"""Command suggestion overlay and the registry it queries.

The overlay opens while the input starts with the trigger prefix and the
registry has candidates for what follows it. Candidates are kept with the
trigger attached (``/help``), so accepting one simply replaces the buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from orion.term.line_editor import LineBufferState

DEFAULT_TRIGGER = "/"

SuggestionSource = Callable[[str], list[str]]


@dataclass
class SlashCommand:
    name: str
    description: str | None = None


class CommandRegistry:
    """A set of named commands answering prefix queries."""

    def __init__(self, commands: list[SlashCommand] | None = None) -> None:
        self._commands: dict[str, SlashCommand] = {}
        for command in commands or []:
            self.register(command)

    def register(self, command: SlashCommand | str, description: str | None = None) -> None:
        if isinstance(command, str):
            command = SlashCommand(command, description)
        self._commands[command.name] = command

    def unregister(self, name: str) -> None:
        self._commands.pop(name, None)

    def get(self, name: str) -> SlashCommand | None:
        return self._commands.get(name)

    def names(self) -> list[str]:
        return sorted(self._commands, key=lambda n: (n.lower(), n))

    def commands(self) -> list[SlashCommand]:
        return [self._commands[name] for name in self.names()]

    def get_suggestions(self, prefix: str) -> list[str]:
        """Names starting with *prefix* (case-insensitive), alphabetically."""
        needle = prefix.lower()
        return [name for name in self.names() if name.lower().startswith(needle)]


class SuggestionOverlay:
    """Suggestion list transitions over :class:`LineBufferState`."""

    def __init__(
        self,
        source: SuggestionSource | None,
        *,
        trigger: str = DEFAULT_TRIGGER,
    ) -> None:
        self._source = source
        self.trigger = trigger

    def refresh(self, state: LineBufferState) -> None:
        """Re-query candidates for the current buffer, opening or hiding the list."""
        if self._source is None or not self.trigger or not state.value.startswith(self.trigger):
            self.hide(state)
            return

        query = state.value[len(self.trigger) :]
        candidates = [self._with_trigger(c) for c in self._source(query)]
        if not candidates:
            self.hide(state)
            return

        state.suggestions = candidates
        state.selected_suggestion_index = 0
        state.showing_suggestions = True

    def _with_trigger(self, candidate: str) -> str:
        return candidate if candidate.startswith(self.trigger) else self.trigger + candidate

    def hide(self, state: LineBufferState) -> None:
        state.showing_suggestions = False
        state.suggestions = []
        state.selected_suggestion_index = 0

    def select_next(self, state: LineBufferState) -> None:
        if state.showing_suggestions and state.suggestions:
            state.selected_suggestion_index = (state.selected_suggestion_index + 1) % len(state.suggestions)

    def select_previous(self, state: LineBufferState) -> None:
        if state.showing_suggestions and state.suggestions:
            state.selected_suggestion_index = (state.selected_suggestion_index - 1) % len(state.suggestions)

    def current(self, state: LineBufferState) -> str | None:
        if not state.showing_suggestions or not state.suggestions:
            return None
        return state.suggestions[state.selected_suggestion_index % len(state.suggestions)]

    def accept(self, state: LineBufferState) -> str | None:
        """Replace the buffer with the selected candidate and close the list."""
        selected = self.current(state)
        if selected is None:
            return None
        state.value = selected
        state.cursor_position = len(selected)
        state.is_multiline = False
        state.history_index = -1
        self.hide(state)
        return selected

    def dismiss(self, state: LineBufferState) -> None:
        """Close the list and leave the buffer untouched."""
        self.hide(state)
