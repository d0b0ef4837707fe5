"""Key name -> editor action bindings."""

from __future__ import annotations

from typing import Literal

from orion.term.keys import Key, KeyId

EditorAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
    # Text input
    "newLine",
    "submit",
    "tab",
    # History / selection
    "up",
    "down",
    # Signals for the application
    "interrupt",
    "redraw",
    "cancel",
    "toggle",
]

DEFAULT_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    "cursorLeft": [Key.left, Key.ctrl("b")],
    "cursorRight": [Key.right, Key.ctrl("f")],
    "cursorWordLeft": [Key.ctrl_left, Key.alt("left"), Key.alt("b")],
    "cursorWordRight": [Key.ctrl_right, Key.alt("right"), Key.alt("f")],
    "cursorLineStart": [Key.home, Key.ctrl("a")],
    "cursorLineEnd": [Key.end, Key.ctrl("e")],
    "deleteCharBackward": Key.backspace,
    "deleteCharForward": [Key.delete, Key.ctrl("d")],
    "deleteWordBackward": [Key.ctrl("w"), Key.alt_backspace],
    "deleteToLineStart": Key.ctrl("u"),
    "deleteToLineEnd": Key.ctrl("k"),
    "newLine": Key.ctrl("j"),
    "submit": Key.enter,
    "tab": Key.tab,
    "up": [Key.up, Key.ctrl("p")],
    "down": [Key.down, Key.ctrl("n")],
    "interrupt": Key.ctrl("c"),
    "redraw": Key.ctrl("l"),
    "cancel": Key.escape,
    "toggle": Key.shift_tab,
}

# Actions reported to the application's special-key handler, with the name
# the handler receives.
SPECIAL_KEY_NAMES: dict[EditorAction, str] = {
    "interrupt": Key.ctrl("c"),
    "redraw": Key.ctrl("l"),
    "cancel": Key.escape,
    "toggle": Key.shift_tab,
}


class KeybindingsManager:
    """Resolves key names to actions; user overrides replace whole entries."""

    def __init__(
        self,
        config: dict[EditorAction, KeyId | list[KeyId]] | None = None,
    ) -> None:
        self._action_for_key: dict[KeyId, EditorAction] = {}
        self._keys_for_action: dict[EditorAction, list[KeyId]] = {}
        self._build({**DEFAULT_KEYBINDINGS, **(config or {})})

    def _build(self, bindings: dict[EditorAction, KeyId | list[KeyId]]) -> None:
        self._action_for_key.clear()
        self._keys_for_action.clear()
        for action, keys in bindings.items():
            key_list = [keys] if isinstance(keys, str) else list(keys)
            self._keys_for_action[action] = key_list
            for key in key_list:
                self._action_for_key[key] = action

    def action_for(self, key: KeyId | None) -> EditorAction | None:
        if key is None:
            return None
        return self._action_for_key.get(key)

    def get_keys(self, action: EditorAction) -> list[KeyId]:
        return list(self._keys_for_action.get(action, []))
