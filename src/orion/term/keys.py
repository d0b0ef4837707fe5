"""Table-driven classification of terminal key sequences.

A complete sequence (as produced by :class:`~orion.term.stdin_buffer.StdinBuffer`)
is looked up in fixed tables and turned into a :class:`KeyEvent`. Nothing here
touches a terminal, so decoding can be tested with plain strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from orion.term.utils import is_printable_text

KeyId = str

KeyKind = Literal["control", "char", "escape", "text", "paste"]

ESC = "\x1b"


class Key:
    """Named key constants."""

    enter = "enter"
    tab = "tab"
    shift_tab = "shift+tab"
    escape = "escape"
    backspace = "backspace"
    delete = "delete"
    home = "home"
    end = "end"
    up = "up"
    down = "down"
    left = "left"
    right = "right"
    ctrl_left = "ctrl+left"
    ctrl_right = "ctrl+right"
    alt_backspace = "alt+backspace"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

# Single control bytes (0x00-0x1F, 0x7F) -> key names. Bytes missing from
# this table are dropped.
CONTROL_KEYS: dict[str, KeyId] = {
    "\x01": "ctrl+a",
    "\x02": "ctrl+b",
    "\x03": "ctrl+c",
    "\x04": "ctrl+d",
    "\x05": "ctrl+e",
    "\x06": "ctrl+f",
    "\x08": "backspace",
    "\x09": "tab",
    "\x0a": "ctrl+j",
    "\x0b": "ctrl+k",
    "\x0c": "ctrl+l",
    "\x0d": "enter",
    "\x0e": "ctrl+n",
    "\x10": "ctrl+p",
    "\x15": "ctrl+u",
    "\x17": "ctrl+w",
    "\x1b": "escape",
    "\x7f": "backspace",
}

# Exact escape-prefixed sequences -> key names (CSI and SS3 forms).
ESCAPE_SEQUENCES: dict[str, KeyId] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[3~": "delete",
    "\x1b[1;5C": "ctrl+right",
    "\x1b[1;5D": "ctrl+left",
    "\x1b[1;3C": "alt+right",
    "\x1b[1;3D": "alt+left",
    "\x1bf": "alt+f",
    "\x1bb": "alt+b",
    "\x1b\x7f": "alt+backspace",
    "\x1b\x08": "alt+backspace",
    # The secondary-tab combination: back-tab (CSI Z) and ESC TAB.
    "\x1b[Z": "shift+tab",
    "\x1b\t": "shift+tab",
    "\x1b\x1b": "escape",
}


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """One classified unit of keyboard input.

    ``key`` is the symbolic name for control and escape events and ``None``
    for text; ``text`` carries the characters to insert for char, text and
    paste events.
    """

    kind: KeyKind
    key: KeyId | None = None
    text: str = ""


def parse_key(data: str) -> KeyId | None:
    """Return the symbolic key name for a control or escape sequence."""
    if data.startswith(ESC) and len(data) > 1:
        return ESCAPE_SEQUENCES.get(data)
    return CONTROL_KEYS.get(data)


def decode_key(data: str) -> KeyEvent | None:
    """Classify one complete input sequence.

    Returns ``None`` for anything that should be ignored: unrecognized
    escape sequences, unbound control bytes, and empty input.
    """
    if not data:
        return None

    if data.startswith(ESC) and len(data) > 1:
        name = ESCAPE_SEQUENCES.get(data)
        return KeyEvent("escape", name) if name is not None else None

    if len(data) == 1:
        code = ord(data)
        if code < 0x20 or code == 0x7F:
            name = CONTROL_KEYS.get(data)
            return KeyEvent("control", name) if name is not None else None
        if code < 0x7F:
            return KeyEvent("char", text=data)

    if is_printable_text(data):
        return KeyEvent("text", text=data)
    return None
