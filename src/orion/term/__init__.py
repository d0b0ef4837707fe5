"""orion-term: terminal session engine with line editing and flicker-free rendering."""

# Configuration
from orion.term.config import SessionConfig

# Cursor layout
from orion.term.cursor import InputRow, layout_input, locate_cursor

# Errors
from orion.term.errors import OrionTermError

# Frames
from orion.term.frame import Frame, render_frame

# Input decoding
from orion.term.input_decoder import InputDecoder

# Keybindings
from orion.term.keybindings import (
    DEFAULT_KEYBINDINGS,
    EditorAction,
    KeybindingsManager,
)

# Keyboard input handling
from orion.term.keys import Key, KeyEvent, KeyId, decode_key, parse_key

# Line editing
from orion.term.line_editor import LineBufferState, LineEditor, should_continue_multiline

# Markdown
from orion.term.markdown import format_markdown

# Render state
from orion.term.render_state import (
    ConfirmationDialog,
    DiffPayload,
    Message,
    MessageRole,
    ProcessingStatus,
    RenderState,
)

# Rendering
from orion.term.renderer import DiffRenderer

# Session
from orion.term.session import TerminalSession

# Input buffering
from orion.term.stdin_buffer import StdinBuffer

# Suggestions
from orion.term.suggestions import CommandRegistry, SlashCommand, SuggestionOverlay

# Terminal interface and implementations
from orion.term.terminal import ProcessTerminal, Terminal

# Themes
from orion.term.theme import Theme, default_theme, monochrome_theme

# Utilities
from orion.term.utils import truncate_to_width, visible_width, wrap_text_with_ansi

__all__ = [
    # Configuration
    "SessionConfig",
    # Cursor layout
    "InputRow",
    "layout_input",
    "locate_cursor",
    # Errors
    "OrionTermError",
    # Frames
    "Frame",
    "render_frame",
    # Input decoding
    "InputDecoder",
    # Keybindings
    "DEFAULT_KEYBINDINGS",
    "EditorAction",
    "KeybindingsManager",
    # Keys
    "Key",
    "KeyEvent",
    "KeyId",
    "decode_key",
    "parse_key",
    # Line editing
    "LineBufferState",
    "LineEditor",
    "should_continue_multiline",
    # Markdown
    "format_markdown",
    # Render state
    "ConfirmationDialog",
    "DiffPayload",
    "Message",
    "MessageRole",
    "ProcessingStatus",
    "RenderState",
    # Rendering
    "DiffRenderer",
    # Session
    "TerminalSession",
    # Input buffering
    "StdinBuffer",
    # Suggestions
    "CommandRegistry",
    "SlashCommand",
    "SuggestionOverlay",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Themes
    "Theme",
    "default_theme",
    "monochrome_theme",
    # Utilities
    "truncate_to_width",
    "visible_width",
    "wrap_text_with_ansi",
]
