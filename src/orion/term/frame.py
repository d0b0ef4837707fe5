"""Frame builder: RenderState x terminal size -> screen lines + cursor.

Layout, top to bottom::

    header box
    chat window        (grows and shrinks to fill the screen)
    status line        (separator + indicators)
    input box          (bordered, one row per visual input row)
    overlay            (confirmation dialog, else command suggestions)

Everything here is a pure function of its arguments: no clock reads, no
terminal access. The spinner frame comes from ``processing_time``, so the
same state always renders the same frame.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass

from orion.term.config import SessionConfig
from orion.term.cursor import layout_input, locate_cursor
from orion.term.markdown import format_markdown
from orion.term.render_state import ConfirmationDialog, DiffPayload, Message, RenderState
from orion.term.theme import Style, Theme, default_theme, inverse
from orion.term.utils import split_graphemes, truncate_to_width, visible_width, wrap_text_with_ansi

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

PROMPT = "❯ "
CONTINUATION = "│ "

# Changed lines shown per diff before the rest is summarized
MAX_DIFF_LINES = 8

SUGGESTION_BOX_WIDTH = 30

# Columns between the input box's left edge and the first text cell:
# border, padding, prompt.
INPUT_TEXT_OFFSET = 1 + 1 + len(PROMPT)

# Box-drawing sets: top-left, top-right, bottom-left, bottom-right, horizontal, vertical
ROUND = ("╭", "╮", "╰", "╯", "─", "│")
DOUBLE = ("╔", "╗", "╚", "╝", "═", "║")
SINGLE = ("┌", "┐", "└", "┘", "─", "│")


@dataclass(frozen=True)
class Frame:
    """A fully laid out screen.

    ``lines`` are exactly ``width`` columns each. ``cursor_row`` and
    ``cursor_col`` are 0-based screen coordinates of the input cursor.
    """

    lines: tuple[str, ...]
    cursor_row: int
    cursor_col: int

    @property
    def text(self) -> str:
        return "\r\n".join(self.lines)

    def cursor_sequence(self) -> str:
        """Absolute cursor move (``CUP`` is 1-based)."""
        return f"\x1b[{self.cursor_row + 1};{self.cursor_col + 1}H"


def render_frame(
    state: RenderState,
    width: int,
    height: int,
    theme: Theme | None = None,
    config: SessionConfig | None = None,
) -> Frame:
    """Lay out *state* for a ``width`` x ``height`` terminal."""
    theme = theme or default_theme()
    config = config or SessionConfig()
    width = max(1, width)
    height = max(1, height)

    header = render_header(config, theme)
    status = render_status_line(state, width, theme)
    box, box_cursor_row, box_cursor_col = render_input_box(state, width, theme, config)
    if state.confirmation is not None:
        overlay = render_confirmation(state.confirmation, width, theme)
    elif state.showing_suggestions and state.suggestions:
        overlay = render_suggestions(state.suggestions, state.selected_suggestion_index, theme)
    else:
        overlay = []

    fixed_rows = len(header) + len(status) + 1 + len(box) + len(overlay)
    chat = render_chat(state.messages, width, theme, visible_messages(height, config))
    room = max(0, height - fixed_rows)
    if len(chat) > room:
        chat = chat[len(chat) - room :]

    lines = header + chat + status + [""]
    box_top = len(lines)
    lines += box + overlay
    cursor_row = box_top + box_cursor_row
    cursor_col = box_cursor_col

    # Still too tall (tiny terminal): drop rows from the top.
    if len(lines) > height:
        excess = len(lines) - height
        lines = lines[excess:]
        cursor_row -= excess

    cursor_row = max(0, min(cursor_row, len(lines) - 1))
    cursor_col = max(0, min(cursor_col, width - 1))
    fitted = tuple(truncate_to_width(line, width, pad=True) for line in lines)
    return Frame(fitted, cursor_row, cursor_col)


def visible_messages(height: int, config: SessionConfig) -> int:
    """Number of trailing messages the chat window draws."""
    return max(config.min_visible_messages, height - config.reserved_rows)


# ---------------------------------------------------------------------------
# Boxes
# ---------------------------------------------------------------------------


def boxed(
    content: list[str],
    width: int,
    border: Style,
    chars: tuple[str, str, str, str, str, str] = ROUND,
) -> list[str]:
    """Frame *content* lines in a box *width* columns wide with one column
    of horizontal padding."""
    tl, tr, bl, br, h, v = chars
    inner = max(0, width - 4)
    lines = [border(tl + h * max(0, width - 2) + tr)]
    for line in content:
        body = truncate_to_width(line, inner, pad=True)
        lines.append(f"{border(v)} {body} {border(v)}")
    lines.append(border(bl + h * max(0, width - 2) + br))
    return lines


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------


def render_header(config: SessionConfig, theme: Theme) -> list[str]:
    title = f"  {config.title}  "
    lines = boxed([title], visible_width(title) + 4, theme.header, DOUBLE)
    if config.subtitle:
        lines.append(theme.dim(config.subtitle))
    lines.append("")
    return lines


def render_chat(messages: list[Message], width: int, theme: Theme, limit: int) -> list[str]:
    lines: list[str] = []
    for message in messages[-limit:] if limit > 0 else []:
        lines.extend(render_message(message, width, theme))
        lines.append("")
    return lines


def _prefixed(prefix: str, text: str, width: int) -> list[str]:
    """Wrap *text* and hang it off *prefix* (later lines are indented)."""
    indent = " " * visible_width(prefix)
    wrapped = wrap_text_with_ansi(text, max(1, width - len(indent)))
    return [(prefix if i == 0 else indent) + line for i, line in enumerate(wrapped)]


def render_message(message: Message, width: int, theme: Theme) -> list[str]:
    if message.role == "user":
        return _prefixed(theme.user_prefix("> "), theme.user_text(message.content), width)

    if message.role == "assistant":
        return _prefixed(theme.assistant_prefix("⏺ "), format_markdown(message.content, theme), width)

    if message.role == "tool":
        title = theme.tool(f"⏺ {message.tool_name or 'tool'}")
        if message.file_name:
            title += theme.tool_file(f"({message.file_name})")
        lines = [truncate_to_width(title, width)]
        if message.content:
            lines.extend(_prefixed("  ⎿ ", theme.dim(message.content), width))
        if message.diff is not None:
            lines.extend(render_diff(message.diff, width, theme))
        return lines

    return _prefixed(theme.system("⏺ "), theme.system(message.content), width)


def render_diff(diff: DiffPayload, width: int, theme: Theme) -> list[str]:
    """Unified diff of a file edit, capped at :data:`MAX_DIFF_LINES` changes."""
    old = diff.old_content.splitlines()
    new = diff.new_content.splitlines()
    lines = [
        "  " + theme.diff_header(f"--- {diff.file_name}"),
        "  " + theme.diff_header(f"+++ {diff.file_name} (modified)"),
    ]
    shown = 0
    hidden = 0
    for index, line in enumerate(difflib.unified_diff(old, new, lineterm="", n=0)):
        if index < 2:
            # File headers, already drawn
            continue
        if line.startswith("@@"):
            if shown < MAX_DIFF_LINES:
                lines.append("  " + theme.diff_header(line))
            continue
        if shown >= MAX_DIFF_LINES:
            hidden += 1
            continue
        style = theme.diff_added if line.startswith("+") else theme.diff_removed
        lines.append("  " + style(truncate_to_width(f"{line[0]} {line[1:]}", max(1, width - 2))))
        shown += 1
    if hidden:
        lines.append("  " + theme.dim(f"… {hidden} more changed lines"))
    return lines


def spinner_frame(elapsed: float | None) -> str:
    if elapsed is None:
        return SPINNER_FRAMES[0]
    return SPINNER_FRAMES[int(elapsed * 10) % len(SPINNER_FRAMES)]


def render_status_line(state: RenderState, width: int, theme: Theme) -> list[str]:
    icon = "▶" if state.auto_edit else "⏸"
    parts = [
        theme.auto_edit(f"{icon} auto-edit: {'on' if state.auto_edit else 'off'}"),
        theme.model(f"≋ {state.current_model}"),
    ]
    if state.active_file:
        parts.append(theme.active_file(f"📝 {state.active_file}"))
    if state.mcp_status:
        parts.append(theme.mcp(f"◆ MCP: {state.mcp_status}"))

    tokens = f" ({state.token_count} tokens)" if state.token_count else ""
    if state.is_processing:
        elapsed = f" {int(state.processing_time)}s" if state.processing_time is not None else ""
        label = state.processing_status.capitalize()
        parts.append(theme.processing(f"{spinner_frame(state.processing_time)} {label}{elapsed}{tokens}"))
    elif state.processing_status == "error":
        parts.append(theme.error(f"✗ Error{tokens}"))
    elif tokens:
        parts.append(theme.dim(tokens.strip()))

    separator = theme.dim(" │ ")
    return [theme.dim("─" * width), separator.join(parts)]


def input_box_width(width: int, config: SessionConfig) -> int:
    if width < 12:
        return width
    return max(12, min(width - 4, config.max_input_width))


def render_input_box(
    state: RenderState, width: int, theme: Theme, config: SessionConfig
) -> tuple[list[str], int, int]:
    """Return the box lines and the cursor's row/column relative to the box."""
    box_width = input_box_width(width, config)
    text_width = max(2, box_width - INPUT_TEXT_OFFSET - 2)
    border = theme.border_busy if state.is_processing else theme.border_idle
    show_cursor = not state.is_processing

    if not state.input_value:
        placeholder = config.placeholder
        if show_cursor and placeholder:
            first, rest = placeholder[0], placeholder[1:]
            body = inverse(theme.placeholder(first)) + theme.placeholder(rest)
        elif show_cursor:
            body = inverse(" ")
        else:
            body = theme.placeholder(placeholder)
        return boxed([PROMPT + body], box_width, border), 1, INPUT_TEXT_OFFSET

    rows = layout_input(state.input_value, text_width)
    cursor_row, cursor_col = locate_cursor(rows, state.cursor_position)

    content: list[str] = []
    for index, row in enumerate(rows):
        prefix = PROMPT if row.line_index == 0 and row.first else (CONTINUATION if row.first else "  ")
        text = _display(row.text)
        if show_cursor and index == cursor_row:
            text = _with_cursor(row.text, state.cursor_position - row.start)
        content.append(prefix + text)

    return boxed(content, box_width, border), 1 + cursor_row, INPUT_TEXT_OFFSET + cursor_col


def _display(text: str) -> str:
    return text.replace("\t", "   ")


def _with_cursor(text: str, offset: int) -> str:
    """Draw the cursor as an inverse-video cell at *offset* within *text*."""
    before, after = text[:offset], text[offset:]
    units = split_graphemes(after)
    if not units:
        return _display(before) + inverse(" ")
    return _display(before) + inverse(_display(units[0])) + _display("".join(units[1:]))


# ---------------------------------------------------------------------------
# Overlays
# ---------------------------------------------------------------------------


def render_confirmation(dialog: ConfirmationDialog, width: int, theme: Theme) -> list[str]:
    box_width = max(12, min(width, 80))
    inner = box_width - 4
    content = [theme.dialog_title(dialog.title)]
    content.extend(wrap_text_with_ansi(dialog.message, inner))
    if dialog.diff is not None:
        content.extend(render_diff(dialog.diff, inner, theme))
    content.append("")
    for index, option in enumerate(dialog.options):
        if index == dialog.selected_index:
            content.append(theme.selected(f"▶ {option}"))
        else:
            content.append(f"  {option}")
    content.append("")
    content.append(theme.dim("↑↓ Navigate • Enter Select • Esc Cancel"))
    return [theme.dim("─" * width)] + boxed(content, box_width, theme.dialog_border, DOUBLE)


def render_suggestions(suggestions: list[str], selected: int, theme: Theme) -> list[str]:
    if not suggestions:
        return []
    selected %= len(suggestions)
    content = [
        theme.selected(f"▶ {name}") if i == selected else "  " + theme.unselected(name)
        for i, name in enumerate(suggestions)
    ]
    return boxed(content, SUGGESTION_BOX_WIDTH, theme.unselected, SINGLE)
