"""Light Markdown formatting for assistant messages.

Assistant replies are shown inline in the chat window, so only the
constructs that read well in a terminal are styled: emphasis, inline code,
fenced/indented code, headings, lists and quotes. Everything else falls
back to its plain text.
"""

from __future__ import annotations

from markdown_it import MarkdownIt
from markdown_it.token import Token

from orion.term.theme import Theme

# CommonMark plus strikethrough; tables are left as plain text.
_md_parser = MarkdownIt("commonmark").enable("strikethrough")

_STRIKE_ON = "\x1b[9m"
_STRIKE_OFF = "\x1b[29m"


def format_markdown(text: str, theme: Theme) -> str:
    """Render *text* to a string with ANSI styling and ``\\n`` line breaks."""
    tokens = _md_parser.parse(text)
    lines: list[str] = []
    # Prefix stack for nested lists and quotes
    prefixes: list[str] = []
    ordered_counters: list[int | None] = []
    # Stack index -> list marker still to be drawn on the item's first line
    pending_markers: dict[int, str] = {}

    def emit(block: str) -> None:
        for i, line in enumerate(block.split("\n")):
            if i == 0 and pending_markers:
                first = [pending_markers.get(depth, prefix) for depth, prefix in enumerate(prefixes)]
                pending_markers.clear()
                lines.append("".join(first) + line)
            else:
                lines.append("".join(prefixes) + line)

    for index, token in enumerate(tokens):
        kind = token.type

        if kind == "inline":
            rendered = _render_inline(token.children or [], theme)
            heading = index > 0 and tokens[index - 1].type == "heading_open"
            emit(theme.bold(rendered) if heading else rendered)
        elif kind in ("fence", "code_block"):
            fence = f"```{token.info.strip()}" if kind == "fence" else None
            if fence is not None:
                emit(theme.dim(fence))
            emit("\n".join(theme.code(line) for line in token.content.rstrip("\n").split("\n")))
            if fence is not None:
                emit(theme.dim("```"))
        elif kind == "bullet_list_open":
            ordered_counters.append(None)
        elif kind == "ordered_list_open":
            start = token.attrGet("start")
            ordered_counters.append(int(start) if start is not None else 1)
        elif kind in ("bullet_list_close", "ordered_list_close"):
            ordered_counters.pop()
            if not prefixes:
                lines.append("")
        elif kind == "list_item_open":
            counter = ordered_counters[-1] if ordered_counters else None
            if counter is None:
                marker = "• "
            else:
                marker = f"{counter}. "
                ordered_counters[-1] = counter + 1
            pending_markers[len(prefixes)] = marker
            prefixes.append(" " * len(marker))
        elif kind == "list_item_close":
            pending_markers.pop(len(prefixes) - 1, None)
            prefixes.pop()
        elif kind == "blockquote_open":
            prefixes.append(theme.dim("│ "))
        elif kind == "blockquote_close":
            prefixes.pop()
        elif kind == "hr":
            emit(theme.dim("───"))
        elif kind in ("paragraph_close", "heading_close") and not prefixes:
            lines.append("")

    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines)


def _render_inline(children: list[Token], theme: Theme) -> str:
    out: list[str] = []
    # Each open tag pushes the index where its content starts.
    spans: list[tuple[str, int]] = []

    for child in children:
        kind = child.type
        if kind == "text":
            out.append(child.content)
        elif kind == "code_inline":
            out.append(theme.code(child.content))
        elif kind in ("softbreak", "hardbreak"):
            out.append("\n")
        elif kind in ("strong_open", "em_open", "s_open"):
            spans.append((kind, len(out)))
        elif kind in ("strong_close", "em_close", "s_close") and spans:
            opened, start = spans.pop()
            inner = "".join(out[start:])
            del out[start:]
            if opened == "strong_open":
                out.append(theme.bold(inner))
            elif opened == "em_open":
                out.append(theme.italic(inner))
            else:
                out.append(f"{_STRIKE_ON}{inner}{_STRIKE_OFF}")
        elif kind == "image":
            out.append(child.content or "[image]")
        elif kind == "html_inline":
            out.append(child.content)
        # link_open/link_close carry no text of their own

    return "".join(out)
