"""Terminal text utilities: ANSI-aware width measurement, truncation, wrapping.

Widths are measured per grapheme cluster (``grapheme``) using terminal cell
widths (``wcwidth``), so wide CJK characters and emoji occupy two columns.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# ANSI patterns
# ---------------------------------------------------------------------------

# SGR and the small set of cursor/erase sequences this package emits.
_CSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
_SGR_RESET = "\x1b[0m"

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def strip_ansi(text: str) -> str:
    """Remove CSI escape sequences from *text*."""
    return _CSI_RE.sub("", text)


def split_graphemes(text: str) -> list[str]:
    """Split *text* into user-perceived characters."""
    return list(grapheme.graphemes(text))


# ---------------------------------------------------------------------------
# Width measurement
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the number of terminal columns a grapheme cluster occupies."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tones, regional indicators: emoji presentation
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    if unicodedata.category(first) in ("Mn", "Me", "Mc", "Cf"):
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*, ignoring ANSI codes.

    Tabs count as three columns.
    """
    if not text:
        return 0

    stripped = strip_ansi(text).replace("\t", "   ")
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(grapheme_width(g) for g in grapheme.graphemes(stripped))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = total
    return total


# ---------------------------------------------------------------------------
# Tokenizing styled text
# ---------------------------------------------------------------------------


def _tokens(text: str) -> list[tuple[str, int]]:
    """Split *text* into ``(token, width)`` pairs.

    A token is either a complete CSI sequence (width 0) or one grapheme
    cluster.
    """
    tokens: list[tuple[str, int]] = []
    pos = 0
    for match in _CSI_RE.finditer(text):
        if match.start() > pos:
            for g in grapheme.graphemes(text[pos : match.start()]):
                tokens.append((g, 3 if g == "\t" else grapheme_width(g)))
        tokens.append((match.group(0), 0))
        pos = match.end()
    if pos < len(text):
        for g in grapheme.graphemes(text[pos:]):
            tokens.append((g, 3 if g == "\t" else grapheme_width(g)))
    return tokens


class AnsiStyleTracker:
    """Remembers the SGR codes active since the last reset.

    Used to re-open styles on a continuation line after wrapping.
    """

    def __init__(self) -> None:
        self._active: list[str] = []

    def process(self, code: str) -> None:
        if not code.endswith("m"):
            return
        params = code[2:-1]
        if params in ("", "0"):
            self._active.clear()
        else:
            self._active.append(code)

    def active_codes(self) -> str:
        return "".join(self._active)

    def has_active(self) -> bool:
        return bool(self._active)


# ---------------------------------------------------------------------------
# Truncation / padding
# ---------------------------------------------------------------------------


def truncate_to_width(text: str, max_width: int, ellipsis: str = "", pad: bool = False) -> str:
    """Cut *text* so it fits in *max_width* columns, keeping ANSI codes intact.

    When *pad* is true the result is right-padded with spaces to exactly
    *max_width* columns.
    """
    if max_width <= 0:
        return ""

    width = visible_width(text)
    if width <= max_width:
        return pad_to_width(text, max_width) if pad else text

    target = max_width - visible_width(ellipsis)
    if target < 0:
        target, ellipsis = max_width, ""

    out: list[str] = []
    used = 0
    styled = False
    for token, w in _tokens(text):
        if w == 0 and token.startswith("\x1b"):
            out.append(token)
            styled = True
            continue
        if used + w > target:
            break
        out.append(token)
        used += w

    result = "".join(out)
    if styled:
        result += _SGR_RESET
    result += ellipsis
    used += visible_width(ellipsis)
    if pad and used < max_width:
        result += " " * (max_width - used)
    return result


def pad_to_width(text: str, width: int) -> str:
    """Right-pad *text* with spaces up to *width* visible columns."""
    return text + " " * max(0, width - visible_width(text))


# ---------------------------------------------------------------------------
# Wrapping
# ---------------------------------------------------------------------------


def wrap_text_with_ansi(text: str, width: int) -> list[str]:
    """Word-wrap *text* to *width* columns, preserving ANSI styling.

    Embedded newlines start a new line. Styles open at a break are closed at
    the end of the line and re-opened on the next one. Words longer than the
    width are split at grapheme boundaries.
    """
    if width <= 0:
        return [text]

    tracker = AnsiStyleTracker()
    result: list[str] = []
    for physical in text.split("\n"):
        result.extend(_wrap_line(physical, width, tracker))
    return result


def _wrap_line(line: str, width: int, tracker: AnsiStyleTracker) -> list[str]:
    lines: list[str] = []
    current: list[str] = [tracker.active_codes()]
    current_width = 0
    # Index into ``current`` just after the last space.
    break_at: int | None = None

    def finish(parts: list[str]) -> str:
        joined = "".join(parts)
        return joined + _SGR_RESET if tracker.has_active() else joined

    for token, w in _tokens(line):
        if w == 0 and token.startswith("\x1b"):
            tracker.process(token)
            current.append(token)
            continue

        if current_width + w > width and current_width > 0:
            if token != " " and break_at is not None:
                head, tail = current[:break_at], current[break_at:]
                while head and head[-1] == " ":
                    head.pop()
                lines.append(finish(head))
                current = [tracker.active_codes()] + tail
                current_width = visible_width("".join(tail))
            else:
                lines.append(finish(current))
                current = [tracker.active_codes()]
                current_width = 0
            break_at = None
            if token == " ":
                continue

        current.append(token)
        current_width += w
        if token == " ":
            break_at = len(current)

    lines.append(finish(current))
    return lines


# ---------------------------------------------------------------------------
# Character classification
# ---------------------------------------------------------------------------


def is_printable_text(text: str) -> bool:
    """Return ``True`` if *text* contains no C0/C1 control characters."""
    return bool(text) and not any(
        ord(ch) < 0x20 or ord(ch) == 0x7F or 0x80 <= ord(ch) <= 0x9F for ch in text
    )
