"""Color theme for the session frame.

A theme is a bag of ``str -> str`` stylers, the same shape the list and
editor themes take, so callers can swap in their own palette.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

Style = Callable[[str], str]


def sgr(open_code: str, close_code: str) -> Style:
    """Build a styler wrapping text in ``ESC[<open>m ... ESC[<close>m``."""

    def apply(text: str) -> str:
        if not text:
            return text
        return f"\x1b[{open_code}m{text}\x1b[{close_code}m"

    return apply


def plain(text: str) -> str:
    return text


INVERSE_ON = "\x1b[7m"
INVERSE_OFF = "\x1b[27m"


def inverse(text: str) -> str:
    """Inverse video, used to draw the cursor cell inline."""
    return f"{INVERSE_ON}{text}{INVERSE_OFF}"


@dataclass
class Theme:
    header: Style
    dim: Style
    user_prefix: Style
    user_text: Style
    assistant_prefix: Style
    tool: Style
    tool_file: Style
    system: Style
    diff_added: Style
    diff_removed: Style
    diff_header: Style
    auto_edit: Style
    model: Style
    active_file: Style
    mcp: Style
    processing: Style
    error: Style
    border_idle: Style
    border_busy: Style
    placeholder: Style
    selected: Style
    unselected: Style
    dialog_title: Style
    dialog_border: Style
    bold: Style
    italic: Style
    code: Style


def default_theme() -> Theme:
    """The stock palette: cyan header, green user, blue assistant, yellow tools."""
    return Theme(
        header=sgr("1;36", "0"),
        dim=sgr("2", "22"),
        user_prefix=sgr("32", "39"),
        user_text=sgr("97", "39"),
        assistant_prefix=sgr("34", "39"),
        tool=sgr("33", "39"),
        tool_file=sgr("90", "39"),
        system=sgr("90", "39"),
        diff_added=sgr("32", "39"),
        diff_removed=sgr("31", "39"),
        diff_header=sgr("90", "39"),
        auto_edit=sgr("36", "39"),
        model=sgr("35", "39"),
        active_file=sgr("33", "39"),
        mcp=sgr("32", "39"),
        processing=sgr("33", "39"),
        error=sgr("31", "39"),
        border_idle=sgr("34", "39"),
        border_busy=sgr("33", "39"),
        placeholder=sgr("90", "39"),
        selected=sgr("36", "39"),
        unselected=sgr("90", "39"),
        dialog_title=sgr("1;33", "0"),
        dialog_border=sgr("33", "39"),
        bold=sgr("1", "22"),
        italic=sgr("3", "23"),
        code=sgr("32", "39"),
    )


def monochrome_theme() -> Theme:
    """A theme without colors; useful for tests and dumb terminals."""
    return Theme(**{name: plain for name in Theme.__dataclass_fields__})
