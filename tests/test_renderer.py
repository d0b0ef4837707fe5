"""Tests for orion.term.renderer.DiffRenderer.

Uses the VirtualTerminal to capture output and verify when, and what, the
renderer writes.
"""

from __future__ import annotations

import asyncio

import pytest

from orion.term.config import SessionConfig
from orion.term.renderer import CLEAR_SCREEN, CLEAR_TO_END, CURSOR_HOME, DiffRenderer
from orion.term.theme import monochrome_theme

from .virtual_terminal import VirtualTerminal


def make_renderer(debounce_ms: int = 100, rows: int = 24, columns: int = 80) -> tuple[DiffRenderer, VirtualTerminal]:
    terminal = VirtualTerminal(rows=rows, columns=columns)
    renderer = DiffRenderer(
        terminal,
        theme=monochrome_theme(),
        config=SessionConfig(debounce_ms=debounce_ms),
    )
    return renderer, terminal


# ---------------------------------------------------------------------------
# Synchronous rendering (no event loop)
# ---------------------------------------------------------------------------


class TestSynchronousRender:
    def test_mutation_renders_immediately_without_loop(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_model("test-model")
        assert terminal.write_count == 1
        assert "test-model" in terminal.output

    def test_first_frame_clears_screen(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_auto_edit(True)
        assert terminal.writes[0].startswith(CLEAR_SCREEN + CURSOR_HOME)
        assert renderer.full_redraws == 1

    def test_later_frames_only_home_the_cursor(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_auto_edit(True)
        renderer.set_auto_edit(False)
        second = terminal.writes[1]
        assert second.startswith(CURSOR_HOME)
        assert CLEAR_SCREEN not in second

    def test_identical_frame_writes_nothing(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_model("a")
        renderer.set_model("a")
        assert terminal.write_count == 1
        assert renderer.flush() is False

    def test_frame_ends_with_cursor_position(self) -> None:
        renderer, terminal = make_renderer()
        renderer.update_input("hi", 2)
        frame = renderer.previous_frame
        assert frame is not None
        assert terminal.output.endswith(frame.cursor_sequence())

    def test_shorter_frame_clears_below(self) -> None:
        renderer, terminal = make_renderer(rows=40)
        renderer.show_suggestions(["/a", "/b", "/c"])
        renderer.hide_suggestions()
        assert CLEAR_TO_END in terminal.writes[-1]

    def test_same_length_frame_does_not_clear_below(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_model("a")
        renderer.set_model("b")
        assert CLEAR_TO_END not in terminal.writes[-1]

    def test_resize_forces_full_clear(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_model("a")
        terminal.simulate_resize(rows=30, columns=100)
        renderer.handle_resize()
        assert terminal.writes[-1].startswith(CLEAR_SCREEN)
        assert renderer.size == (100, 30)
        assert renderer.full_redraws == 2

    def test_request_full_redraw(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_model("a")
        renderer.request_full_redraw()
        assert terminal.write_count == 2
        assert terminal.writes[-1].startswith(CLEAR_SCREEN)


# ---------------------------------------------------------------------------
# Mutators
# ---------------------------------------------------------------------------


class TestMutators:
    def test_duplicate_messages_stored_once(self) -> None:
        renderer, _ = make_renderer()
        assert renderer.add_message("user", "hi") is not None
        assert renderer.add_message("user", "hi") is None
        assert len(renderer.state.messages) == 1

    def test_different_role_is_not_a_duplicate(self) -> None:
        renderer, _ = make_renderer()
        renderer.add_message("user", "hi")
        renderer.add_message("assistant", "hi")
        renderer.add_message("tool", "hi", tool_name="Read")
        renderer.add_message("tool", "hi", tool_name="Edit")
        assert len(renderer.state.messages) == 4

    def test_update_input_clamps_cursor(self) -> None:
        renderer, _ = make_renderer()
        renderer.update_input("abc", 10)
        assert renderer.state.cursor_position == 3

    def test_set_processing_bool_shorthand(self) -> None:
        renderer, _ = make_renderer()
        renderer.set_processing(True, 1.5)
        assert renderer.state.processing_status == "processing"
        assert renderer.state.processing_time == 1.5
        renderer.set_processing(False, 2.0)
        assert renderer.state.processing_status == "idle"
        assert renderer.state.processing_time is None

    def test_confirmation_selection_wraps(self) -> None:
        renderer, _ = make_renderer()
        renderer.show_confirmation("Apply?", "Edit", ["Yes", "Always", "No"])
        assert renderer.select_confirmation_option(-1) == "No"
        assert renderer.select_confirmation_option(1) == "Yes"
        renderer.hide_confirmation()
        assert renderer.state.confirmation is None
        assert renderer.select_confirmation_option(1) is None

    def test_select_suggestion_is_modulo(self) -> None:
        renderer, _ = make_renderer()
        renderer.show_suggestions(["/a", "/b", "/c"])
        renderer.select_suggestion(4)
        assert renderer.state.selected_suggestion_index == 1

    def test_show_empty_suggestions_hides(self) -> None:
        renderer, _ = make_renderer()
        renderer.show_suggestions([])
        assert not renderer.state.showing_suggestions

    def test_status_fields(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_active_file("main.py")
        renderer.set_mcp_status("ok")
        renderer.set_token_count(12)
        assert renderer.state.active_file == "main.py"
        assert "◆ MCP: ok" in terminal.output

    def test_clear_rewrites_without_full_clear(self) -> None:
        renderer, terminal = make_renderer()
        renderer.add_message("user", "hi")
        renderer.clear()
        assert renderer.state.messages == []
        assert CLEAR_SCREEN not in terminal.writes[-1]
        assert CLEAR_TO_END in terminal.writes[-1]
        assert renderer.full_redraws == 1


# ---------------------------------------------------------------------------
# Debounced rendering (event loop)
# ---------------------------------------------------------------------------


class TestDebounce:
    @pytest.mark.asyncio
    async def test_burst_of_mutations_writes_once(self) -> None:
        renderer, terminal = make_renderer(debounce_ms=20)
        for i in range(10):
            renderer.update_input("x" * i, i)
        assert terminal.write_count == 0
        assert renderer.pending
        await asyncio.sleep(0.06)
        assert terminal.write_count == 1
        assert not renderer.pending
        assert renderer.state.input_value == "x" * 9

    @pytest.mark.asyncio
    async def test_new_mutation_reschedules(self) -> None:
        renderer, terminal = make_renderer(debounce_ms=40)
        renderer.set_model("a")
        await asyncio.sleep(0.025)
        renderer.set_model("b")
        await asyncio.sleep(0.025)
        assert terminal.write_count == 0
        await asyncio.sleep(0.04)
        assert terminal.write_count == 1

    @pytest.mark.asyncio
    async def test_flush_renders_now(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_model("a")
        assert renderer.flush() is True
        assert terminal.write_count == 1
        assert not renderer.pending

    @pytest.mark.asyncio
    async def test_destroy_cancels_pending_redraw(self) -> None:
        renderer, terminal = make_renderer(debounce_ms=10)
        renderer.set_model("a")
        renderer.destroy()
        await asyncio.sleep(0.03)
        assert terminal.write_count == 0
        renderer.set_model("b")
        assert not renderer.pending


class TestDestroy:
    def test_destroy_moves_cursor_below_frame(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_model("a")
        frame = renderer.previous_frame
        assert frame is not None
        renderer.destroy()
        assert terminal.writes[-1] == f"\x1b[{len(frame.lines)};1H\r\n"

    def test_destroy_twice_is_harmless(self) -> None:
        renderer, terminal = make_renderer()
        renderer.set_model("a")
        renderer.destroy()
        renderer.destroy()
        assert terminal.write_count == 2
