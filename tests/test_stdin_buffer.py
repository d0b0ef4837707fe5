"""Tests for orion.term.stdin_buffer.StdinBuffer."""

from __future__ import annotations

import asyncio

import pytest

from orion.term.stdin_buffer import (
    BRACKETED_PASTE_END,
    BRACKETED_PASTE_START,
    ESC,
    StdinBuffer,
    _extract_complete_sequences,
    _is_complete_sequence,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Collector:
    """Collects emitted data/paste events for assertions."""

    def __init__(self) -> None:
        self.data: list[str] = []
        self.pastes: list[str] = []

    def on_data(self, d: str) -> None:
        self.data.append(d)

    def on_paste(self, d: str) -> None:
        self.pastes.append(d)


def make_buffer(timeout: float = 0.01) -> tuple[StdinBuffer, Collector]:
    buf = StdinBuffer(timeout=timeout)
    col = Collector()
    buf.on_data(col.on_data)
    buf.on_paste(col.on_paste)
    return buf, col


# ---------------------------------------------------------------------------
# _is_complete_sequence
# ---------------------------------------------------------------------------


class TestIsCompleteSequence:
    def test_non_escape_returns_not_escape(self) -> None:
        assert _is_complete_sequence("a") == "not-escape"

    def test_lone_esc_is_incomplete(self) -> None:
        assert _is_complete_sequence(ESC) == "incomplete"

    def test_meta_key_sequence_is_complete(self) -> None:
        assert _is_complete_sequence(f"{ESC}f") == "complete"
        assert _is_complete_sequence(f"{ESC}\x7f") == "complete"

    def test_csi_incomplete_without_terminator(self) -> None:
        assert _is_complete_sequence(f"{ESC}[") == "incomplete"
        assert _is_complete_sequence(f"{ESC}[1") == "incomplete"
        assert _is_complete_sequence(f"{ESC}[1;5") == "incomplete"

    def test_csi_complete(self) -> None:
        assert _is_complete_sequence(f"{ESC}[A") == "complete"
        assert _is_complete_sequence(f"{ESC}[1;5C") == "complete"
        assert _is_complete_sequence(f"{ESC}[3~") == "complete"

    def test_ss3(self) -> None:
        assert _is_complete_sequence(f"{ESC}O") == "incomplete"
        assert _is_complete_sequence(f"{ESC}OH") == "complete"

    def test_osc_needs_terminator(self) -> None:
        assert _is_complete_sequence(f"{ESC}]0;title") == "incomplete"
        assert _is_complete_sequence(f"{ESC}]0;title\x07") == "complete"


# ---------------------------------------------------------------------------
# _extract_complete_sequences
# ---------------------------------------------------------------------------


class TestExtractCompleteSequences:
    def test_empty_string(self) -> None:
        assert _extract_complete_sequences("") == ([], "")

    def test_regular_chars_split_individually(self) -> None:
        assert _extract_complete_sequences("abc") == (["a", "b", "c"], "")

    def test_mixed_chars_and_sequences(self) -> None:
        seqs, rem = _extract_complete_sequences(f"a{ESC}[Db")
        assert seqs == ["a", f"{ESC}[D", "b"]
        assert rem == ""

    def test_incomplete_csi_at_end(self) -> None:
        seqs, rem = _extract_complete_sequences(f"x{ESC}[1")
        assert seqs == ["x"]
        assert rem == f"{ESC}[1"


# ---------------------------------------------------------------------------
# StdinBuffer.process
# ---------------------------------------------------------------------------


class TestProcessText:
    def test_str_chunk(self) -> None:
        buf, col = make_buffer()
        buf.process("hi")
        assert col.data == ["h", "i"]

    def test_bytes_chunk_decoded(self) -> None:
        buf, col = make_buffer()
        buf.process("é".encode("utf-8"))
        assert col.data == ["é"]

    def test_utf8_split_across_chunks(self) -> None:
        buf, col = make_buffer()
        encoded = "日".encode("utf-8")
        buf.process(encoded[:1])
        assert col.data == []
        buf.process(encoded[1:])
        assert col.data == ["日"]

    def test_invalid_utf8_dropped(self) -> None:
        buf, col = make_buffer()
        buf.process(b"a\xffb")
        assert col.data == ["a", "b"]

    def test_empty_chunk_emits_nothing(self) -> None:
        buf, col = make_buffer()
        buf.process(b"")
        assert col.data == []

    def test_no_callback_does_not_raise(self) -> None:
        StdinBuffer().process("abc")


class TestProcessEscapeSequences:
    def test_complete_csi_emitted(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{ESC}[A")
        assert col.data == [f"{ESC}[A"]

    def test_chars_before_escape_emitted_first(self) -> None:
        buf, col = make_buffer()
        buf.process(f"ab{ESC}[C")
        assert col.data == ["a", "b", f"{ESC}[C"]

    def test_lone_escape_flushed_without_event_loop(self) -> None:
        buf, col = make_buffer()
        buf.process(ESC)
        assert col.data == [ESC]
        assert buf.get_buffer() == ""

    @pytest.mark.asyncio
    async def test_partial_escape_buffered(self) -> None:
        buf, col = make_buffer()
        buf.process(ESC)
        assert col.data == []
        assert buf.get_buffer() == ESC

    @pytest.mark.asyncio
    async def test_split_csi_across_chunks(self) -> None:
        buf, col = make_buffer()
        buf.process(ESC)
        buf.process("[A")
        assert col.data == [f"{ESC}[A"]


class TestProcessBracketedPaste:
    def test_complete_paste_in_single_chunk(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{BRACKETED_PASTE_START}hello world{BRACKETED_PASTE_END}")
        assert col.pastes == ["hello world"]
        assert col.data == []

    def test_paste_keeps_newlines(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{BRACKETED_PASTE_START}line1\nline2{BRACKETED_PASTE_END}")
        assert col.pastes == ["line1\nline2"]

    def test_data_around_paste_emitted(self) -> None:
        buf, col = make_buffer()
        buf.process(f"x{BRACKETED_PASTE_START}mid{BRACKETED_PASTE_END}z")
        assert col.data == ["x", "z"]
        assert col.pastes == ["mid"]

    def test_paste_split_across_chunks(self) -> None:
        buf, col = make_buffer()
        buf.process(BRACKETED_PASTE_START + "hel")
        assert col.pastes == []
        buf.process("lo" + BRACKETED_PASTE_END)
        assert col.pastes == ["hello"]
        assert buf._paste_mode is False


# ---------------------------------------------------------------------------
# flush / clear / destroy
# ---------------------------------------------------------------------------


class TestFlushAndClear:
    def test_flush_empty_buffer_returns_empty(self) -> None:
        buf, _ = make_buffer()
        assert buf.flush() == []

    @pytest.mark.asyncio
    async def test_flush_returns_buffered_content(self) -> None:
        buf, _ = make_buffer()
        buf.process(ESC)
        assert buf.flush() == [ESC]
        assert buf.get_buffer() == ""

    def test_clear_resets_paste_mode(self) -> None:
        buf, _ = make_buffer()
        buf._paste_mode = True
        buf._paste_buffer = "something"
        buf.clear()
        assert buf._paste_mode is False
        assert buf._paste_buffer == ""

    @pytest.mark.asyncio
    async def test_destroy_cancels_timeout(self) -> None:
        buf, col = make_buffer(timeout=0.01)
        buf.process(ESC)
        buf.destroy()
        await asyncio.sleep(0.03)
        assert col.data == []


# ---------------------------------------------------------------------------
# Timeout flush behaviour (requires event loop)
# ---------------------------------------------------------------------------


class TestTimeoutFlush:
    @pytest.mark.asyncio
    async def test_incomplete_sequence_flushed_on_timeout(self) -> None:
        buf, col = make_buffer(timeout=0.02)
        buf.process(ESC)
        assert col.data == []
        await asyncio.sleep(0.05)
        assert col.data == [ESC]

    @pytest.mark.asyncio
    async def test_timeout_cancelled_on_new_data(self) -> None:
        buf, col = make_buffer(timeout=0.05)
        buf.process(ESC)
        buf.process("[A")
        await asyncio.sleep(0.08)
        assert col.data == [f"{ESC}[A"]
