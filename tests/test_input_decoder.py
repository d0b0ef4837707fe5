"""Tests for orion.term.input_decoder.InputDecoder."""

from __future__ import annotations

import asyncio

import pytest

from orion.term.input_decoder import InputDecoder
from orion.term.keys import KeyEvent


def make_decoder(escape_timeout: float = 0.01) -> tuple[InputDecoder, list[KeyEvent]]:
    events: list[KeyEvent] = []
    return InputDecoder(events.append, escape_timeout=escape_timeout), events


class TestFeed:
    def test_typed_text(self) -> None:
        decoder, events = make_decoder()
        decoder.feed(b"hi")
        assert events == [KeyEvent("char", text="h"), KeyEvent("char", text="i")]

    def test_arrow_and_enter(self) -> None:
        decoder, events = make_decoder()
        decoder.feed(b"\x1b[A\r")
        assert events == [KeyEvent("escape", "up"), KeyEvent("control", "enter")]

    def test_multibyte_split_across_reads(self) -> None:
        decoder, events = make_decoder()
        encoded = "ü".encode("utf-8")
        decoder.feed(encoded[:1])
        assert events == []
        decoder.feed(encoded[1:])
        assert events == [KeyEvent("text", text="ü")]

    def test_invalid_bytes_never_inserted(self) -> None:
        decoder, events = make_decoder()
        decoder.feed(b"\xc3\x28")
        assert events == [KeyEvent("char", text="(")]

    def test_unknown_escape_sequence_dropped(self) -> None:
        decoder, events = make_decoder()
        decoder.feed(b"\x1b[15~x")
        assert events == [KeyEvent("char", text="x")]


class TestPaste:
    def test_paste_is_one_event(self) -> None:
        decoder, events = make_decoder()
        decoder.feed(b"\x1b[200~one\ntwo\x1b[201~")
        assert events == [KeyEvent("paste", text="one\ntwo")]

    def test_carriage_returns_normalized(self) -> None:
        decoder, events = make_decoder()
        decoder.feed(b"\x1b[200~a\r\nb\rc\x1b[201~")
        assert events == [KeyEvent("paste", text="a\nb\nc")]

    def test_empty_paste_ignored(self) -> None:
        decoder, events = make_decoder()
        decoder.feed(b"\x1b[200~\x1b[201~")
        assert events == []


class TestEscapeTimeout:
    def test_lone_escape_without_loop(self) -> None:
        decoder, events = make_decoder()
        decoder.feed(b"\x1b")
        assert events == [KeyEvent("control", "escape")]

    @pytest.mark.asyncio
    async def test_lone_escape_after_timeout(self) -> None:
        decoder, events = make_decoder(escape_timeout=0.01)
        decoder.feed(b"\x1b")
        assert events == []
        assert decoder.pending == "\x1b"
        await asyncio.sleep(0.03)
        assert events == [KeyEvent("control", "escape")]

    @pytest.mark.asyncio
    async def test_sequence_split_within_timeout(self) -> None:
        decoder, events = make_decoder(escape_timeout=0.05)
        decoder.feed(b"\x1b")
        decoder.feed(b"[D")
        await asyncio.sleep(0.07)
        assert events == [KeyEvent("escape", "left")]

    @pytest.mark.asyncio
    async def test_close_discards_pending(self) -> None:
        decoder, events = make_decoder(escape_timeout=0.01)
        decoder.feed(b"\x1b")
        decoder.close()
        await asyncio.sleep(0.03)
        assert events == []
