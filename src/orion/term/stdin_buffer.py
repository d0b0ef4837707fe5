"""StdinBuffer turns raw stdin chunks into complete key sequences.

Reads from a terminal arrive in arbitrary pieces: an escape sequence can be
split between two reads, and so can the bytes of one UTF-8 character.
Without buffering, partial sequences would be misread as separate keys or
inserted as garbage.
"""

from __future__ import annotations

import asyncio
import codecs
import re
from typing import Callable, Literal

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

SequenceStatus = Literal["complete", "incomplete", "not-escape"]

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


def _is_complete_sequence(data: str) -> SequenceStatus:
    """Check whether *data* is a complete escape sequence or needs more input."""
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    introducer = data[1]

    # CSI: ESC [ params final
    if introducer == "[":
        if data.startswith(f"{ESC}[M"):
            # X10 mouse report carries three raw bytes
            return "complete" if len(data) >= 6 else "incomplete"
        return _is_complete_csi_sequence(data)

    # OSC / DCS / APC: terminated by ST (or BEL for OSC)
    if introducer in "]P_":
        if data.endswith(f"{ESC}\\") or (introducer == "]" and data.endswith("\x07")):
            return "complete"
        return "incomplete"

    # SS3: ESC O <final>
    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"

    # Meta: ESC followed by one character
    return "complete"


def _is_complete_csi_sequence(data: str) -> SequenceStatus:
    if len(data) < 3:
        return "incomplete"

    payload = data[2:]
    if not 0x40 <= ord(payload[-1]) <= 0x7E:
        return "incomplete"

    if payload.startswith("<"):
        return "complete" if _SGR_MOUSE_RE.match(payload) else "incomplete"
    return "complete"


def _extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Split decoded text into complete sequences.

    Returns ``(sequences, remainder)`` where *remainder* is an escape
    sequence still waiting for more input.
    """
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        remaining = buffer[pos:]

        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        end = 1
        while end <= len(remaining):
            if _is_complete_sequence(remaining[:end]) == "complete":
                break
            end += 1
        else:
            return sequences, remaining

        sequences.append(remaining[:end])
        pos += end

    return sequences, ""


class StdinBuffer:
    """Buffers stdin bytes and emits complete sequences.

    * UTF-8 is decoded incrementally, so a character whose bytes straddle two
      reads is emitted only once all of its bytes have arrived. Invalid bytes
      are dropped.
    * An incomplete escape sequence is held until the rest arrives or
      *timeout* seconds pass; after the timeout it is emitted as-is, which is
      how a bare Escape key press gets through.
    * Bracketed paste content is collected and emitted once via ``on_paste``.
    """

    def __init__(self, *, timeout: float = 0.01) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
        self._buffer: str = ""
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._timeout: float = timeout
        self._paste_mode: bool = False
        self._paste_buffer: str = ""

        self._on_data: Callable[[str], None] | None = None
        self._on_paste: Callable[[str], None] | None = None

    def on_data(self, callback: Callable[[str], None]) -> None:
        """Set the callback for complete sequences."""
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        """Set the callback for bracketed-paste content."""
        self._on_paste = callback

    def _emit_data(self, data: str) -> None:
        if self._on_data:
            self._on_data(data)

    def _emit_paste(self, data: str) -> None:
        if self._on_paste:
            self._on_paste(data)

    def process(self, chunk: bytes | str) -> None:
        """Feed one raw chunk read from the terminal."""
        self._cancel_timeout()

        if isinstance(chunk, bytes):
            text = self._decoder.decode(chunk)
        else:
            text = chunk
        if not text:
            return

        self._consume(text)

    def _consume(self, text: str) -> None:
        self._buffer += text

        if self._paste_mode:
            self._paste_buffer += self._buffer
            self._buffer = ""
            self._finish_paste_if_complete()
            return

        start_index = self._buffer.find(BRACKETED_PASTE_START)
        if start_index != -1:
            sequences, _ = _extract_complete_sequences(self._buffer[:start_index])
            for sequence in sequences:
                self._emit_data(sequence)

            self._paste_mode = True
            self._paste_buffer = self._buffer[start_index + len(BRACKETED_PASTE_START) :]
            self._buffer = ""
            self._finish_paste_if_complete()
            return

        sequences, self._buffer = _extract_complete_sequences(self._buffer)
        for sequence in sequences:
            self._emit_data(sequence)

        if self._buffer:
            self._schedule_timeout()

    def _finish_paste_if_complete(self) -> None:
        end_index = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end_index == -1:
            return

        pasted = self._paste_buffer[:end_index]
        remaining = self._paste_buffer[end_index + len(BRACKETED_PASTE_END) :]
        self._paste_mode = False
        self._paste_buffer = ""
        self._emit_paste(pasted)

        if remaining:
            self._consume(remaining)

    def _schedule_timeout(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: nothing can complete the sequence later
            for sequence in self.flush():
                self._emit_data(sequence)
            return
        self._timeout_handle = loop.call_later(self._timeout, self._flush_timeout)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    def _flush_timeout(self) -> None:
        self._timeout_handle = None
        for sequence in self.flush():
            self._emit_data(sequence)

    def flush(self) -> list[str]:
        """Return and clear whatever is pending."""
        self._cancel_timeout()
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def clear(self) -> None:
        self._cancel_timeout()
        self._decoder.reset()
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

    def get_buffer(self) -> str:
        return self._buffer

    def destroy(self) -> None:
        self.clear()
