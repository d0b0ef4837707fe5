"""Input decoder: raw stdin bytes in, classified key events out."""

from __future__ import annotations

import logging
from typing import Callable

from orion.term.keys import KeyEvent, decode_key
from orion.term.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)


class InputDecoder:
    """Frames raw chunks with a :class:`StdinBuffer` and classifies each
    complete sequence with :func:`~orion.term.keys.decode_key`.

    Sequences that classify to nothing (unknown escape sequences, unbound
    control bytes) are dropped here and never reach *on_event*.
    """

    def __init__(
        self,
        on_event: Callable[[KeyEvent], None],
        *,
        escape_timeout: float = 0.01,
    ) -> None:
        self._on_event = on_event
        self._buffer = StdinBuffer(timeout=escape_timeout)
        self._buffer.on_data(self._on_sequence)
        self._buffer.on_paste(self._on_paste)

    def feed(self, chunk: bytes | str) -> None:
        """Consume one chunk read from the terminal."""
        self._buffer.process(chunk)

    @property
    def pending(self) -> str:
        """Decoded input still waiting to form a complete sequence."""
        return self._buffer.get_buffer()

    def reset(self) -> None:
        self._buffer.clear()

    def close(self) -> None:
        self._buffer.destroy()

    def _on_sequence(self, data: str) -> None:
        event = decode_key(data)
        if event is None:
            logger.debug("Ignoring unrecognized input sequence %r", data)
            return
        self._on_event(event)

    def _on_paste(self, data: str) -> None:
        text = data.replace("\r\n", "\n").replace("\r", "\n")
        if text:
            self._on_event(KeyEvent("paste", text=text))
