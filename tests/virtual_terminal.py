"""Virtual terminal for testing -- implements the Terminal protocol in-memory.

This module provides a ``VirtualTerminal`` class that satisfies the
``orion.term.terminal.Terminal`` protocol without performing any real I/O.
All output is captured in a buffer for assertions.
"""

from __future__ import annotations

from typing import Callable


class VirtualTerminal:
    """In-memory terminal that records all writes for test inspection.

    Parameters
    ----------
    rows:
        Number of terminal rows (height).
    columns:
        Number of terminal columns (width).
    line_mode:
        Pretend stdin is not a TTY, so input arrives as whole lines.
    """

    def __init__(self, rows: int = 24, columns: int = 80, line_mode: bool = False) -> None:
        self._rows = rows
        self._columns = columns
        self._line_mode = line_mode
        self._buffer: list[str] = []
        self._started = False
        self._stop_count = 0
        self._input_handler: Callable[[bytes], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._line_handler: Callable[[str], None] | None = None
        self._eof_handler: Callable[[], None] | None = None

    # -- Terminal protocol: properties --------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def line_mode(self) -> bool:
        return self._line_mode

    @property
    def started(self) -> bool:
        return self._started

    @property
    def stop_count(self) -> int:
        return self._stop_count

    # -- Terminal protocol: lifecycle ---------------------------------------

    def start(
        self,
        on_input: Callable[[bytes], None],
        on_resize: Callable[[], None],
        on_line: Callable[[str], None] | None = None,
        on_eof: Callable[[], None] | None = None,
    ) -> None:
        self._input_handler = on_input
        self._resize_handler = on_resize
        self._line_handler = on_line
        self._eof_handler = on_eof
        self._started = True

    def stop(self) -> None:
        self._started = False
        self._stop_count += 1
        self._input_handler = None
        self._resize_handler = None
        self._line_handler = None
        self._eof_handler = None

    # -- Terminal protocol: output ------------------------------------------

    def write(self, data: str) -> None:
        """Append *data* to the internal buffer."""
        self._buffer.append(data)

    # -- Test helpers -------------------------------------------------------

    @property
    def output(self) -> str:
        """Return everything written to the terminal as a single string."""
        return "".join(self._buffer)

    @property
    def writes(self) -> list[str]:
        return list(self._buffer)

    @property
    def write_count(self) -> int:
        """Return the number of individual ``write`` calls made."""
        return len(self._buffer)

    def clear_buffer(self) -> None:
        """Discard all recorded output."""
        self._buffer.clear()

    def simulate_input(self, data: bytes | str) -> None:
        """Feed *data* into the registered input handler.

        ``str`` data is encoded as UTF-8 first, like a real terminal would.
        Raises ``RuntimeError`` if ``start`` was not called.
        """
        if self._input_handler is None:
            raise RuntimeError("No input handler registered -- call start() first")
        self._input_handler(data.encode("utf-8") if isinstance(data, str) else data)

    def simulate_line(self, line: str) -> None:
        """Deliver one line of line-buffered input."""
        if self._line_handler is None:
            raise RuntimeError("No line handler registered -- call start() first")
        self._line_handler(line)

    def simulate_eof(self) -> None:
        if self._eof_handler is not None:
            self._eof_handler()

    def simulate_resize(self, rows: int | None = None, columns: int | None = None) -> None:
        """Change terminal dimensions and fire the resize callback.

        If *rows* or *columns* is ``None`` the corresponding dimension
        is left unchanged.
        """
        if rows is not None:
            self._rows = rows
        if columns is not None:
            self._columns = columns
        if self._resize_handler is not None:
            self._resize_handler()
