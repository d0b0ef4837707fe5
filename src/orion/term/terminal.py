"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that owns
the process's stdin/stdout: raw mode via :mod:`termios`, bracketed paste,
SIGWINCH resize notification, and an asyncio reader on stdin. When stdin is
not a TTY (or raw mode cannot be set) it degrades to line-buffered input and
hands complete lines to the caller instead of raw bytes.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

_READ_SIZE = 4096


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(
        self,
        on_input: Callable[[bytes], None],
        on_resize: Callable[[], None],
        on_line: Callable[[str], None] | None = None,
        on_eof: Callable[[], None] | None = None,
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    @property
    def line_mode(self) -> bool: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by ``sys.stdin``/``sys.stdout``.

    ``start`` must be called from inside a running event loop: stdin is read
    with ``loop.add_reader`` and resize signals arrive through
    ``loop.add_signal_handler``.
    """

    def __init__(self, write_log: str | None = None) -> None:
        self._input_handler: Callable[[bytes], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._line_handler: Callable[[str], None] | None = None
        self._eof_handler: Callable[[], None] | None = None
        self._original_termios: list | None = None
        self._line_mode = False
        self._line_buffer = b""
        self._loop: asyncio.AbstractEventLoop | None = None
        self._reader_fd: int | None = None
        self._signal_via_loop = False
        self._prev_sigwinch_handler: signal.Handlers | Callable | int | None = None
        self._started = False
        self._write_log_path = (
            write_log if write_log is not None else os.environ.get("ORION_TUI_WRITE_LOG", "")
        )

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    @property
    def line_mode(self) -> bool:
        """True when input is line-buffered instead of raw."""
        return self._line_mode

    # -- start / stop -------------------------------------------------------

    def start(
        self,
        on_input: Callable[[bytes], None],
        on_resize: Callable[[], None],
        on_line: Callable[[str], None] | None = None,
        on_eof: Callable[[], None] | None = None,
    ) -> None:
        """Enter raw mode (or line mode), and begin reading stdin."""
        self._input_handler = on_input
        self._resize_handler = on_resize
        self._line_handler = on_line
        self._eof_handler = on_eof
        self._started = True

        fd = sys.stdin.fileno()
        self._line_mode = not self._enter_raw_mode(fd)
        if not self._line_mode:
            self._raw_write(_BRACKETED_PASTE_ENABLE)

        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; stdin will not be read")
            self._loop = None

        self._install_sigwinch()
        self._start_stdin_reader(fd)

    def stop(self) -> None:
        """Restore terminal state and remove all handlers. Safe to call twice."""
        if not self._started:
            return
        self._started = False

        if not self._line_mode:
            self._raw_write(_BRACKETED_PASTE_DISABLE)

        self._remove_stdin_reader()
        self._restore_sigwinch()

        if self._original_termios is not None:
            try:
                termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios)
            except (termios.error, ValueError, OSError) as exc:
                logger.warning("Could not restore terminal attributes: %s", exc)
            self._original_termios = None

        self._input_handler = None
        self._resize_handler = None
        self._line_handler = None
        self._eof_handler = None
        self._line_buffer = b""
        self._loop = None

    # -- write --------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError:
                pass

    # -- private: raw mode --------------------------------------------------

    def _enter_raw_mode(self, fd: int) -> bool:
        if not os.isatty(fd):
            logger.warning("stdin is not a TTY; falling back to line-buffered input")
            return False
        try:
            self._original_termios = termios.tcgetattr(fd)
            tty.setraw(fd)
        except termios.error as exc:
            logger.warning("Could not enable raw mode (%s); falling back to line-buffered input", exc)
            self._original_termios = None
            return False
        return True

    # -- private: stdin reading --------------------------------------------

    def _start_stdin_reader(self, fd: int) -> None:
        if self._loop is None or self._reader_fd is not None:
            return
        try:
            self._loop.add_reader(fd, self._on_stdin_readable)
        except (ValueError, OSError, NotImplementedError) as exc:
            logger.warning("Cannot watch stdin: %s", exc)
            return
        self._reader_fd = fd

    def _remove_stdin_reader(self) -> None:
        if self._reader_fd is None:
            return
        if self._loop is not None and not self._loop.is_closed():
            self._loop.remove_reader(self._reader_fd)
        self._reader_fd = None

    def _on_stdin_readable(self) -> None:
        """Callback invoked by the event loop when stdin has data."""
        if self._reader_fd is None:
            return
        try:
            raw = os.read(self._reader_fd, _READ_SIZE)
        except OSError:
            return

        if not raw:
            self._on_eof()
            return

        if self._line_mode:
            self._feed_lines(raw)
        elif self._input_handler is not None:
            self._input_handler(raw)

    def _feed_lines(self, raw: bytes) -> None:
        self._line_buffer += raw
        *complete, self._line_buffer = self._line_buffer.split(b"\n")
        for line in complete:
            text = line.decode("utf-8", errors="ignore").rstrip("\r")
            if self._line_handler is not None:
                self._line_handler(text)

    def _on_eof(self) -> None:
        self._remove_stdin_reader()
        if self._line_mode and self._line_buffer:
            # Last line without a trailing newline
            self._feed_lines(b"\n")
        if self._eof_handler is not None:
            self._eof_handler()

    # -- private: SIGWINCH -------------------------------------------------

    def _install_sigwinch(self) -> None:
        if self._loop is not None:
            try:
                self._loop.add_signal_handler(signal.SIGWINCH, self._on_resize)
                self._signal_via_loop = True
                return
            except (NotImplementedError, RuntimeError, ValueError):
                pass
        try:
            self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
            signal.signal(signal.SIGWINCH, self._on_sigwinch)
        except ValueError:
            # Not the main thread
            logger.warning("Cannot install SIGWINCH handler; resizes will go unnoticed")
            self._prev_sigwinch_handler = None

    def _restore_sigwinch(self) -> None:
        if self._signal_via_loop:
            if self._loop is not None and not self._loop.is_closed():
                self._loop.remove_signal_handler(signal.SIGWINCH)
            self._signal_via_loop = False
        elif self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        self._on_resize()

    def _on_resize(self) -> None:
        if self._resize_handler is not None:
            self._resize_handler()

    # -- private: raw write ------------------------------------------------

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing buffering."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass
