"""Session configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ENV_DEBOUNCE_MS = "ORION_TUI_DEBOUNCE_MS"
ENV_HISTORY_SIZE = "ORION_TUI_HISTORY_SIZE"
ENV_TRIGGER = "ORION_TUI_TRIGGER"
ENV_WRITE_LOG = "ORION_TUI_WRITE_LOG"


@dataclass
class SessionConfig:
    """Tunables for a terminal session."""

    # Redraw coalescing window
    debounce_ms: int = 100
    history_size: int = 100
    trigger: str = "/"
    # Rows kept for header, status line and input box when sizing the chat window
    reserved_rows: int = 12
    min_visible_messages: int = 5
    escape_timeout_ms: int = 10
    title: str = "ORION"
    subtitle: str = "terminal session"
    placeholder: str = "Ask me anything..."
    max_input_width: int = 100
    # Append every terminal write to this file (debugging aid)
    write_log: str = ""

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def escape_timeout_seconds(self) -> float:
        return self.escape_timeout_ms / 1000.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> SessionConfig:
        """Build a config from defaults overridden by ``ORION_TUI_*`` variables."""
        env = os.environ if environ is None else environ
        config = cls()

        debounce = _int_env(env, ENV_DEBOUNCE_MS)
        if debounce is not None and debounce >= 0:
            config.debounce_ms = debounce

        history = _int_env(env, ENV_HISTORY_SIZE)
        if history is not None and history > 0:
            config.history_size = history

        if env.get(ENV_TRIGGER):
            config.trigger = env[ENV_TRIGGER]

        config.write_log = env.get(ENV_WRITE_LOG, "")
        return config


def _int_env(env: dict[str, str] | os._Environ[str], name: str) -> int | None:
    raw = env.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return None
