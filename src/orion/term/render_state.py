"""Render state: everything the session frame shows, as plain data."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

MessageRole = Literal["user", "assistant", "tool", "system"]

ProcessingStatus = Literal["idle", "processing", "thinking", "waiting", "error"]

DEFAULT_MODEL = "gpt-5-chat"


@dataclass(frozen=True)
class DiffPayload:
    """Before/after content of a file edit."""

    old_content: str
    new_content: str
    file_name: str


@dataclass(frozen=True)
class Message:
    """One transcript entry. Immutable once created."""

    role: MessageRole
    content: str
    tool_name: str | None = None
    file_name: str | None = None
    diff: DiffPayload | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def identity(self) -> tuple[str, str, str | None]:
        """The fields duplicate detection compares: role, content, tool name."""
        return (self.role, self.content, self.tool_name)


@dataclass
class ConfirmationDialog:
    title: str
    message: str
    options: list[str]
    diff: DiffPayload | None = None
    selected_index: int = 0


@dataclass
class RenderState:
    messages: list[Message] = field(default_factory=list)
    input_value: str = ""
    cursor_position: int = 0
    processing_status: ProcessingStatus = "idle"
    processing_time: float | None = None
    auto_edit: bool = False
    current_model: str = DEFAULT_MODEL
    active_file: str | None = None
    mcp_status: str | None = None
    token_count: int | None = None
    confirmation: ConfirmationDialog | None = None
    suggestions: list[str] = field(default_factory=list)
    selected_suggestion_index: int = 0
    showing_suggestions: bool = False

    @property
    def is_processing(self) -> bool:
        return self.processing_status in ("processing", "thinking", "waiting")

    def has_message(self, message: Message) -> bool:
        identity = message.identity
        return any(m.identity == identity for m in self.messages)
