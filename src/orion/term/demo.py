"""Entry point for the orion-term demo: an echo chat with a few slash commands."""

from __future__ import annotations

import argparse
import asyncio
import logging

from orion.term.config import SessionConfig
from orion.term.render_state import DiffPayload
from orion.term.session import TerminalSession
from orion.term.suggestions import CommandRegistry, SlashCommand
from orion.term.theme import default_theme, monochrome_theme

logger = logging.getLogger(__name__)

COMMANDS = [
    SlashCommand("help", "Show available commands"),
    SlashCommand("clear", "Clear the transcript"),
    SlashCommand("model", "Switch the model label"),
    SlashCommand("diff", "Show a sample file edit"),
    SlashCommand("confirm", "Ask for a confirmation"),
    SlashCommand("exit", "Leave the session"),
]

_SAMPLE_OLD = "def greet(name):\n    print('hello ' + name)\n"
_SAMPLE_NEW = "def greet(name: str) -> None:\n    print(f'hello {name}')\n"


class EchoChat:
    """Echoes every line back as an assistant reply after a short delay."""

    def __init__(self, session: TerminalSession, registry: CommandRegistry, delay: float) -> None:
        self.session = session
        self.registry = registry
        self.delay = delay
        self._task: asyncio.Task[None] | None = None

    def on_line(self, line: str) -> None:
        dialog = self.session.renderer.state.confirmation
        if dialog is not None:
            self.session.hide_confirmation()
            self.session.add_message("system", f"You chose: {line}")
            return

        self.session.add_message("user", line)
        if line.startswith(self.session.config.trigger):
            self.run_command(line[len(self.session.config.trigger) :])
            return
        if self._task is not None and not self._task.done():
            self.session.add_message("system", "Still working on the previous message")
            return
        self._task = asyncio.get_running_loop().create_task(self._reply(line))

    def on_special_key(self, name: str) -> None:
        if name == "ctrl+c":
            self.session.exit()
        elif name == "shift+tab":
            state = self.session.renderer.state
            self.session.set_auto_edit(not state.auto_edit)
        elif name == "ctrl+l":
            self.session.clear()
        elif name == "escape":
            if self.session.renderer.state.confirmation is not None:
                self.session.hide_confirmation()
                self.session.add_message("system", "Cancelled")
            elif self._task is not None and not self._task.done():
                self._task.cancel()

    def run_command(self, text: str) -> None:
        name, _, argument = text.partition(" ")
        command = self.registry.get(name)
        if command is None:
            self.session.add_message("system", f"Unknown command: /{name}")
        elif name == "help":
            lines = [f"/{c.name}  {c.description or ''}" for c in self.registry.commands()]
            self.session.add_message("system", "\n".join(lines))
        elif name == "clear":
            self.session.clear()
        elif name == "model":
            if argument.strip():
                self.session.set_model(argument.strip())
            else:
                self.session.add_message("system", "Usage: /model <name>")
        elif name == "diff":
            diff = DiffPayload(_SAMPLE_OLD, _SAMPLE_NEW, "greet.py")
            self.session.set_active_file("greet.py")
            self.session.add_message("tool", "Updated greet.py", tool_name="Edit", file_name="greet.py", diff=diff)
        elif name == "confirm":
            diff = DiffPayload(_SAMPLE_OLD, _SAMPLE_NEW, "greet.py")
            self.session.show_confirmation(
                "Apply edit?",
                "Edit greet.py to add type hints.",
                ["Yes", "Yes, and don't ask again", "No"],
                diff,
            )
        elif name == "exit":
            self.session.exit()

    async def _reply(self, line: str) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        self.session.set_processing("thinking", 0.0)
        try:
            while (elapsed := loop.time() - started) < self.delay:
                self.session.set_processing("thinking", elapsed)
                await asyncio.sleep(0.1)
        except asyncio.CancelledError:
            self.session.set_processing(False)
            self.session.add_message("system", "Cancelled")
            raise
        self.session.set_processing(False)
        self.session.set_token_count(len(line.split()))
        self.session.add_message("assistant", f"You said:\n\n> {line}\n\n**{len(line)}** characters.")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="orion-term: terminal session demo")
    parser.add_argument("--model", default=None, help="Model label shown in the status line")
    parser.add_argument("--delay", type=float, default=1.0, help="Seconds before each echo reply")
    parser.add_argument("--no-color", action="store_true", help="Disable colors")
    parser.add_argument("--log-file", default="orion-term.log", help="Log file (default: orion-term.log)")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> None:
    config = SessionConfig.from_env()
    registry = CommandRegistry(COMMANDS)
    session = TerminalSession(
        config=config,
        theme=monochrome_theme() if args.no_color else default_theme(),
        get_suggestions=registry.get_suggestions,
    )
    chat = EchoChat(session, registry, args.delay)
    session.on_completed_line = chat.on_line
    session.on_special_key = chat.on_special_key

    if args.model:
        session.set_model(args.model)
    session.add_message(
        "system",
        "Type /help for commands. Shift+Tab toggles auto-edit, Ctrl+L clears, Ctrl+C exits.",
    )
    logger.info("Starting session")
    await session.run()
    logger.info("Session ended")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    # The screen belongs to the session, so logs go to a file.
    logging.basicConfig(
        filename=args.log_file,
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
