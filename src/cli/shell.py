"""Interactive bucket shell.

This module reads lines, tokenizes them with shlex, and dispatches to
registered command handlers. It also wires readline tab completion,
history persistence, and Ctrl-C / EOF handling.
"""

from __future__ import annotations

from pathlib import Path
import readline
import shlex
import sys
from typing import Callable, Sequence

from cli.commands import COMMANDS, CommandContext, ShellCommand
from core.constants import INTERRUPTS_TO_EXIT, SHELL_BANNER, SHELL_HELP_HINT
from core.logging_config import get_logger
from nav.navigator import Navigator

_LOGGER = get_logger(__name__)

_BUILTIN_HELP = (
    ("exit", "exit the program"),
    ("help", "display help"),
)


class BucketShell:
    """Line-oriented shell bound to one navigator."""

    def __init__(
        self,
        navigator: Navigator,
        database_name: str,
        history_path: Path | None = None,
        commands: Sequence[ShellCommand] = COMMANDS,
        input_func: Callable[[str], str] | None = None,
    ) -> None:
        self._navigator = navigator
        self._database_name = database_name
        self._history_path = history_path
        self._commands = {command.name: command for command in commands}
        self._input = input_func or input
        self._matches: list[str] = []

    def prompt(self) -> str:
        """Prompt reflecting the current bucket."""
        return self._navigator.prompt(self._database_name)

    def process(self, tokens: Sequence[str]) -> bool:
        """Run one tokenized command.

        Args:
            tokens: Command name followed by its arguments.

        Returns:
            False if the command reported an error.
        """
        if not tokens:
            return True
        name, *args = tokens
        if name == "help":
            return self._help(args)
        command = self._commands.get(name)
        context = CommandContext(self._navigator, args)
        if command is None:
            context.error(f"Unknown command: {name}")
            return False
        command.handler(context)
        return not context.failed

    def execute_line(self, line: str) -> bool:
        """Tokenize and run one input line."""
        try:
            tokens = shlex.split(line)
        except ValueError as error:
            CommandContext(self._navigator, []).error(f"Unable to parse input: {error}")
            return False
        return self.process(tokens)

    def run(self) -> None:
        """Read and execute lines until exit, EOF, or a double Ctrl-C."""
        print(SHELL_BANNER)
        print(SHELL_HELP_HINT)
        print()
        self._install_completer()
        self._load_history()
        interrupts = 0
        try:
            while True:
                try:
                    line = self._input(self.prompt())
                except EOFError:
                    print()
                    break
                except KeyboardInterrupt:
                    print()
                    interrupts += 1
                    if interrupts >= INTERRUPTS_TO_EXIT:
                        print("Interrupted")
                        break
                    print("Press Ctrl-C once more to exit")
                    continue
                interrupts = 0
                if line.strip() == "exit":
                    break
                self.execute_line(line)
        finally:
            self._save_history()

    def complete(self, line: str, text: str, begin: int) -> list[str]:
        """Completion candidates for text starting at begin within line."""
        if not line[:begin].strip():
            names = sorted([*self._commands, *(name for name, _ in _BUILTIN_HELP)])
            return [name for name in names if name.startswith(text)]
        command = self._commands.get(line.split()[0])
        if command is None or command.completer is None:
            return []
        candidates = command.completer(self._navigator.current, text)
        return [candidate for candidate in candidates if candidate.startswith(text)]

    def _help(self, args: Sequence[str]) -> bool:
        context = CommandContext(self._navigator, args)
        if args:
            command = self._commands.get(args[0])
            if command is None:
                context.error(f"No help for unknown command: {args[0]}")
                return False
            context.println(command.long_help)
            return True
        context.println("Commands:")
        rows = [(command.name, command.help) for command in self._commands.values()]
        for name, text in sorted([*rows, *_BUILTIN_HELP]):
            context.println(f"  {name:<8}{text}")
        return True

    def _readline_complete(self, text: str, state: int) -> str | None:
        if state == 0:
            self._matches = self.complete(readline.get_line_buffer(), text, readline.get_begidx())
        if state < len(self._matches):
            return self._matches[state]
        return None

    def _install_completer(self) -> None:
        readline.set_completer(self._readline_complete)
        readline.set_completer_delims(" \t\n")
        if "libedit" in (readline.__doc__ or ""):
            readline.parse_and_bind("bind ^I rl_complete")
        else:
            readline.parse_and_bind("tab: complete")

    def _load_history(self) -> None:
        if self._history_path is None:
            return
        try:
            readline.read_history_file(str(self._history_path))
        except FileNotFoundError:
            _LOGGER.debug("history_file_missing", path=str(self._history_path))
        except OSError as error:
            _LOGGER.warning("history_load_failed", path=str(self._history_path), error=str(error))

    def _save_history(self) -> None:
        if self._history_path is None:
            return
        try:
            readline.write_history_file(str(self._history_path))
        except OSError as error:
            _LOGGER.warning("history_save_failed", path=str(self._history_path), error=str(error))
            print(f"Error: unable to save history: {error}", file=sys.stderr)
