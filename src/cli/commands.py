"""Shell command handlers.

Each handler receives a ``CommandContext`` holding the navigator, the
tokenized arguments, and output/error sinks. Handlers report failures
through the context and never raise bucketsh errors to the shell loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
import sys
from typing import Callable, Sequence, TextIO

from core.constants import VALUE_ENCODING
from core.errors import BucketshError
from core.logging_config import get_logger
from nav.buckets import BucketHandle
from nav.completion import complete_buckets, complete_keys, printable_entries
from nav.navigator import Navigator

_LOGGER = get_logger(__name__)


class CommandContext:
    """Arguments and output sinks for one command invocation."""

    def __init__(
        self,
        navigator: Navigator,
        args: Sequence[str],
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.navigator = navigator
        self.args = list(args)
        self.failed = False
        self._out = out
        self._err = err

    def println(self, text: str = "") -> None:
        """Write one output line."""
        print(text, file=self._out or sys.stdout)

    def error(self, error: BaseException | str) -> None:
        """Report a failure and mark the invocation as failed."""
        self.failed = True
        print(f"Error: {error}", file=self._err or sys.stderr)


CommandHandler = Callable[[CommandContext], None]
Completer = Callable[[BucketHandle, str], list[str]]


@dataclass(frozen=True)
class ShellCommand:
    """Registered shell command.

    Attributes:
        name: Command word typed by the user.
        handler: Function executing the command.
        help: One-line help shown by ``help``.
        long_help: Detailed help shown by ``help <name>``.
        completer: Tab-completion candidates for path arguments.
    """

    name: str
    handler: CommandHandler
    help: str
    long_help: str
    completer: Completer | None = None


def _reports_errors(handler: CommandHandler) -> CommandHandler:
    """Convert bucketsh errors raised by a handler into context errors."""

    @wraps(handler)
    def _wrapped(context: CommandContext) -> None:
        try:
            handler(context)
        except BucketshError as error:
            _LOGGER.debug(
                "command_failed",
                command=handler.__name__,
                error_type=type(error).__name__,
                error=str(error),
            )
            context.error(error)

    return _wrapped


@_reports_errors
def ls_command(context: CommandContext) -> None:
    """List keys of the current bucket or of the bucket at a path."""
    target = context.navigator.current
    if context.args:
        target = context.navigator.resolve(context.args[0])
    contents = target.list_entries()
    entries = printable_entries(contents)
    for entry in entries:
        context.println(entry)
    footnote = ""
    omitted = len(contents) - len(entries)
    if omitted > 0:
        footnote = f" ({omitted} omitted in this list)"
    context.println(f"{len(contents)} keys in bucket{footnote}")


@_reports_errors
def get_command(context: CommandContext) -> None:
    """Print the value stored at a key path."""
    if not context.args:
        context.error("get: missing key name")
        return
    target, key = context.navigator.split_key_path(context.args[0])
    data = target.get(key)
    context.println(data.decode(VALUE_ENCODING, errors="replace"))


@_reports_errors
def put_command(context: CommandContext) -> None:
    """Store a value at a key path."""
    if not context.args:
        context.error("put: missing key name and value")
        return
    if len(context.args) < 2:
        context.error("put: missing value")
        return
    target, key = context.navigator.split_key_path(context.args[0])
    target.put(key, context.args[1].encode(VALUE_ENCODING))


@_reports_errors
def cd_command(context: CommandContext) -> None:
    """Change the current bucket; without a path, go back to the root."""
    if not context.args:
        context.navigator.change_to_root()
        return
    context.navigator.change_bucket(context.args[0])


@_reports_errors
def mkdir_command(context: CommandContext) -> None:
    """Create a bucket at a key path."""
    if not context.args:
        context.error("mkdir: missing bucket name")
        return
    target, key = context.navigator.split_key_path(context.args[0])
    target.create_bucket(key)


@_reports_errors
def rm_command(context: CommandContext) -> None:
    """Delete the value or bucket at a key path."""
    if not context.args:
        context.error("rm: missing bucket or key name")
        return
    target, key = context.navigator.split_key_path(context.args[0])
    target.remove(key)


COMMANDS = (
    ShellCommand("ls", ls_command, "list keys", "lists keys in a bucket", complete_buckets),
    ShellCommand("get", get_command, "show value", "shows the value of a key", complete_keys),
    ShellCommand("put", put_command, "put value", "sets the value of a key", complete_keys),
    ShellCommand(
        "cd",
        cd_command,
        "jump to a bucket",
        "jumps to a bucket (empty to jump back to the root bucket)",
        complete_buckets,
    ),
    ShellCommand("mkdir", mkdir_command, "create a bucket", "creates a bucket", complete_keys),
    ShellCommand("rm", rm_command, "delete a key", "deletes a key or bucket", complete_keys),
)
