"""Console helpers shared by create-accurapp and accurapp-scripts."""

import signal
import subprocess
from typing import NamedTuple, NoReturn, Optional, Sequence, Union

import typer
from rich.console import Console
from rich.markup import escape
from rich.text import Text

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

# "Big Money-nw" rendering of "/||||/| accurapp", pipes drawn as "l"
BANNER = r"""
      $$\ $$\ $$\ $$\ $$\       $$\ $$\
     $$  |$$ |$$ |$$ |$$ |     $$  |$$ |    $$$$$$\   $$$$$$$\  $$$$$$$\ $$\   $$\  $$$$$$\   $$$$$$\   $$$$$$\   $$$$$$\
    $$  / $$ |$$ |$$ |$$ |    $$  / $$ |    \____$$\ $$  _____|$$  _____|$$ |  $$ |$$  __$$\  \____$$\ $$  __$$\ $$  __$$\
   $$  /  $$ |$$ |$$ |$$ |   $$  /  $$ |    $$$$$$$ |$$ /      $$ /      $$ |  $$ |$$ |  \__| $$$$$$$ |$$ /  $$ |$$ /  $$ |
  $$  /   $$ |$$ |$$ |$$ |  $$  /   $$ |   $$  __$$ |$$ |      $$ |      $$ |  $$ |$$ |      $$  __$$ |$$ |  $$ |$$ |  $$ |
 $$  /    $$ |$$ |$$ |$$ | $$  /    $$ |   \$$$$$$$ |\$$$$$$$\ \$$$$$$$\ \$$$$$$  |$$ |      \$$$$$$$ |$$$$$$$  |$$$$$$$  |
$$  /     \__|\__|\__|\__|$$  /     \__|    \_______| \_______| \_______| \______/ \__|       \_______|$$  ____/ $$  ____/
\__/                      \__/                                                                         $$ |      $$ |
                                                                                                       \__|      \__|
"""


BANNER_CHAR_ROLES = {"$": 0, "_": 1, "|": 1, "\\": 1, "/": 1}


Command = Union[str, Sequence[str]]


class CommandResult(NamedTuple):
    status: Optional[int]
    signal: Optional[str]

    @property
    def ok(self) -> bool:
        return self.status == 0 and self.signal is None

    @classmethod
    def from_returncode(cls, returncode: int) -> "CommandResult":
        # subprocess reports a fatal signal as a negative return code
        if returncode < 0:
            try:
                signal_name = signal.Signals(-returncode).name
            except ValueError:
                # real-time signals have no name in the enum
                signal_name = f"signal {-returncode}"
            return cls(status=None, signal=signal_name)
        return cls(status=returncode, signal=None)


class Log:
    """Three-level console log: ``:::`` ok, ``!!!`` error, ``---`` info."""

    def ok(self, message: str) -> None:
        console.print(f"::: [yellow]{message}[/yellow]")

    def err(self, message: str) -> None:
        err_console.print(f"!!! [red]{message}[/red]")

    def info(self, message: str) -> None:
        console.print(f"--- [blue]{message}[/blue]")


log = Log()


def reindent(text: str, num_spaces: int = 2) -> str:
    """Prefix every line of ``text`` with ``num_spaces`` spaces."""
    return "\n".join(f"{' ' * num_spaces}{line}" for line in text.split("\n"))


def colored_banner(colors: Sequence[str] = ("blue", "red"), indent: int = 0) -> Text:
    """Return the banner with ``$`` fills in the first color and the strokes in the second."""
    banner = Text()
    for char in reindent(BANNER, indent) if indent else BANNER:
        role = BANNER_CHAR_ROLES.get(char)
        if char.isspace():
            banner.append(char)
        elif role is None:
            banner.append(char, style="white")
        else:
            banner.append(char, style=colors[role])
    return banner


def show_banner(colors: Sequence[str] = ("blue", "red"), indent: int = 0) -> None:
    console.print(colored_banner(colors, indent), soft_wrap=True)


def abort(message: str, code: int = 1) -> NoReturn:
    """Print the failure and terminate the current command with ``code``."""
    err_console.print()
    log.err(message)
    log.err("Aborting.")
    raise typer.Exit(code)


def format_command(command: Command) -> str:
    return command if isinstance(command, str) else " ".join(command)


def run_command(command: Command, cwd) -> CommandResult:
    """Run a command synchronously in ``cwd`` with inherited stdio.

    A string command is split on whitespace; a sequence is passed through
    untouched. A failed start, a non-zero exit status or a termination signal
    aborts the process.
    """
    if not cwd:
        raise ValueError("run_command called without directory.")

    args = command.split() if isinstance(command, str) else list(command)
    shown = escape(format_command(command))
    try:
        proc = subprocess.run(args, cwd=cwd)
    except OSError as e:
        abort(f"Command '[cyan]{shown}[/cyan]' failed with error: \"{escape(str(e))}\"")

    result = CommandResult.from_returncode(proc.returncode)
    if result.signal is not None:
        abort(f"Command '[cyan]{shown}[/cyan]' exited with signal: \"{result.signal}\"")
    if result.status != 0:
        abort(f"Command '[cyan]{shown}[/cyan]' failed with error: \"exit status {result.status}\"")

    return result
