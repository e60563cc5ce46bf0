#!/usr/bin/env python3
"""
create-accurapp - Bootstrap a new accurapp project

Usage:
    create-accurapp <app-name>
    create-accurapp mega-viz --no-install

Or install globally:
    uv tool install create-accurapp
    create-accurapp <app-name>
"""

import json
import shutil
import sys
from pathlib import Path
from typing import NamedTuple, Optional, Sequence

import readchar
import typer
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from typer.core import TyperCommand

from accurapp_cli.utils import abort, console, log, run_command, show_banner

__version__ = "1.0.0"

TEMPLATE_DIR = Path(__file__).parent / "template"

# Constants
DEPENDENCIES = (
    "react",
    "react-dom",
    "d3",
    "lodash",
)
DEV_DEPENDENCIES = (
    "accurapp-scripts",
    "webpack-preset-accurapp",
    "eslint-config-accurapp",
)

PACKAGE_MANAGER_CHOICES = {"yarn": "Yarn", "npm": "npm", "pnpm": "pnpm"}
DEFAULT_PACKAGE_MANAGER = "yarn"
# (add command, dev flag, run-script prefix)
PACKAGE_MANAGER_COMMANDS = {
    "yarn": (["yarn", "add"], "--dev", "yarn"),
    "npm": (["npm", "install"], "--save-dev", "npm run"),
    "pnpm": (["pnpm", "add"], "--save-dev", "pnpm"),
}

APP_VERSION = "0.1.0"
APP_NAME_TOKEN = "{{APP_NAME}}"
APP_TITLE_TOKEN = "{{APP_TITLE}}"
TEMPLATED_FILES = ("src/index.html", "README.md")
FIRST_COMMIT_MESSAGE = "💥 Bang! First commit\n\nApp bootstrapped with create-accurapp"

HELP_BANNER_COLORS = ("red", "magenta")
RUN_BANNER_COLORS = ("yellow", "green")


def app_title(app_name: str) -> str:
    """Turn ``mega-viz`` into ``Mega Viz``."""
    return " ".join(part[:1].upper() + part[1:] for part in app_name.split("-"))


class ScaffoldRequest(NamedTuple):
    app_dir: Path
    git: bool = True
    install: bool = True
    dry_run: bool = False
    testing: bool = False
    package_manager: Optional[str] = None

    @property
    def app_name(self) -> str:
        return self.app_dir.name

    @property
    def app_title(self) -> str:
        return app_title(self.app_name)


def package_manifest(app_name: str) -> dict:
    """Return the initial package.json content for a new app."""
    return {
        "name": app_name,
        "private": True,
        "version": APP_VERSION,
        "scripts": {
            "start": "accurapp-scripts start",
            "build": "accurapp-scripts build",
        },
    }


def write_package_json(app_dir: Path, content: dict) -> None:
    """Write ``content`` as the app's package.json."""
    (app_dir / "package.json").write_text(json.dumps(content, indent=2) + "\n", encoding="utf-8")


def substitutions(app_name: str, title: str) -> list[tuple[str, str]]:
    """Return the token replacements applied to the templated files."""
    return [
        (APP_NAME_TOKEN, app_name),
        (APP_TITLE_TOKEN, title),
    ]


def template_overwriting(file_path: Path, substitutions: Sequence[tuple[str, str]]) -> None:
    """Replace every occurrence of each token in order, rewriting the file in place."""
    content = file_path.read_text(encoding="utf-8")
    for find, subst in substitutions:
        content = content.replace(find, subst)
    file_path.write_text(content, encoding="utf-8")


def materialize_template(app_dir: Path, substitutions: Sequence[tuple[str, str]]) -> None:
    """Copy the starter template into ``app_dir`` and fill in its tokens."""
    shutil.copytree(TEMPLATE_DIR, app_dir, dirs_exist_ok=True)
    # packaging tools drop dotfiles, so the template ships it without the dot
    (app_dir / "gitignore").rename(app_dir / ".gitignore")
    for relative_path in TEMPLATED_FILES:
        template_overwriting(app_dir / relative_path, substitutions)


def get_key():
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    if key == readchar.key.UP:
        return 'up'
    if key == readchar.key.DOWN:
        return 'down'
    if key == readchar.key.ENTER:
        return 'enter'
    if key == readchar.key.ESC:
        return 'escape'
    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key


def select_with_arrows(options: dict, prompt_text: str = "Select an option", default_key: str = None) -> str:
    """
    Interactive selection using arrow keys with Rich Live display.

    Args:
        options: Dict with keys as option keys and values as descriptions
        prompt_text: Text to show above the options
        default_key: Default option key to start with

    Returns:
        Selected option key
    """
    option_keys = list(options.keys())
    if default_key and default_key in option_keys:
        selected_index = option_keys.index(default_key)
    else:
        selected_index = 0

    def create_selection_panel():
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", justify="left", width=3)
        table.add_column(style="white", justify="left")

        for i, key in enumerate(option_keys):
            marker = "▶" if i == selected_index else " "
            table.add_row(marker, f"[cyan]{key}[/cyan] [dim]({options[key]})[/dim]")

        table.add_row("", "")
        table.add_row("", "[dim]Use ↑/↓ to navigate, Enter to select, Esc to cancel[/dim]")

        return Panel(
            table,
            title=f"[bold]{prompt_text}[/bold]",
            border_style="cyan",
            padding=(1, 2)
        )

    console.print()
    with Live(create_selection_panel(), console=console, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
            except KeyboardInterrupt:
                console.print("\n[yellow]Selection cancelled[/yellow]")
                raise typer.Exit(1)

            if key == 'up':
                selected_index = (selected_index - 1) % len(option_keys)
            elif key == 'down':
                selected_index = (selected_index + 1) % len(option_keys)
            elif key == 'enter':
                return option_keys[selected_index]
            elif key == 'escape':
                console.print("\n[yellow]Selection cancelled[/yellow]")
                raise typer.Exit(1)

            live.update(create_selection_panel(), refresh=True)


def resolve_package_manager(package_manager: Optional[str]) -> str:
    """Return the explicit choice, ask on a TTY, or fall back to yarn."""
    if package_manager:
        return package_manager
    if sys.stdin.isatty():
        return select_with_arrows(PACKAGE_MANAGER_CHOICES, "Choose your package manager", DEFAULT_PACKAGE_MANAGER)
    return DEFAULT_PACKAGE_MANAGER


def dev_dependencies_to_install(testing: bool = False) -> list[str]:
    """Return the dev packages to add, local checkouts when testing."""
    # --testing points the tooling at the sibling packages of this monorepo
    if testing:
        return [f"file:../packages/{dep}" for dep in DEV_DEPENDENCIES]
    return list(DEV_DEPENDENCIES)


def install_command(package_manager: str, packages: Sequence[str], dev: bool = False) -> list[str]:
    """Build the argv that adds ``packages`` with the given package manager."""
    add_command, dev_flag, _ = PACKAGE_MANAGER_COMMANDS[package_manager]
    flags = [dev_flag, "--ignore-scripts"] if dev else ["--ignore-scripts"]
    return [*add_command, *flags, *packages]


def install_dependencies(app_dir: Path, package_manager: str, *, testing: bool = False, real_run: bool = True) -> None:
    """Install dev packages, then runtime packages, into ``app_dir``."""
    dev_dependencies = dev_dependencies_to_install(testing)
    log.ok(f"Installing dev packages: {', '.join(f'[cyan]{escape(d)}[/cyan]' for d in dev_dependencies)}")
    if real_run:
        run_command(install_command(package_manager, dev_dependencies, dev=True), app_dir)

    log.ok(f"Installing packages: [cyan]{', '.join(DEPENDENCIES)}[/cyan]")
    if real_run:
        run_command(install_command(package_manager, DEPENDENCIES), app_dir)


def init_git_repo(app_dir: Path, *, real_run: bool = True) -> None:
    log.ok("Initializing git repo")
    if real_run:
        run_command("git init", app_dir)

    log.ok("Creating first commit")
    if real_run:
        run_command("git add .", app_dir)
        run_command(["git", "commit", "-a", "-m", FIRST_COMMIT_MESSAGE], app_dir)


def next_steps_panel(app_name: str, package_manager: str) -> Panel:
    _, _, run_prefix = PACKAGE_MANAGER_COMMANDS[package_manager]
    steps_lines = [
        f"1. Go to the project folder: [cyan]cd {escape(app_name)}[/cyan]",
        f"2. Start the development server: [cyan]{run_prefix} start[/cyan]",
        f"3. Create a production build: [cyan]{run_prefix} build[/cyan]",
    ]
    return Panel("\n".join(steps_lines), title="Quick tip", border_style="cyan", padding=(1, 2))


def scaffold(request: ScaffoldRequest) -> None:
    """Create and populate the app directory described by ``request``.

    Every step runs to completion before the next one starts. Under dry-run
    the same messages are printed but nothing touches the filesystem or
    spawns a process.
    """
    is_real_run = not request.dry_run
    app_dir = request.app_dir
    app_name = request.app_name

    if app_dir.exists():
        abort(f"The directory '{escape(app_name)}' is already existing!")

    log.ok(f"Creating a new app in [magenta]{escape(app_name)}[/magenta]")
    if is_real_run:
        app_dir.mkdir()

    log.ok("Creating package.json")
    if is_real_run:
        write_package_json(app_dir, package_manifest(app_name))

    log.ok("Creating dir structure")
    if is_real_run:
        materialize_template(app_dir, substitutions(app_name, request.app_title))

    if request.install:
        package_manager = resolve_package_manager(request.package_manager)
        install_dependencies(app_dir, package_manager, testing=request.testing, real_run=is_real_run)
    else:
        package_manager = request.package_manager or DEFAULT_PACKAGE_MANAGER
        log.info(f"Not running '{package_manager} add/install' because you chose so.")

    is_ready_git = (app_dir / ".gitignore").exists()
    if request.git and is_ready_git:
        init_git_repo(app_dir, real_run=is_real_run)
    else:
        if not request.git:
            log.info("Not running 'git init/add/commit' because you chose so.")
        if not is_ready_git:
            log.info("Not running 'git init/add/commit' because there is no '.gitignore' file.")

    log.ok("Done! Have fun with your new app.")
    console.print()
    console.print(next_steps_panel(app_name, package_manager))


class BannerCommand(TyperCommand):
    """Custom command that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner(HELP_BANNER_COLORS, indent=2)
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="create-accurapp",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool):
    if value:
        console.print(__version__)
        raise typer.Exit()


@app.command(cls=BannerCommand)
def create(
    ctx: typer.Context,
    app_name: Optional[str] = typer.Argument(None, metavar="<app-name>", help="Name of the folder to create"),
    version: bool = typer.Option(False, "--version", "-v", callback=version_callback, is_eager=True, help="Print current version"),
    no_git: bool = typer.Option(False, "--no-git", "-g", help="Do not run git init && git commit"),
    no_install: bool = typer.Option(False, "--no-install", "-i", help="Do not install the dependencies"),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Fake it all"),
    testing: bool = typer.Option(False, "--testing", "-t", help="(internal) Create a version for testing"),
    package_manager: Optional[str] = typer.Option(
        None,
        "--package-manager",
        "-p",
        envvar="ACCURAPP_PACKAGE_MANAGER",
        help="Package manager to install with: yarn, npm or pnpm",
    ),
):
    """
    Creates a folder named <app-name>, with a flexible JS build configuration.

    Example:
        create-accurapp mega-viz --no-install
    """
    if not app_name:
        log.err("No <app-name> specified! Displaying help.")
        typer.echo(ctx.get_help())
        raise typer.Exit(1)

    if package_manager and package_manager not in PACKAGE_MANAGER_CHOICES:
        log.err(f"Invalid package manager '{escape(package_manager)}'. Choose from: {', '.join(PACKAGE_MANAGER_CHOICES)}")
        raise typer.Exit(1)

    request = ScaffoldRequest(
        app_dir=Path(app_name).resolve(),
        git=not no_git,
        install=not no_install,
        dry_run=dry_run,
        testing=testing,
        package_manager=package_manager,
    )

    show_banner(RUN_BANNER_COLORS)
    scaffold(request)


def main():
    app()


if __name__ == "__main__":
    main()
