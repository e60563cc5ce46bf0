"""
accurapp-scripts - Build tooling for accurapp projects

Usage:
    accurapp-scripts build

Run from the project root. The bundler command defaults to
``npx webpack --mode production`` and can be replaced with the
ACCURAPP_BUNDLER environment variable (also read from ``.env``).
"""

import os
import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from typing import NamedTuple, Optional

import typer
from dotenv import load_dotenv
from rich.align import Align
from typer.core import TyperGroup

from accurapp_cli.file_sizes import measure_file_sizes_before_build, print_file_sizes_after_build
from accurapp_cli.utils import CommandResult, console, log, show_banner

BANNER_COLORS = ("cyan", "magenta")
DEFAULT_BUNDLER_COMMAND = "npx webpack --mode production"
COMPILER_ERROR_EXIT_CODE = 2


class BuildConfig(NamedTuple):
    app_dir: Path
    public_dir: Path
    build_dir: Path
    bundler_command: list[str]

    @classmethod
    def from_env(cls, app_dir: Optional[Path] = None) -> "BuildConfig":
        app_dir = app_dir or Path.cwd()
        bundler = os.getenv("ACCURAPP_BUNDLER") or DEFAULT_BUNDLER_COMMAND
        return cls(
            app_dir=app_dir,
            public_dir=app_dir / "public",
            build_dir=app_dir / "build",
            bundler_command=shlex.split(bundler),
        )


def load_environment(app_dir: Path) -> None:
    """Default NODE_ENV to production and pull in ``.env`` without overriding anything set."""
    os.environ.setdefault("NODE_ENV", "production")
    load_dotenv(app_dir / ".env", override=False)


def _skip_index_html(directory, names):
    # the bundler emits its own index.html
    return {"index.html"} & set(names)


def copy_public_folder(config: BuildConfig) -> None:
    log.info("Copying [cyan]public/[/cyan] folder...")
    shutil.copytree(
        config.public_dir,
        config.build_dir,
        symlinks=False,
        ignore=_skip_index_html,
        dirs_exist_ok=True,
    )


def run_compiler(config: BuildConfig) -> CommandResult:
    """Run the bundler in the project root.

    A bundler that cannot be started is an internal error and is left to
    propagate.
    """
    log.info("Creating an optimized production build...")
    proc = subprocess.run(config.bundler_command, cwd=config.app_dir)
    return CommandResult.from_returncode(proc.returncode)


def build_project(config: BuildConfig) -> None:
    """Measure, copy, compile, report. Each stage needs the previous one done."""
    previous_file_sizes = measure_file_sizes_before_build(config.build_dir)
    copy_public_folder(config)

    result = run_compiler(config)
    if not result.ok:
        log.err("Aborting")
        raise typer.Exit(COMPILER_ERROR_EXIT_CODE)

    log.ok("The [cyan]build/[/cyan] folder is ready to be deployed.")
    log.info("File sizes after gzip:")
    console.print()
    print_file_sizes_after_build(config.build_dir, previous_file_sizes)
    console.print()


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner(BANNER_COLORS)
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="accurapp-scripts",
    help="Build tooling for accurapp projects",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def callback(ctx: typer.Context):
    """Show banner when no subcommand is provided."""
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner(BANNER_COLORS)
        console.print(Align.center("[dim]Run 'accurapp-scripts --help' for usage information[/dim]"))
        console.print()


@app.command()
def build():
    """Create an optimized production build in build/ and report the gzip sizes."""
    app_dir = Path.cwd()
    load_environment(app_dir)
    config = BuildConfig.from_env(app_dir)

    show_banner(BANNER_COLORS)
    build_project(config)


def main():
    app()


if __name__ == "__main__":
    main()
