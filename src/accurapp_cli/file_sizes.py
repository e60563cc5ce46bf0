"""Gzip size measurement and the before/after report printed by ``accurapp-scripts build``."""

import gzip
import re
from pathlib import Path

from rich.table import Table
from rich.text import Text

from accurapp_cli.utils import console

FIFTY_KILOBYTES = 1024 * 50
ASSET_SUFFIXES = (".js", ".css")
FILE_NAME_HASH = re.compile(r"^/?(.*)(\.\w+)(\.js|\.css)$")


def gzip_size(path: Path) -> int:
    return len(gzip.compress(path.read_bytes(), compresslevel=9))


def format_size(num_bytes: float) -> str:
    """Human readable size, base 1024, at most two decimals (``1.5 KB``)."""
    sign = "-" if num_bytes < 0 else ""
    size = abs(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            break
        size /= 1024
    rounded = f"{size:.2f}".rstrip("0").rstrip(".")
    return f"{sign}{rounded} {unit}"


def remove_file_name_hash(name: str) -> str:
    """``static/js/main.3f2a1c.js`` -> ``static/js/main.js``"""
    return FILE_NAME_HASH.sub(r"\1\3", name)


def iter_assets(build_dir: Path):
    if not build_dir.is_dir():
        return
    for path in sorted(build_dir.rglob("*")):
        if path.is_file() and path.suffix in ASSET_SUFFIXES:
            yield path


def measure_file_sizes_before_build(build_dir: Path) -> dict[str, int]:
    """Map every hash-stripped asset name in ``build_dir`` to its gzip size."""
    return {
        remove_file_name_hash(path.relative_to(build_dir).as_posix()): gzip_size(path)
        for path in iter_assets(build_dir)
    }


def difference_label(current_size: int, previous_size: int) -> Text:
    difference = current_size - previous_size
    if difference >= FIFTY_KILOBYTES:
        return Text(f"+{format_size(difference)}", style="red")
    if difference > 0:
        return Text(f"+{format_size(difference)}", style="yellow")
    if difference < 0:
        return Text(format_size(difference), style="green")
    return Text()


def file_size_rows(build_dir: Path, previous_sizes: dict[str, int]) -> list[tuple[str, int, Text]]:
    """Return ``(relative path, gzip size, difference)`` rows, biggest first."""
    rows = []
    for path in iter_assets(build_dir):
        name = path.relative_to(build_dir).as_posix()
        size = gzip_size(path)
        previous_size = previous_sizes.get(remove_file_name_hash(name))
        difference = difference_label(size, previous_size) if previous_size is not None else Text()
        rows.append((name, size, difference))
    rows.sort(key=lambda row: row[1], reverse=True)
    return rows


def print_file_sizes_after_build(build_dir: Path, previous_sizes: dict[str, int]) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="left")
    table.add_column(justify="left")

    folder = build_dir.name
    for name, size, difference in file_size_rows(build_dir, previous_sizes):
        size_label = Text(format_size(size))
        if difference:
            size_label.append(" (")
            size_label.append_text(difference)
            size_label.append(")")

        directory, _, file_name = name.rpartition("/")
        location = Text(f"{folder}/{directory + '/' if directory else ''}", style="dim")
        location.append(file_name, style="cyan")
        table.add_row(size_label, location)

    console.print(table, soft_wrap=True)
