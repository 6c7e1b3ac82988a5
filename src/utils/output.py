"""Utility functions for formatted CLI output."""

from collections.abc import Sequence
from typing import Any, Optional

import click


def print_header(title: str, width: int = 70, color: str = "cyan") -> None:
    """Print a formatted header.

    Args:
        title: Header title
        width: Header width
        color: Header color
    """
    click.echo()
    click.echo(click.style("=" * width, fg=color))
    click.echo(click.style(title, fg=color, bold=True))
    click.echo(click.style("=" * width, fg=color))
    click.echo()


def print_success(message: str) -> None:
    click.echo(click.style(f"✓ {message}", fg="green", bold=True))


def print_error(message: str, label: str = "Error") -> None:
    """Print an error message to stderr with a leading label.

    Args:
        message: Error message
        label: Prefix such as "Error" or "AWS Error"
    """
    click.echo(click.style(f"✗ {label}: {message}", fg="red", bold=True), err=True)


def print_warning(message: str) -> None:
    click.echo(click.style(f"⚠ {message}", fg="yellow", bold=True))


def print_info(message: str) -> None:
    click.echo(click.style(f"ℹ {message}", fg="blue"))


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    align: Optional[Sequence[str]] = None,
    header_color: str = "cyan",
) -> None:
    """Print a formatted table.

    Args:
        headers: Table headers
        rows: Table rows
        align: Per-column alignment, "<" (left) or ">" (right); defaults to left
        header_color: Header color
    """
    if not rows:
        return

    alignment = list(align or [])
    alignment += ["<"] * (len(headers) - len(alignment))

    col_widths = [len(str(h)) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(str(cell)))

    def render(cells: Sequence[Any]) -> str:
        return " | ".join(
            f"{str(cell):{alignment[i]}{col_widths[i]}}" for i, cell in enumerate(cells)
        )

    header_row = render(headers)
    click.echo(click.style(header_row, fg=header_color, bold=True))
    click.echo(click.style("-" * len(header_row), dim=True))

    for row in rows:
        click.echo(render(row))
