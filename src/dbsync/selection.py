"""Interactive selection of a listed object."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import click

from dbsync.exceptions import SelectionError
from dbsync.models import ObjectSummary

SelectionIndex = dict[int, str]


class SelectionStatus(str, Enum):
    SELECTED = "selected"
    SKIPPED = "skipped"
    INVALID = "invalid"


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of parsing one line of selection input."""

    status: SelectionStatus
    key: Optional[str] = None
    index: Optional[int] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status != SelectionStatus.INVALID


def build_selection_index(objects: Sequence[ObjectSummary]) -> SelectionIndex:
    """Map 1-based display positions to object keys."""
    return {position: obj.key for position, obj in enumerate(objects, start=1)}


def parse_selection(raw: Optional[str], index: SelectionIndex) -> SelectionResult:
    """Validate raw selection input against the displayed index.

    Empty input means the user chose to skip.
    """
    text = (raw or "").strip()
    if not text:
        return SelectionResult(SelectionStatus.SKIPPED, message="No object selected")

    try:
        position = int(text)
    except ValueError:
        return SelectionResult(
            SelectionStatus.INVALID,
            message=f"'{text}' is not a number",
        )

    if position not in index:
        if index:
            message = f"Choose a number between 1 and {len(index)}"
        else:
            message = "There is nothing to select"
        return SelectionResult(SelectionStatus.INVALID, index=position, message=message)

    return SelectionResult(SelectionStatus.SELECTED, key=index[position], index=position)


def prompt_for_selection(
    index: SelectionIndex,
    prompt: Callable[..., str] = click.prompt,
    on_invalid: Callable[[str], None] = click.echo,
) -> SelectionResult:
    """Ask until the input is a valid index or empty.

    Returns:
        A selected or skipped result; invalid input is reported through
        ``on_invalid`` and asked again
    """
    while True:
        raw = prompt(
            "Select an object to download (empty to skip)",
            default="",
            show_default=False,
        )
        result = parse_selection(raw, index)
        if result.ok:
            return result
        on_invalid(result.message)


def select_non_interactive(choice: int, index: SelectionIndex) -> SelectionResult:
    """Resolve a selection given on the command line.

    Raises:
        SelectionError: If the choice is not in the index
    """
    result = parse_selection(str(choice), index)
    if not result.ok:
        raise SelectionError(
            f"Invalid selection {choice}: {result.message}",
            context={"choices": len(index)},
        )
    return result
