"""Render helpers for draftwise terminal output."""

from __future__ import annotations

from typing import Mapping, Sequence

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from draftwise.gateway.types import DraftRecord
from draftwise.ui.console import get_console


def render_banner(title: str, subtitle: str) -> None:
    console = get_console()
    panel = Panel(
        Group(Text(subtitle, style="subtitle")),
        title=Text(title, style="step"),
        title_align="left",
        box=box.ROUNDED,
        border_style="border",
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)
    console.print()


def render_info(text: str) -> None:
    get_console().print(text, style="info", markup=False)


def render_warning(text: str) -> None:
    get_console().print(text, style="warning", markup=False)


def render_success(text: str) -> None:
    get_console().print(text, style="success", markup=False)


def render_error(text: str) -> None:
    console = get_console()
    panel = Panel(
        Text(text, style="error"),
        box=box.ROUNDED,
        border_style="error",
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)


def render_summary_table(rows: Mapping[str, object] | Sequence[tuple[str, object]], title: str = "Summary") -> None:
    console = get_console()
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="label", no_wrap=True, justify="right")
    table.add_column(style="value")

    items = rows.items() if hasattr(rows, "items") else rows
    for key, value in items:
        value_text = Text("-" if value is None else str(value), style="value")
        if str(key).lower() in {"draft", "draft id"}:
            value_text.stylize("draft.id")
        table.add_row(Text(str(key), style="label"), value_text)

    panel = Panel(
        table,
        title=Text(title, style="step"),
        title_align="left",
        border_style="border",
        box=box.ROUNDED,
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)


def render_validation_panel(title: str, issues: Sequence[str], *, style: str) -> None:
    console = get_console()
    lines = [Text(f"- {issue}", style=style) for issue in issues]
    panel = Panel(
        Group(*lines),
        title=Text(title, style="step"),
        title_align="left",
        box=box.ROUNDED,
        border_style="border",
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)


def render_steps_overview(steps: Sequence[tuple[str, str, bool]], current: str | None = None) -> None:
    console = get_console()
    lines = []
    for index, (step_id, title, optional) in enumerate(steps, start=1):
        marker = ">" if step_id == current else " "
        label = f"{marker} {index:>2}. {title} ({step_id})"
        if optional:
            label += " [optional]"
        lines.append(Text(label, style="step" if step_id == current else "value"))
    panel = Panel(
        Group(*lines),
        title=Text("Steps", style="step"),
        title_align="left",
        box=box.ROUNDED,
        border_style="border",
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)


def drafts_table(records: Sequence[DraftRecord]) -> Table:
    table = Table(show_header=True, box=box.SIMPLE_HEAD, pad_edge=False)
    table.add_column("Draft", style="draft.id", no_wrap=True)
    table.add_column("Type", style="label", no_wrap=True)
    table.add_column("Title", style="value")
    table.add_column("Step", style="label", no_wrap=True)
    table.add_column("Updated", style="label", no_wrap=True)
    for record in records:
        table.add_row(
            record.draft_id,
            record.wizard_type,
            record.title or "-",
            record.current_step_id or "-",
            record.updated_at[:19].replace("T", " "),
        )
    return table


def render_drafts(records: Sequence[DraftRecord], *, title: str = "Drafts") -> None:
    console = get_console()
    if not records:
        console.print("No drafts found.", style="info")
        return
    panel = Panel(
        drafts_table(records),
        title=Text(title, style="step"),
        title_align="left",
        border_style="border",
        box=box.ROUNDED,
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)
