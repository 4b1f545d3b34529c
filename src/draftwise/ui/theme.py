"""Rich theme for draftwise output."""

from __future__ import annotations

from rich.theme import Theme

THEME = Theme(
    {
        "accent": "bright_blue",
        "title": "bold bright_blue",
        "subtitle": "dim",
        "step": "bold bright_blue",
        "step.done": "green3",
        "step.pending": "dim",
        "info": "dim",
        "warning": "yellow3",
        "success": "green3",
        "error": "bold red3",
        "label": "dim",
        "value": "white",
        "path": "cyan",
        "border": "grey50",
        "draft.id": "cyan",
    }
)
