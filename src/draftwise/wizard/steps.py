"""Step descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from draftwise.validation import Rule, Schema


@dataclass(frozen=True)
class Step:
    step_id: str
    title: str
    description: str = ""
    validation: Rule | None = None
    render: Any = None
    optional: bool = False

    @property
    def id(self) -> str:
        return self.step_id

    @property
    def field_names(self) -> list[str]:
        if isinstance(self.validation, Schema):
            return self.validation.field_names
        return []


StepDescriptor = Step


def step_index(steps: tuple[Step, ...] | list[Step], step_id: str) -> int:
    """Return the position of ``step_id`` in ``steps``, or -1."""
    for index, step in enumerate(steps):
        if step.step_id == step_id:
            return index
    return -1
