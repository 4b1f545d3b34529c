"""Mutable session state owned by a single wizard engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class WizardSessionState:
    data: dict[str, Any] = field(default_factory=dict)
    current_step_index: int = 0
    errors: dict[str, str] = field(default_factory=dict)
    is_loading: bool = False
    is_saving: bool = False
    is_validating: bool = False
    has_draft: bool = False
    last_error: str | None = None
    draft_id: str | None = None
    auto_save_failures: int = 0
    # bare field keys in ``errors`` and the step that reported them
    error_owners: dict[str, str] = field(default_factory=dict)

    def merge_step_errors(self, step_id: str, errors: dict[str, str]) -> None:
        for key, message in errors.items():
            self.errors[key] = message
            self.error_owners[key] = step_id

    def clear_field(self, field_name: str, step_id: str) -> None:
        self.errors.pop(field_name, None)
        self.errors.pop(f"{step_id}.{field_name}", None)
        self.error_owners.pop(field_name, None)

    def clear_step(self, step_id: str) -> None:
        prefix = f"{step_id}."
        for key in list(self.errors):
            if key.startswith(prefix) or self.error_owners.get(key) == step_id:
                del self.errors[key]
                self.error_owners.pop(key, None)

    def clear_all(self) -> None:
        self.errors.clear()
        self.error_owners.clear()

    def replace_errors(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        self.error_owners = {}
