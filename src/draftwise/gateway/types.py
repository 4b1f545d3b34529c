"""Request/response types and errors for draft and publish gateways."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class GatewayError(RuntimeError):
    """A gateway call failed (network, auth, storage, server)."""


class DraftNotFoundError(GatewayError):
    """Draft is missing or owned by another user; both look the same to callers."""

    def __init__(self, draft_id: str) -> None:
        super().__init__("Draft not found")
        self.draft_id = draft_id


@dataclass
class SaveDraftRequest:
    user_id: str
    wizard_type: str
    wizard_config_id: str
    form_data: dict[str, Any]
    current_step_id: str
    title: str | None = None
    description: str | None = None
    draft_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "wizardType": self.wizard_type,
            "wizardConfigId": self.wizard_config_id,
            "formData": self.form_data,
            "currentStepId": self.current_step_id,
            "title": self.title,
            "description": self.description,
            "draftId": self.draft_id,
        }


@dataclass
class LoadedDraft:
    draft_id: str
    form_data: dict[str, Any]
    current_step_id: str | None


@dataclass
class DraftRecord:
    draft_id: str
    user_id: str
    wizard_type: str
    wizard_config_id: str
    form_data: dict[str, Any]
    current_step_id: str | None
    title: str | None = None
    description: str | None = None
    created_at: str = field(default_factory=lambda: utc_now())
    updated_at: str = field(default_factory=lambda: utc_now())

    def to_dict(self) -> dict[str, Any]:
        return {
            "draft_id": self.draft_id,
            "user_id": self.user_id,
            "wizard_type": self.wizard_type,
            "wizard_config_id": self.wizard_config_id,
            "form_data": self.form_data,
            "current_step_id": self.current_step_id,
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DraftRecord":
        return cls(
            draft_id=str(payload["draft_id"]),
            user_id=str(payload["user_id"]),
            wizard_type=str(payload.get("wizard_type", "")),
            wizard_config_id=str(payload.get("wizard_config_id", "")),
            form_data=dict(payload.get("form_data") or {}),
            current_step_id=payload.get("current_step_id"),
            title=payload.get("title"),
            description=payload.get("description"),
            created_at=str(payload.get("created_at") or utc_now()),
            updated_at=str(payload.get("updated_at") or utc_now()),
        )

    def to_loaded(self) -> LoadedDraft:
        return LoadedDraft(
            draft_id=self.draft_id,
            form_data=dict(self.form_data),
            current_step_id=self.current_step_id,
        )


@dataclass
class PublishRequest:
    draft_id: str
    user_id: str
    form_data: dict[str, Any] | None = None
    publish_options: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "draftId": self.draft_id,
            "userId": self.user_id,
            "finalFormData": self.form_data,
            "publishOptions": self.publish_options,
        }


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
