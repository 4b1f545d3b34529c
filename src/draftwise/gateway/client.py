"""Gateway interfaces and factory."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from draftwise.gateway.types import DraftRecord, LoadedDraft, PublishRequest, SaveDraftRequest


@runtime_checkable
class DraftGateway(Protocol):
    async def save_draft(self, request: SaveDraftRequest) -> str:
        """Create or update a draft and return its id."""

    async def auto_save_draft(self, request: SaveDraftRequest, interval_ms: int | None = None) -> str:
        """Best-effort save; ``interval_ms`` is a debounce hint."""

    async def load_draft(self, draft_id: str, user_id: str) -> LoadedDraft:
        """Return the draft owned by ``user_id`` or raise ``DraftNotFoundError``."""

    async def delete_draft(self, draft_id: str, user_id: str) -> None:
        """Remove a draft owned by ``user_id``."""

    async def list_drafts(self, user_id: str, wizard_type: str | None = None) -> list[DraftRecord]:
        """Return drafts owned by ``user_id``, newest first."""

    async def aclose(self) -> None:
        """Release any underlying resources."""


@runtime_checkable
class PublishGateway(Protocol):
    async def publish(self, request: PublishRequest) -> str:
        """Convert a draft into a published entity and return the entity id."""

    async def aclose(self) -> None:
        """Release any underlying resources."""


def create_gateway(mode: str, **kwargs: Any) -> DraftGateway:
    if mode == "memory":
        from draftwise.gateway.memory import InMemoryDraftGateway

        return InMemoryDraftGateway(**kwargs)
    if mode == "file":
        from draftwise.gateway.filesystem import FileDraftGateway

        return FileDraftGateway(**kwargs)
    if mode == "http":
        from draftwise.gateway.http import HttpDraftGateway

        return HttpDraftGateway(**kwargs)
    raise ValueError(f"Unsupported gateway mode: {mode}")
