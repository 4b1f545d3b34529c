"""In-memory draft and publish gateway for tests and offline sessions."""

from __future__ import annotations

import asyncio
import copy
import uuid
from typing import Any, Iterable

from draftwise.gateway.types import (
    DraftNotFoundError,
    DraftRecord,
    GatewayError,
    LoadedDraft,
    PublishRequest,
    SaveDraftRequest,
    utc_now,
)


class InMemoryDraftGateway:
    def __init__(
        self,
        *,
        latency_ms: int = 0,
        fail_operations: Iterable[str] = (),
        failure_message: str = "Simulated gateway failure.",
    ) -> None:
        self._latency_ms = latency_ms
        self.fail_operations = set(fail_operations)
        self._failure_message = failure_message
        self.drafts: dict[str, DraftRecord] = {}
        self.published: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []
        self._publish_counter = 0
        self.closed = False

    async def save_draft(self, request: SaveDraftRequest) -> str:
        await self._enter("save_draft")
        return self._store(request)

    async def auto_save_draft(self, request: SaveDraftRequest, interval_ms: int | None = None) -> str:
        await self._enter("auto_save_draft")
        return self._store(request)

    async def load_draft(self, draft_id: str, user_id: str) -> LoadedDraft:
        await self._enter("load_draft")
        record = self._owned(draft_id, user_id)
        return record.to_loaded()

    async def delete_draft(self, draft_id: str, user_id: str) -> None:
        await self._enter("delete_draft")
        self._owned(draft_id, user_id)
        del self.drafts[draft_id]

    async def list_drafts(self, user_id: str, wizard_type: str | None = None) -> list[DraftRecord]:
        await self._enter("list_drafts")
        records = [
            record
            for record in self.drafts.values()
            if record.user_id == user_id and (wizard_type is None or record.wizard_type == wizard_type)
        ]
        return sorted(records, key=lambda record: record.updated_at, reverse=True)

    async def publish(self, request: PublishRequest) -> str:
        await self._enter("publish")
        record = self._owned(request.draft_id, request.user_id)
        self._publish_counter += 1
        entity_id = f"{record.wizard_type}-{self._publish_counter}"
        form_data = request.form_data if request.form_data is not None else record.form_data
        self.published[entity_id] = {
            "wizard_type": record.wizard_type,
            "user_id": record.user_id,
            "form_data": copy.deepcopy(form_data),
            "options": dict(request.publish_options),
        }
        del self.drafts[request.draft_id]
        return entity_id

    async def aclose(self) -> None:
        self.closed = True

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self._latency_ms:
            await asyncio.sleep(self._latency_ms / 1000.0)
        if operation in self.fail_operations:
            raise GatewayError(self._failure_message)

    def _store(self, request: SaveDraftRequest) -> str:
        draft_id = request.draft_id or uuid.uuid4().hex
        existing = self.drafts.get(draft_id)
        if existing is not None and existing.user_id != request.user_id:
            raise DraftNotFoundError(draft_id)
        now = utc_now()
        self.drafts[draft_id] = DraftRecord(
            draft_id=draft_id,
            user_id=request.user_id,
            wizard_type=request.wizard_type,
            wizard_config_id=request.wizard_config_id,
            form_data=copy.deepcopy(request.form_data),
            current_step_id=request.current_step_id,
            title=request.title,
            description=request.description,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        return draft_id

    def _owned(self, draft_id: str, user_id: str) -> DraftRecord:
        record = self.drafts.get(draft_id)
        if record is None or record.user_id != user_id:
            raise DraftNotFoundError(draft_id)
        return record
