"""Filesystem-backed draft gateway: one JSON document per draft."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
import uuid

from draftwise.gateway.types import (
    DraftNotFoundError,
    DraftRecord,
    GatewayError,
    LoadedDraft,
    PublishRequest,
    SaveDraftRequest,
    utc_now,
)
from draftwise.logs import get_logger
from draftwise.storage import is_safe_name, read_json, remove_file, write_json

logger = get_logger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=24)


class FileDraftGateway:
    """Drafts stored as ``<base_dir>/<draft_id>.json``.

    Draft ids must be usable as file names unchanged (letters, digits, ``_``
    and ``-``), so every id maps to exactly one file. File access runs in a
    worker thread to keep the event loop free for the auto-save ticker.
    """

    def __init__(self, *, base_dir: Path | str = Path("./drafts"), max_age: timedelta | None = DEFAULT_MAX_AGE) -> None:
        self._base_dir = Path(base_dir)
        self._max_age = max_age

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def save_draft(self, request: SaveDraftRequest) -> str:
        return await asyncio.to_thread(self._store, request)

    async def auto_save_draft(self, request: SaveDraftRequest, interval_ms: int | None = None) -> str:
        return await asyncio.to_thread(self._store, request)

    async def load_draft(self, draft_id: str, user_id: str) -> LoadedDraft:
        record = await asyncio.to_thread(self._owned, draft_id, user_id)
        return record.to_loaded()

    async def delete_draft(self, draft_id: str, user_id: str) -> None:
        await asyncio.to_thread(self._delete, draft_id, user_id)
        logger.info("Deleted draft %s", draft_id)

    async def list_drafts(self, user_id: str, wizard_type: str | None = None) -> list[DraftRecord]:
        return await asyncio.to_thread(self._list, user_id, wizard_type)

    async def publish(self, request: PublishRequest) -> str:
        return await asyncio.to_thread(self._publish, request)

    def clear_expired(self) -> int:
        """Delete drafts older than the maximum age; return how many were removed."""
        removed = 0
        for path, record in self._iter_records():
            if self._is_expired(record) and remove_file(path):
                removed += 1
        if removed:
            logger.info("Removed %d expired drafts", removed)
        return removed

    async def aclose(self) -> None:
        return None

    def _store(self, request: SaveDraftRequest) -> str:
        draft_id = request.draft_id or uuid.uuid4().hex
        if not is_safe_name(draft_id):
            raise GatewayError(f"Invalid draft id {draft_id!r}.")
        path = self._draft_path(draft_id)
        existing = self._read(path)
        if existing is not None and existing.user_id != request.user_id:
            raise DraftNotFoundError(draft_id)
        now = utc_now()
        record = DraftRecord(
            draft_id=draft_id,
            user_id=request.user_id,
            wizard_type=request.wizard_type,
            wizard_config_id=request.wizard_config_id,
            form_data=request.form_data,
            current_step_id=request.current_step_id,
            title=request.title,
            description=request.description,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        try:
            write_json(path, record.to_dict())
        except (OSError, TypeError, ValueError) as exc:
            raise GatewayError(f"Failed to write draft: {exc}") from exc
        return draft_id


    def _owned(self, draft_id: str, user_id: str) -> DraftRecord:
        if not is_safe_name(draft_id):
            raise DraftNotFoundError(draft_id)
        record = self._read(self._draft_path(draft_id))
        if record is None or record.user_id != user_id or self._is_expired(record):
            raise DraftNotFoundError(draft_id)
        return record

    def _delete(self, draft_id: str, user_id: str) -> None:
        self._owned(draft_id, user_id)
        remove_file(self._draft_path(draft_id))

    def _list(self, user_id: str, wizard_type: str | None) -> list[DraftRecord]:
        records: list[DraftRecord] = []
        for _, record in self._iter_records():
            if record.user_id != user_id or self._is_expired(record):
                continue
            if wizard_type is not None and record.wizard_type != wizard_type:
                continue
            records.append(record)
        return sorted(records, key=lambda record: record.updated_at, reverse=True)

    def _publish(self, request: PublishRequest) -> str:
        record = self._owned(request.draft_id, request.user_id)
        entity_id = f"{record.wizard_type}-{uuid.uuid4().hex[:12]}"
        form_data = request.form_data if request.form_data is not None else record.form_data
        payload = {
            "id": entity_id,
            "wizard_type": record.wizard_type,
            "user_id": record.user_id,
            "form_data": form_data,
            "options": request.publish_options,
            "published_at": utc_now(),
            "draft_id": record.draft_id,
        }
        try:
            write_json(self._base_dir / "published" / f"{entity_id}.json", payload)
        except OSError as exc:
            raise GatewayError(f"Failed to publish draft: {exc}") from exc
        remove_file(self._draft_path(request.draft_id))
        logger.info("Published draft %s as %s", record.draft_id, entity_id)
        return entity_id

    def _read(self, path: Path) -> DraftRecord | None:
        payload = read_json(path)
        if payload is None:
            return None
        try:
            return DraftRecord.from_dict(payload)
        except KeyError:
            logger.warning("Ignoring malformed draft file %s", path)
            return None

    def _iter_records(self):
        if not self._base_dir.exists():
            return
        for path in sorted(self._base_dir.glob("*.json")):
            record = self._read(path)
            if record is not None:
                yield path, record

    def _is_expired(self, record: DraftRecord) -> bool:
        if self._max_age is None:
            return False
        try:
            updated = datetime.fromisoformat(record.updated_at)
        except ValueError:
            return False
        if updated.tzinfo is None:
            updated = updated.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) - updated > self._max_age

    def _draft_path(self, draft_id: str) -> Path:
        return self._base_dir / f"{draft_id}.json"
