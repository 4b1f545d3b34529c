"""HTTP-backed draft and publish gateway."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

import httpx

from draftwise.gateway.types import (
    DraftNotFoundError,
    DraftRecord,
    GatewayError,
    LoadedDraft,
    PublishRequest,
    SaveDraftRequest,
)
from draftwise.logs import get_logger

logger = get_logger(__name__)

_NOT_FOUND_STATUSES = {403, 404}


@dataclass
class HttpGatewayError(GatewayError):
    status_code: int
    response_text: str
    request_id: str | None
    endpoint: str

    def __str__(self) -> str:
        return f"HttpGatewayError(status={self.status_code}, endpoint={self.endpoint}, request_id={self.request_id})"


class HttpDraftGateway:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        resolved_url = base_url or os.environ.get("DRAFTWISE_API_URL")
        if not resolved_url:
            raise ValueError("DRAFTWISE_API_URL is required for HttpDraftGateway.")
        self._api_token = api_token or os.environ.get("DRAFTWISE_API_TOKEN")
        self._base_url = resolved_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=timeout_s, transport=transport)

    async def save_draft(self, request: SaveDraftRequest) -> str:
        data = await self._request("POST", "/drafts", json=request.to_dict())
        return _extract_draft_id(data, request)

    async def auto_save_draft(self, request: SaveDraftRequest, interval_ms: int | None = None) -> str:
        body = request.to_dict()
        if interval_ms is not None:
            body["intervalMs"] = interval_ms
        data = await self._request("POST", "/drafts/autosave", json=body)
        return _extract_draft_id(data, request)

    async def load_draft(self, draft_id: str, user_id: str) -> LoadedDraft:
        data = await self._request("GET", f"/drafts/{draft_id}", params={"userId": user_id}, draft_id=draft_id)
        return _record_from_payload(data, draft_id=draft_id, user_id=user_id).to_loaded()

    async def delete_draft(self, draft_id: str, user_id: str) -> None:
        await self._request("DELETE", f"/drafts/{draft_id}", params={"userId": user_id}, draft_id=draft_id)

    async def list_drafts(self, user_id: str, wizard_type: str | None = None) -> list[DraftRecord]:
        params = {"userId": user_id}
        if wizard_type is not None:
            params["wizardType"] = wizard_type
        data = await self._request("GET", "/drafts", params=params)
        items = data.get("drafts") if isinstance(data, dict) else data
        return [_record_from_payload(item, user_id=user_id) for item in items or []]

    async def publish(self, request: PublishRequest) -> str:
        data = await self._request(
            "POST",
            f"/drafts/{request.draft_id}/publish",
            json=request.to_dict(),
            draft_id=request.draft_id,
        )
        entity_id = (data.get("entityId") or data.get("id")) if isinstance(data, dict) else None
        if not entity_id:
            raise GatewayError("Publish response did not include an entity id.")
        return str(entity_id)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpDraftGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        draft_id: str | None = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method, endpoint, json=json, params=params, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, endpoint, exc)
            raise GatewayError(f"Request to {endpoint} failed: {exc}") from exc

        if draft_id is not None and response.status_code in _NOT_FOUND_STATUSES:
            raise DraftNotFoundError(draft_id)
        if response.status_code < 200 or response.status_code >= 300:
            raise HttpGatewayError(
                status_code=response.status_code,
                response_text=response.text,
                request_id=response.headers.get("x-request-id"),
                endpoint=endpoint,
            )
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"Invalid JSON from {endpoint}.") from exc

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers


def _extract_draft_id(data: Any, request: SaveDraftRequest) -> str:
    if isinstance(data, dict):
        draft_id = data.get("draftId") or data.get("id")
        if draft_id:
            return str(draft_id)
    if request.draft_id:
        return request.draft_id
    raise GatewayError("Save response did not include a draft id.")


def _pick(payload: dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in payload:
        return payload[camel]
    return payload.get(snake, default)


def _record_from_payload(payload: Any, *, draft_id: str | None = None, user_id: str) -> DraftRecord:
    if not isinstance(payload, dict):
        raise GatewayError("Draft payload must be an object.")
    resolved_id = _pick(payload, "draftId", "draft_id") or payload.get("id") or draft_id
    if not resolved_id:
        raise GatewayError("Draft payload did not include an id.")
    record_kwargs: dict[str, Any] = {}
    created_at = _pick(payload, "createdAt", "created_at")
    updated_at = _pick(payload, "updatedAt", "updated_at")
    if created_at:
        record_kwargs["created_at"] = str(created_at)
    if updated_at:
        record_kwargs["updated_at"] = str(updated_at)
    return DraftRecord(
        draft_id=str(resolved_id),
        user_id=str(_pick(payload, "userId", "user_id", user_id)),
        wizard_type=str(_pick(payload, "wizardType", "wizard_type", "")),
        wizard_config_id=str(_pick(payload, "wizardConfigId", "wizard_config_id", "")),
        form_data=dict(_pick(payload, "formData", "form_data") or {}),
        current_step_id=_pick(payload, "currentStepId", "current_step_id"),
        title=payload.get("title"),
        description=payload.get("description"),
        **record_kwargs,
    )
