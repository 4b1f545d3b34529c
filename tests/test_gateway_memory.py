from __future__ import annotations

import pytest

from draftwise.gateway.client import DraftGateway, PublishGateway, create_gateway
from draftwise.gateway.memory import InMemoryDraftGateway
from draftwise.gateway.types import DraftNotFoundError, GatewayError, PublishRequest, SaveDraftRequest


def _request(user_id: str = "user-1") -> SaveDraftRequest:
    return SaveDraftRequest(
        user_id=user_id,
        wizard_type="property",
        wizard_config_id="property-basic",
        form_data={"title": "Loft", "rooms": [1, 2]},
        current_step_id="basic",
    )


def test_memory_gateway_implements_both_protocols() -> None:
    gateway = create_gateway("memory")
    assert isinstance(gateway, DraftGateway)
    assert isinstance(gateway, PublishGateway)


@pytest.mark.asyncio
async def test_saved_data_is_isolated_from_caller() -> None:
    gateway = InMemoryDraftGateway()
    request = _request()
    draft_id = await gateway.save_draft(request)
    request.form_data["rooms"].append(3)
    loaded = await gateway.load_draft(draft_id, "user-1")
    assert loaded.form_data == {"title": "Loft", "rooms": [1, 2]}


@pytest.mark.asyncio
async def test_publish_consumes_draft() -> None:
    gateway = InMemoryDraftGateway()
    draft_id = await gateway.save_draft(_request())
    with pytest.raises(DraftNotFoundError):
        await gateway.publish(PublishRequest(draft_id=draft_id, user_id="user-2"))
    entity_id = await gateway.publish(PublishRequest(draft_id=draft_id, user_id="user-1"))
    assert entity_id == "property-1"
    assert gateway.published[entity_id]["form_data"] == {"title": "Loft", "rooms": [1, 2]}
    assert gateway.drafts == {}


@pytest.mark.asyncio
async def test_forced_failures() -> None:
    gateway = InMemoryDraftGateway(fail_operations={"list_drafts"}, failure_message="offline")
    with pytest.raises(GatewayError, match="offline"):
        await gateway.list_drafts("user-1")
    assert gateway.calls == ["list_drafts"]
