from __future__ import annotations

import asyncio

import httpx
import pytest

from draftwise.gateway.http import HttpDraftGateway
from draftwise.gateway.types import GatewayError
from conftest import USER_ID, sample_config


@pytest.mark.asyncio
async def test_draft_round_trip_resumes_at_saved_step(make_engine, gateway) -> None:
    engine = make_engine(initial_data={"title": "Loft", "description": "Top floor"})
    assert await engine.next_step() is True
    draft_id = await engine.save_draft()

    assert draft_id is not None
    assert engine.has_draft
    assert engine.draft_id == draft_id
    record = gateway.drafts[draft_id]
    assert record.user_id == USER_ID
    assert record.wizard_type == "property"
    assert record.wizard_config_id == "property-basic"
    assert record.current_step_id == "details"
    assert record.title == "Loft"
    assert record.description == "Top floor"

    resumed = make_engine()
    assert await resumed.load_draft(draft_id) is True
    assert resumed.data == {"title": "Loft", "description": "Top floor"}
    assert resumed.current_step == "details"
    assert resumed.has_draft
    assert resumed.draft_id == draft_id


@pytest.mark.asyncio
async def test_second_save_updates_bound_draft(make_engine, gateway) -> None:
    engine = make_engine(initial_data={"title": "Loft"})
    first = await engine.save_draft()
    engine.update_data({"title": "Loft 2"})
    second = await engine.save_draft()
    assert first == second
    assert list(gateway.drafts) == [first]
    assert gateway.drafts[first].form_data == {"title": "Loft 2"}


@pytest.mark.asyncio
async def test_save_failure_is_reported_once(make_engine, gateway, notifier) -> None:
    gateway.fail_operations.add("save_draft")
    engine = make_engine(initial_data={"title": "Loft"})
    assert await engine.save_draft() is None
    assert engine.last_error == "Simulated gateway failure."
    assert not engine.is_saving
    assert not engine.has_draft
    assert notifier.of("error") == ["Simulated gateway failure."]


@pytest.mark.asyncio
async def test_server_error_is_reported_as_readable_message(make_engine, notifier) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="upstream exploded")

    drafts = HttpDraftGateway(base_url="https://drafts.test/api", transport=httpx.MockTransport(handler))
    engine = make_engine(drafts=drafts, initial_data={"title": "Loft"})
    assert await engine.save_draft() is None
    assert engine.last_error == "Failed to save draft (server error 500)."
    assert notifier.of("error") == ["Failed to save draft (server error 500)."]
    await drafts.aclose()


@pytest.mark.asyncio
async def test_save_draft_calls_on_save_draft(make_engine) -> None:
    saved: list[dict] = []
    engine = make_engine(initial_data={"title": "Loft"}, on_save_draft=saved.append)
    await engine.save_draft()
    assert saved == [{"title": "Loft"}]


@pytest.mark.asyncio
async def test_callback_acts_as_persistence_without_gateway(make_engine) -> None:
    saved: list[dict] = []

    async def on_save(data: dict) -> None:
        saved.append(data)

    engine = make_engine(initial_data={"title": "Loft"}, drafts=None, on_save_draft=on_save)
    draft_id = await engine.save_draft()
    assert draft_id
    assert saved == [{"title": "Loft"}]
    assert await engine.save_draft() == draft_id


@pytest.mark.asyncio
async def test_save_without_anywhere_to_save_returns_none(make_engine) -> None:
    engine = make_engine(drafts=None)
    assert await engine.save_draft() is None
    no_user = make_engine(user_id=None)
    assert await no_user.save_draft() is None


@pytest.mark.asyncio
async def test_load_missing_or_foreign_draft_leaves_state(make_engine, gateway, notifier) -> None:
    owner = make_engine(initial_data={"title": "Loft"})
    draft_id = await owner.save_draft()

    stranger = make_engine(user_id="user-2", initial_data={"title": "Mine"})
    assert await stranger.load_draft(draft_id) is False
    assert stranger.data == {"title": "Mine"}
    assert stranger.last_error == "Draft not found"
    assert not stranger.has_draft
    assert not stranger.is_loading

    assert await stranger.load_draft("missing") is False
    assert notifier.of("error")[-2:] == ["Draft not found", "Draft not found"]


@pytest.mark.asyncio
async def test_load_keeps_index_for_unknown_saved_step(make_engine, gateway) -> None:
    engine = make_engine(initial_data={"title": "Loft"})
    draft_id = await engine.save_draft()
    gateway.drafts[draft_id].current_step_id = "removed-step"

    resumed = make_engine()
    assert await resumed.load_draft(draft_id) is True
    assert resumed.current_step_index == 0


@pytest.mark.asyncio
async def test_delete_draft_clears_binding(make_engine, gateway) -> None:
    engine = make_engine(initial_data={"title": "Loft"})
    draft_id = await engine.save_draft()
    assert await engine.delete_draft(draft_id) is True
    assert not engine.has_draft
    assert engine.draft_id is None
    assert draft_id not in gateway.drafts

    assert await engine.delete_draft(draft_id) is False
    assert engine.last_error == "Draft not found"


@pytest.mark.asyncio
async def test_next_step_triggers_auto_save(make_engine, gateway) -> None:
    engine = make_engine(config=sample_config(auto_save=True), initial_data={"title": "Loft"})
    assert await engine.next_step() is True
    assert gateway.calls == ["auto_save_draft"]
    assert engine.has_draft


@pytest.mark.asyncio
async def test_auto_save_failure_does_not_block_navigation(make_engine, gateway, notifier) -> None:
    gateway.fail_operations.add("auto_save_draft")
    engine = make_engine(config=sample_config(auto_save=True), initial_data={"title": "Loft"})
    assert await engine.next_step() is True
    assert engine.current_step == "details"
    assert engine.last_error is None
    assert notifier.messages == []


@pytest.mark.asyncio
async def test_auto_save_disabled_by_policy(make_engine, gateway) -> None:
    engine = make_engine(initial_data={"title": "Loft"})
    assert await engine.auto_save_draft() is None
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_auto_save_escalates_once_after_repeated_failures(make_engine, gateway, notifier) -> None:
    gateway.fail_operations.add("auto_save_draft")
    engine = make_engine(config=sample_config(auto_save=True, max_silent_failures=2), initial_data={"title": "Loft"})

    assert await engine.auto_save_draft() is None
    assert notifier.of("warning") == []
    assert await engine.auto_save_draft() is None
    assert len(notifier.of("warning")) == 1
    assert await engine.auto_save_draft() is None
    assert len(notifier.of("warning")) == 1

    gateway.fail_operations.clear()
    assert await engine.auto_save_draft() is not None
    gateway.fail_operations.add("auto_save_draft")
    await engine.auto_save_draft()
    await engine.auto_save_draft()
    assert len(notifier.of("warning")) == 2


@pytest.mark.asyncio
async def test_ticker_saves_periodically_while_data_present(make_engine, gateway) -> None:
    engine = make_engine(config=sample_config(auto_save=True, interval_ms=10))
    async with engine:
        await asyncio.sleep(0.05)
        assert gateway.calls == []
        engine.update_data({"title": "Loft"})
        await asyncio.sleep(0.05)
    assert "auto_save_draft" in gateway.calls
    assert engine.has_draft

    calls = len(gateway.calls)
    await asyncio.sleep(0.05)
    assert len(gateway.calls) == calls
    assert engine.is_disposed


@pytest.mark.asyncio
async def test_start_loads_bound_draft(make_engine, gateway) -> None:
    owner = make_engine(initial_data={"title": "Loft"})
    await owner.next_step()
    draft_id = await owner.save_draft()

    resumed = make_engine(draft_id=draft_id)
    await resumed.start()
    try:
        assert resumed.data == {"title": "Loft"}
        assert resumed.current_step == "details"
    finally:
        await resumed.dispose()


@pytest.mark.asyncio
async def test_results_after_dispose_are_dropped(make_engine) -> None:
    from draftwise.gateway.memory import InMemoryDraftGateway

    slow = InMemoryDraftGateway(latency_ms=30)
    engine = make_engine(drafts=slow, initial_data={"title": "Loft"})
    pending = asyncio.ensure_future(engine.save_draft())
    await asyncio.sleep(0)
    await engine.dispose()
    await pending
    assert not engine.has_draft
    assert engine.draft_id is None


@pytest.mark.asyncio
async def test_failures_after_dispose_are_not_reported(make_engine, notifier) -> None:
    from draftwise.gateway.memory import InMemoryDraftGateway

    slow = InMemoryDraftGateway(latency_ms=30, fail_operations={"save_draft"})
    engine = make_engine(drafts=slow, initial_data={"title": "Loft"})
    pending = asyncio.ensure_future(engine.save_draft())
    await asyncio.sleep(0)
    await engine.dispose()
    assert await pending is None
    assert engine.last_error is None
    assert notifier.messages == []


def test_gateway_error_is_runtime_error() -> None:
    assert issubclass(GatewayError, RuntimeError)
