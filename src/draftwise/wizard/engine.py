"""Wizard engine: navigation, validation gating, drafts and completion."""

from __future__ import annotations

import asyncio
import copy
import inspect
from typing import Any, Awaitable, Callable, Mapping
import uuid

from draftwise.gateway.client import DraftGateway, PublishGateway
from draftwise.gateway.http import HttpGatewayError
from draftwise.gateway.types import PublishRequest, SaveDraftRequest
from draftwise.logs import get_logger
from draftwise.ui.notify import LogNotifier, Notifier
from draftwise.wizard.config import WizardConfig
from draftwise.wizard.state import WizardSessionState
from draftwise.wizard.steps import Step, step_index
from draftwise.wizard.validator import WizardValidator

logger = get_logger(__name__)

DataCallback = Callable[[dict[str, Any]], "Awaitable[None] | None"]
UpdateCallback = Callable[[dict[str, Any]], None]

SAVE_FAILED = "Failed to save draft."
LOAD_FAILED = "Failed to load draft."
DELETE_FAILED = "Failed to delete draft."
COMPLETE_FAILED = "Failed to complete the wizard."


class WizardEngine:
    """A single wizard session over an opaque data bag.

    The engine owns its ``WizardSessionState``. Gateway and unexpected
    failures never escape the public operations: they are recorded in
    ``last_error``, reported once through the notifier and turned into a
    ``False``/``None`` result.
    """

    def __init__(
        self,
        *,
        config: WizardConfig,
        initial_data: Mapping[str, Any] | None = None,
        draft_id: str | None = None,
        on_complete: DataCallback | None = None,
        on_save_draft: DataCallback | None = None,
        on_update: UpdateCallback | None = None,
        user_id: str | None = None,
        drafts: DraftGateway | None = None,
        publisher: PublishGateway | None = None,
        notifier: Notifier | None = None,
        publish_options: Mapping[str, Any] | None = None,
    ) -> None:
        self._config = config
        self._initial_data = copy.deepcopy(dict(initial_data or {}))
        self._initial_draft_id = draft_id
        self._on_complete = on_complete
        self._on_save_draft = on_save_draft
        self._on_update = on_update
        self._user_id = user_id
        self._drafts = drafts
        self._publisher = publisher
        self._notifier: Notifier = notifier or LogNotifier()
        self._publish_options = dict(publish_options or {})
        self._state = WizardSessionState(data=copy.deepcopy(self._initial_data))
        self._ticker: asyncio.Task[None] | None = None
        self._started = False
        self._disposed = False
        self._published_id: str | None = None

    # -- derived values -------------------------------------------------

    @property
    def config(self) -> WizardConfig:
        return self._config

    @property
    def current_step_index(self) -> int:
        return self._state.current_step_index

    @property
    def current_step(self) -> str:
        return self._config.steps[self._state.current_step_index].step_id

    @property
    def current_step_descriptor(self) -> Step:
        return self._config.steps[self._state.current_step_index]

    @property
    def total_steps(self) -> int:
        return len(self._config.steps)

    @property
    def progress(self) -> float:
        if self.total_steps == 0:
            return 0.0
        return (self._state.current_step_index + 1) / self.total_steps * 100

    @property
    def can_go_previous(self) -> bool:
        return self._state.current_step_index > 0

    @property
    def can_go_next(self) -> bool:
        if self._state.current_step_index >= self.total_steps - 1:
            return False
        return WizardValidator.can_proceed_from_step(self.current_step, self._state.data, self._config)

    @property
    def can_complete(self) -> bool:
        return WizardValidator.can_complete(self._state.data, self._config)

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._state.data)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._state.errors)

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_saving(self) -> bool:
        return self._state.is_saving

    @property
    def is_validating(self) -> bool:
        return self._state.is_validating

    @property
    def has_draft(self) -> bool:
        return self._state.has_draft

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    @property
    def draft_id(self) -> str | None:
        return self._state.draft_id

    @property
    def published_id(self) -> str | None:
        return self._published_id

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # -- lifecycle ------------------------------------------------------

    async def start(self) -> None:
        """Load the bound draft, if any, and start the auto-save ticker."""
        if self._started or self._disposed:
            return
        self._started = True
        if self._initial_draft_id:
            await self.load_draft(self._initial_draft_id)
        if self._config.persistence.auto_save and self._ticker is None:
            self._ticker = asyncio.create_task(self._auto_save_loop())

    async def dispose(self) -> None:
        self._disposed = True
        ticker, self._ticker = self._ticker, None
        if ticker is None:
            return
        ticker.cancel()
        try:
            await ticker
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> "WizardEngine":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    # -- data -----------------------------------------------------------

    def update_data(self, partial: Mapping[str, Any]) -> None:
        self._state.data.update(partial)
        step_id = self.current_step
        for key in partial:
            self._state.clear_field(key, step_id)
        if self._on_update is not None:
            self._on_update(self.data)

    def reset_data(self) -> None:
        self._state.data = copy.deepcopy(self._initial_data)
        self._state.current_step_index = 0
        self._state.clear_all()
        self._state.last_error = None
        self._state.auto_save_failures = 0

    # -- navigation -----------------------------------------------------

    def go_to_step(self, step_id: str) -> bool:
        target = step_index(self._config.steps, step_id)
        if target < 0:
            logger.debug("Ignoring jump to unknown step %s", step_id)
            return False
        current = self._state.current_step_index
        if target <= current:
            self._state.current_step_index = target
            return True
        for index in range(current, target):
            step = self._config.steps[index]
            if WizardValidator.can_proceed_from_step(step.step_id, self._state.data, self._config):
                continue
            errors = WizardValidator.get_step_errors(step.step_id, self._state.data, self._config)
            self._state.merge_step_errors(step.step_id, errors)
            logger.debug("Jump to %s blocked by step %s", step_id, step.step_id)
            self._notifier.error(f"Complete the '{step.title}' step before moving on.")
            return False
        self._state.current_step_index = target
        return True

    async def next_step(self) -> bool:
        if self._state.current_step_index >= self.total_steps - 1:
            return False
        step = self.current_step_descriptor
        self._state.is_validating = True
        try:
            if not WizardValidator.can_proceed_from_step(step.step_id, self._state.data, self._config):
                errors = WizardValidator.get_step_errors(step.step_id, self._state.data, self._config)
                self._state.merge_step_errors(step.step_id, errors)
                logger.debug("Step %s failed validation: %s", step.step_id, sorted(errors))
                self._notifier.error(f"Complete the '{step.title}' step before moving on.")
                return False
            self._state.clear_step(step.step_id)
            self._state.current_step_index += 1
        finally:
            self._state.is_validating = False
        if self._config.persistence.auto_save:
            await self.auto_save_draft()
        return True

    def previous_step(self) -> bool:
        if not self.can_go_previous:
            return False
        self._state.current_step_index -= 1
        return True

    # -- validation -----------------------------------------------------

    def validate_current_step(self) -> bool:
        step_id = self.current_step
        if WizardValidator.can_proceed_from_step(step_id, self._state.data, self._config):
            self._state.clear_step(step_id)
            return True
        errors = WizardValidator.get_step_errors(step_id, self._state.data, self._config)
        self._state.merge_step_errors(step_id, errors)
        return False

    def validate_all_steps(self) -> bool:
        result = WizardValidator.validate_all_steps(self._state.data, self._config)
        self._state.replace_errors(result.errors)
        return result.is_valid

    def get_step_errors(self, step_id: str | None = None) -> dict[str, str]:
        if step_id is None:
            return dict(self._state.errors)
        return WizardValidator.get_step_errors(step_id, self._state.data, self._config)

    def clear_errors(self, step_id: str | None = None) -> None:
        if step_id is None:
            self._state.clear_all()
        else:
            self._state.clear_step(step_id)

    def validate_field(self, field_name: str, value: Any) -> str | None:
        """Check one candidate value on the current step and record the outcome."""
        step_id = self.current_step
        message = WizardValidator.validate_field(step_id, field_name, value, self._state.data, self._config)
        if message is None:
            self._state.clear_field(field_name, step_id)
        else:
            self._state.merge_step_errors(step_id, {field_name: message})
        return message

    # -- drafts ---------------------------------------------------------

    async def save_draft(self) -> str | None:
        if not self._can_persist():
            logger.warning("save_draft needs a draft gateway with a user id, or an on_save_draft callback")
            return None
        self._state.is_saving = True
        try:
            snapshot = copy.deepcopy(self._state.data)
            draft_id = await self._persist(snapshot, automatic=False)
            if self._disposed:
                return draft_id
            self._bind_draft(draft_id)
            if self._drafts is not None and self._on_save_draft is not None:
                await _maybe_await(self._on_save_draft(snapshot))
            logger.info("Saved draft %s at step %s", draft_id, self.current_step)
            self._notifier.success("Draft saved.")
            return draft_id
        except Exception as exc:
            self._fail("save_draft", exc, SAVE_FAILED)
            return None
        finally:
            self._state.is_saving = False

    async def auto_save_draft(self) -> str | None:
        """Best-effort save; failures are logged and only escalate after repeats."""
        if not self._config.persistence.auto_save or self._disposed or not self._can_persist():
            return None
        try:
            draft_id = await self._persist(copy.deepcopy(self._state.data), automatic=True)
        except Exception as exc:
            if self._disposed:
                return None
            self._state.auto_save_failures += 1
            failures = self._state.auto_save_failures
            logger.warning("Auto-save failed (%d in a row): %s", failures, exc)
            if failures == self._config.persistence.max_silent_failures:
                self._notifier.warning(
                    f"Auto-save has failed {failures} times in a row: {_error_message(exc, SAVE_FAILED)}"
                )
            return None
        if self._disposed:
            return draft_id
        self._state.auto_save_failures = 0
        self._bind_draft(draft_id)
        logger.debug("Auto-saved draft %s", draft_id)
        return draft_id

    async def load_draft(self, draft_id: str) -> bool:
        if self._drafts is None or not self._user_id:
            logger.warning("load_draft needs a draft gateway and a user id")
            return False
        self._state.is_loading = True
        try:
            loaded = await self._drafts.load_draft(draft_id, self._user_id)
            if self._disposed:
                return False
            self._state.data = dict(loaded.form_data)
            if loaded.current_step_id:
                index = step_index(self._config.steps, loaded.current_step_id)
                if index >= 0:
                    self._state.current_step_index = index
            self._state.clear_all()
            self._bind_draft(loaded.draft_id or draft_id)
            logger.info("Loaded draft %s at step %s", self._state.draft_id, self.current_step)
            return True
        except Exception as exc:
            self._fail("load_draft", exc, LOAD_FAILED)
            return False
        finally:
            self._state.is_loading = False

    async def delete_draft(self, draft_id: str) -> bool:
        if self._drafts is None or not self._user_id:
            logger.warning("delete_draft needs a draft gateway and a user id")
            return False
        try:
            await self._drafts.delete_draft(draft_id, self._user_id)
        except Exception as exc:
            self._fail("delete_draft", exc, DELETE_FAILED)
            return False
        if self._disposed:
            return True
        self._state.has_draft = False
        if self._state.draft_id == draft_id:
            self._state.draft_id = None
        logger.info("Deleted draft %s", draft_id)
        self._notifier.success("Draft deleted.")
        return True

    # -- completion -----------------------------------------------------

    async def complete(self) -> bool:
        if self._on_complete is None:
            logger.warning("complete called without an on_complete callback")
            return False
        if not self.can_complete:
            self._notifier.error("Fix the remaining errors before finishing.")
            return False
        self._state.is_loading = True
        try:
            if not self.validate_all_steps():
                return False
            snapshot = copy.deepcopy(self._state.data)
            if self._publishes_draft():
                entity_id = await self._publisher.publish(
                    PublishRequest(
                        draft_id=self._state.draft_id,
                        user_id=self._user_id,
                        form_data=snapshot,
                        publish_options=dict(self._publish_options),
                    )
                )
                if self._disposed:
                    return True
                logger.info("Published draft %s as %s", self._state.draft_id, entity_id)
                self._published_id = entity_id
                self._state.draft_id = None
                self._state.has_draft = False
                self._notifier.success("Published.")
            else:
                await _maybe_await(self._on_complete(snapshot))
                if not self._disposed:
                    logger.info("Completed wizard %s", self._config.id)
                    self._notifier.success("Wizard completed.")
            return True
        except Exception as exc:
            self._fail("complete", exc, COMPLETE_FAILED)
            return False
        finally:
            self._state.is_loading = False

    # -- internals ------------------------------------------------------

    def _can_persist(self) -> bool:
        if self._drafts is not None:
            return bool(self._user_id)
        return self._on_save_draft is not None

    def _publishes_draft(self) -> bool:
        return (
            self._publisher is not None
            and bool(self._user_id)
            and self._state.has_draft
            and self._state.draft_id is not None
        )

    async def _persist(self, snapshot: dict[str, Any], *, automatic: bool) -> str:
        if self._drafts is None:
            await _maybe_await(self._on_save_draft(snapshot))
            return self._state.draft_id or uuid.uuid4().hex
        request = self._build_save_request(snapshot)
        if automatic:
            return await self._drafts.auto_save_draft(
                request, interval_ms=self._config.persistence.auto_save_interval_ms
            )
        return await self._drafts.save_draft(request)

    def _build_save_request(self, snapshot: dict[str, Any]) -> SaveDraftRequest:
        return SaveDraftRequest(
            user_id=self._user_id,
            wizard_type=self._config.type,
            wizard_config_id=self._config.id,
            form_data=snapshot,
            current_step_id=self.current_step,
            title=_text_hint(snapshot, "title", "name"),
            description=_text_hint(snapshot, "description"),
            draft_id=self._state.draft_id,
        )

    def _bind_draft(self, draft_id: str) -> None:
        self._state.draft_id = draft_id
        self._state.has_draft = True

    def _fail(self, operation: str, exc: Exception, fallback: str) -> None:
        if self._disposed:
            logger.debug("Dropping %s failure after dispose: %s", operation, exc)
            return
        message = _error_message(exc, fallback)
        logger.warning("%s failed: %s", operation, message)
        self._state.last_error = message
        self._notifier.error(message)

    async def _auto_save_loop(self) -> None:
        interval_s = self._config.persistence.auto_save_interval_ms / 1000.0
        while not self._disposed:
            await asyncio.sleep(interval_s)
            if self._disposed:
                break
            if self._state.data:
                await self.auto_save_draft()


def create_wizard(
    *,
    config: WizardConfig,
    initial_data: Mapping[str, Any] | None = None,
    draft_id: str | None = None,
    on_complete: DataCallback | None = None,
    on_save_draft: DataCallback | None = None,
    on_update: UpdateCallback | None = None,
    user_id: str | None = None,
    drafts: DraftGateway | None = None,
    publisher: PublishGateway | None = None,
    notifier: Notifier | None = None,
    publish_options: Mapping[str, Any] | None = None,
) -> WizardEngine:
    return WizardEngine(
        config=config,
        initial_data=initial_data,
        draft_id=draft_id,
        on_complete=on_complete,
        on_save_draft=on_save_draft,
        on_update=on_update,
        user_id=user_id,
        drafts=drafts,
        publisher=publisher,
        notifier=notifier,
        publish_options=publish_options,
    )


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


def _error_message(exc: BaseException, fallback: str) -> str:
    if isinstance(exc, HttpGatewayError):
        return f"{fallback.rstrip('.')} (server error {exc.status_code})."
    text = str(exc).strip()
    return text or fallback


def _text_hint(data: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
