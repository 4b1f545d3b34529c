from __future__ import annotations

from typing import Any

import pytest

from draftwise.gateway.memory import InMemoryDraftGateway
from draftwise.validation import Schema, required
from draftwise.wizard.config import PersistencePolicy, WizardConfig, build_wizard_config
from draftwise.wizard.engine import WizardEngine, create_wizard
from draftwise.wizard.steps import Step

USER_ID = "user-1"


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def of(self, level: str) -> list[str]:
        return [message for kind, message in self.messages if kind == level]


def sample_config(*, auto_save: bool = False, interval_ms: int = 30_000, max_silent_failures: int = 3) -> WizardConfig:
    return build_wizard_config(
        id="property-basic",
        type="property",
        title="New property",
        steps=[
            Step("basic", "Basics", validation=Schema({"title": [required()]})),
            Step("details", "Details"),
            Step("review", "Review", validation=Schema({"confirm": [required()]})),
        ],
        persistence=PersistencePolicy(
            auto_save=auto_save,
            auto_save_interval_ms=interval_ms,
            max_silent_failures=max_silent_failures,
        ),
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def gateway() -> InMemoryDraftGateway:
    return InMemoryDraftGateway()


@pytest.fixture
def config() -> WizardConfig:
    return sample_config()


@pytest.fixture
def make_engine(notifier: RecordingNotifier, gateway: InMemoryDraftGateway):
    def factory(config: WizardConfig | None = None, **kwargs: Any) -> WizardEngine:
        kwargs.setdefault("user_id", USER_ID)
        kwargs.setdefault("drafts", gateway)
        kwargs.setdefault("publisher", gateway)
        kwargs.setdefault("notifier", notifier)
        return create_wizard(config=config or sample_config(), **kwargs)

    return factory
