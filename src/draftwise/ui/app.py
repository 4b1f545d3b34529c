"""Textual host for running a wizard in the terminal."""

from __future__ import annotations

from typing import Any

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Input, Label, ProgressBar, Select, Static, TextArea

from draftwise.gateway.client import DraftGateway, PublishGateway
from draftwise.logs import get_logger
from draftwise.ui.notify import TextualNotifier
from draftwise.wizard.config import WizardConfig
from draftwise.wizard.engine import WizardEngine, create_wizard
from draftwise.wizard.keyboard import KeyboardNavigation, KeyPress

logger = get_logger(__name__)

TEXT_FIELD_WIDGETS = (Input, TextArea, Select)


def _footer_hint() -> Static:
    return Static("ctrl+→ next · ctrl+← back · ctrl+s save · ctrl+enter finish · esc quit", id="key-hint")


def coerce_input(text: str, previous: Any) -> Any:
    """Turn raw input text into a data value, keeping the type already stored."""
    stripped = text.strip()
    if not stripped:
        return None
    if isinstance(previous, list):
        return [item.strip() for item in stripped.split(",") if item.strip()]
    if isinstance(previous, bool):
        return stripped.lower() in {"1", "true", "yes", "y"}
    if isinstance(previous, str):
        return text
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        return float(stripped)
    except ValueError:
        return text


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    return str(value)


class WizardScreen(Screen):
    """Generic step form built from the step's field names."""

    def __init__(self, engine: WizardEngine) -> None:
        super().__init__()
        self.engine = engine
        self.field_names: list[str] = []

    def compose(self) -> ComposeResult:
        surface = Container(id="wizard-surface", classes="surface")
        surface.border_title = self.engine.config.title or self.engine.config.id
        with surface:
            self.step_label = Label("", id="step-title")
            yield self.step_label
            self.progress_bar = ProgressBar(total=100, show_eta=False, id="step-progress")
            yield self.progress_bar
            self.description = Static("", id="step-description")
            yield self.description
            self.fields = VerticalScroll(id="step-fields")
            yield self.fields
            self.status = Static("", id="wizard-status")
            yield self.status
            with Horizontal(id="wizard-buttons"):
                yield Button("Back", id="wizard-back")
                yield Button("Save draft", id="wizard-save")
                yield Button("Next", id="wizard-next", variant="primary")
                yield Button("Finish", id="wizard-finish", variant="success")
        yield _footer_hint()

    async def on_mount(self) -> None:
        await self.render_step()

    async def render_step(self) -> None:
        engine = self.engine
        step = engine.current_step_descriptor
        self.step_label.update(f"Step {engine.current_step_index + 1}/{engine.total_steps} · {step.title}")
        self.progress_bar.update(progress=engine.progress)
        self.description.update(step.description)
        await self.fields.remove_children()
        data = engine.data
        errors = engine.errors
        self.field_names = list(step.field_names)
        rows = []
        for index, name in enumerate(self.field_names):
            rows.append(Label(name, classes="field-label"))
            rows.append(Input(value=format_value(data.get(name)), id=f"field-{index}", classes="field-input"))
            rows.append(Static(errors.get(name, ""), id=f"error-{index}", classes="field-error"))
        if not rows:
            rows.append(Static("Nothing to fill in on this step.", classes="field-empty"))
        await self.fields.mount_all(rows)
        self.refresh_status()

    def refresh_status(self) -> None:
        engine = self.engine
        errors = engine.errors
        for index, name in enumerate(self.field_names):
            message = errors.get(name) or errors.get(f"{engine.current_step}.{name}", "")
            self.query_one(f"#error-{index}", Static).update(message)
        parts = []
        if engine.draft_id:
            parts.append(f"draft {engine.draft_id}")
        if engine.is_saving:
            parts.append("saving…")
        if engine.last_error:
            parts.append(f"last error: {engine.last_error}")
        self.status.update(" · ".join(parts))
        self.query_one("#wizard-back", Button).disabled = not engine.can_go_previous
        is_last = engine.current_step_index >= engine.total_steps - 1
        self.query_one("#wizard-next", Button).disabled = is_last
        self.query_one("#wizard-finish", Button).disabled = not is_last

    def on_input_changed(self, event: Input.Changed) -> None:
        input_id = event.input.id or ""
        if not input_id.startswith("field-") or event.input.parent is not self.fields:
            return
        name = self.field_names[int(input_id[len("field-") :])]
        previous = self.engine.data.get(name)
        value = coerce_input(event.value, previous)
        if value == previous:
            return
        self.engine.update_data({name: value})
        self.refresh_status()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        engine = self.engine
        if button_id == "wizard-back":
            engine.previous_step()
        elif button_id == "wizard-next":
            await engine.next_step()
        elif button_id == "wizard-save":
            await engine.save_draft()
        elif button_id == "wizard-finish":
            if not await engine.complete():
                engine.validate_all_steps()
        await self.app.after_action()


class WizardApp(App):
    BINDINGS = [("ctrl+q", "quit", "Quit")]
    DEFAULT_CSS = """
    #wizard-surface {
        border: round $accent;
        padding: 0 2;
        height: 1fr;
    }
    #step-title {
        text-style: bold;
        color: $accent;
    }
    #step-fields {
        height: 1fr;
    }
    .field-error {
        color: $error;
    }
    #wizard-status, #key-hint {
        color: $text-muted;
    }
    #wizard-buttons {
        height: auto;
    }
    """

    def __init__(
        self,
        *,
        config: WizardConfig,
        user_id: str | None = None,
        draft_id: str | None = None,
        drafts: DraftGateway | None = None,
        publisher: PublishGateway | None = None,
        initial_data: dict[str, Any] | None = None,
        close_gateways: bool = False,
    ) -> None:
        super().__init__()
        self._owned_gateways: list[Any] = []
        if close_gateways:
            unique = {id(gateway): gateway for gateway in (drafts, publisher) if gateway is not None}
            self._owned_gateways = list(unique.values())
        self.completed_data: dict[str, Any] | None = None
        self.engine = create_wizard(
            config=config,
            initial_data=initial_data,
            draft_id=draft_id,
            on_complete=self._on_complete,
            user_id=user_id,
            drafts=drafts,
            publisher=publisher,
            notifier=TextualNotifier(self),
        )
        self.keyboard = KeyboardNavigation(self.engine, on_cancel=self.exit)
        self.screen_view: WizardScreen | None = None

    async def on_mount(self) -> None:
        await self.engine.start()
        self.screen_view = WizardScreen(self.engine)
        await self.push_screen(self.screen_view)

    async def on_unmount(self) -> None:
        await self.engine.dispose()
        for gateway in self._owned_gateways:
            await gateway.aclose()

    async def on_key(self, event: events.Key) -> None:
        in_text_field = isinstance(self.focused, TEXT_FIELD_WIDGETS)
        action = await self.keyboard.handle(KeyPress.from_textual(event.key, in_text_field))
        if action is None:
            return
        event.stop()
        await self.after_action()

    async def after_action(self) -> None:
        if self.completed_data is not None or self.engine.published_id:
            self.exit(self.completed_data)
            return
        if self.screen_view is not None and self.screen is self.screen_view:
            await self.screen_view.render_step()

    async def _on_complete(self, data: dict[str, Any]) -> None:
        self.completed_data = data
        logger.info("Wizard %s completed", self.engine.config.id)


def run_app(**kwargs: Any) -> dict[str, Any] | None:
    app = WizardApp(**kwargs)
    app.run()
    if app.engine.published_id:
        return {"published_id": app.engine.published_id}
    return app.completed_data
