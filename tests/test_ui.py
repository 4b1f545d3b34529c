from __future__ import annotations

from draftwise.gateway.types import DraftRecord
from draftwise.ui.app import coerce_input, format_value
from draftwise.ui.console import get_console
from draftwise.ui.notify import ConsoleNotifier, LogNotifier, Notifier, TextualNotifier
from draftwise.ui.render import drafts_table


class _FakeApp:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    def notify(self, message: str, **kwargs) -> None:
        self.calls.append((message, kwargs))


def test_notifiers_satisfy_protocol() -> None:
    assert isinstance(LogNotifier(), Notifier)
    assert isinstance(ConsoleNotifier(), Notifier)
    assert isinstance(TextualNotifier(_FakeApp()), Notifier)


def test_textual_notifier_maps_severity() -> None:
    app = _FakeApp()
    notifier = TextualNotifier(app)
    notifier.success("Draft saved.")
    notifier.warning("Auto-save is failing.")
    notifier.error("Draft not found")
    assert [kwargs["severity"] for _, kwargs in app.calls] == ["information", "warning", "error"]
    assert app.calls[2][0] == "Draft not found"


def test_console_notifier_renders_messages() -> None:
    console = get_console()
    with console.capture() as capture:
        ConsoleNotifier().success("Draft saved.")
        ConsoleNotifier().error("Draft not found")
    output = capture.get()
    assert "Draft saved." in output
    assert "Draft not found" in output


def test_coerce_input_keeps_stored_types() -> None:
    assert coerce_input("", "Loft") is None
    assert coerce_input("12", None) == 12
    assert coerce_input("12.5", None) == 12.5
    assert coerce_input("12", "old") == "12"
    assert coerce_input("a, b,", ["x"]) == ["a", "b"]
    assert coerce_input("yes", False) is True
    assert coerce_input("Loft", None) == "Loft"


def test_format_value() -> None:
    assert format_value(None) == ""
    assert format_value(["a", "b"]) == "a, b"
    assert format_value(3) == "3"


def test_drafts_table_has_one_row_per_record() -> None:
    record = DraftRecord(
        draft_id="d-1",
        user_id="user-1",
        wizard_type="blog",
        wizard_config_id="blog-post",
        form_data={},
        current_step_id=None,
    )
    table = drafts_table([record, record])
    assert table.row_count == 2
