"""Keyboard shortcuts for driving a wizard engine."""

from __future__ import annotations

from dataclasses import dataclass
import inspect
from typing import TYPE_CHECKING, Any, Callable

from draftwise.logs import get_logger

if TYPE_CHECKING:
    from draftwise.wizard.engine import WizardEngine

logger = get_logger(__name__)

ACTION_NEXT = "next"
ACTION_PREVIOUS = "previous"
ACTION_SAVE = "save"
ACTION_COMPLETE = "complete"
ACTION_CANCEL = "cancel"

NEXT_KEYS = frozenset({"right", "pagedown"})
PREVIOUS_KEYS = frozenset({"left", "pageup"})

_KEY_ALIASES = {
    "arrowright": "right",
    "arrowleft": "left",
    "page_down": "pagedown",
    "page_up": "pageup",
    "return": "enter",
    "esc": "escape",
}


@dataclass(frozen=True)
class KeyPress:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    alt: bool = False
    in_text_field: bool = False

    @classmethod
    def from_textual(cls, key: str, in_text_field: bool = False) -> "KeyPress":
        """Parse a Textual key name such as ``"ctrl+right"``."""
        parts = [part for part in key.lower().split("+") if part]
        if not parts:
            return cls(key="", in_text_field=in_text_field)
        modifiers = set(parts[:-1])
        return cls(
            key=_KEY_ALIASES.get(parts[-1], parts[-1]),
            ctrl="ctrl" in modifiers,
            meta=bool(modifiers & {"meta", "super", "cmd"}),
            shift="shift" in modifiers,
            alt="alt" in modifiers,
            in_text_field=in_text_field,
        )

    @property
    def has_command_modifier(self) -> bool:
        return self.ctrl or self.meta

    @property
    def is_bare(self) -> bool:
        return not (self.ctrl or self.meta or self.shift or self.alt)


class KeyboardNavigation:
    """Map modifier shortcuts onto engine operations.

    Holds no wizard state; the engine decides whether each action is allowed.
    """

    def __init__(
        self,
        engine: "WizardEngine",
        *,
        on_cancel: Callable[[], Any] | None = None,
        enabled: bool = True,
    ) -> None:
        self._engine = engine
        self._on_cancel = on_cancel
        self.enabled = enabled

    async def handle(self, press: KeyPress) -> str | None:
        if not self.enabled or press.in_text_field:
            return None
        key = _KEY_ALIASES.get(press.key.lower(), press.key.lower())

        if key == "escape":
            if not press.is_bare or self._on_cancel is None:
                return None
            result = self._on_cancel()
            if inspect.isawaitable(result):
                await result
            return ACTION_CANCEL

        if not press.has_command_modifier:
            return None

        engine = self._engine
        if key in NEXT_KEYS:
            await engine.next_step()
            return ACTION_NEXT
        if key in PREVIOUS_KEYS:
            engine.previous_step()
            return ACTION_PREVIOUS
        if key == "s":
            await engine.save_draft()
            return ACTION_SAVE
        if key == "enter":
            if engine.can_complete:
                await engine.complete()
                return ACTION_COMPLETE
            if engine.can_go_next:
                await engine.next_step()
                return ACTION_NEXT
            logger.debug("Ignoring submit shortcut: nothing to complete or advance")
        return None
