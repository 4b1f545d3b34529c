"""Wizard configuration models, invariant checks and JSON loading."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Mapping, Sequence

from draftwise.validation import Rule, ValidationIssue, build_schema
from draftwise.wizard.steps import Step

DEFAULT_AUTO_SAVE_INTERVAL_MS = 30_000
DEFAULT_MAX_SILENT_FAILURES = 3
WIZARD_TYPES = ("property", "land", "blog")


class ConfigError(ValueError):
    """Raised when a wizard configuration breaks its invariants."""


@dataclass(frozen=True)
class PersistencePolicy:
    auto_save: bool = False
    auto_save_interval_ms: int = DEFAULT_AUTO_SAVE_INTERVAL_MS
    max_silent_failures: int = DEFAULT_MAX_SILENT_FAILURES

    def to_dict(self) -> dict:
        return {
            "auto_save": self.auto_save,
            "auto_save_interval_ms": self.auto_save_interval_ms,
            "max_silent_failures": self.max_silent_failures,
        }


@dataclass(frozen=True)
class ValidationRules:
    step_rules: Mapping[str, Rule] = field(default_factory=dict)
    final_rule: Rule | None = None


@dataclass(frozen=True)
class WizardConfig:
    id: str
    type: str
    steps: tuple[Step, ...]
    validation: ValidationRules = field(default_factory=ValidationRules)
    persistence: PersistencePolicy = field(default_factory=PersistencePolicy)
    title: str = ""

    @property
    def step_ids(self) -> list[str]:
        return [step.step_id for step in self.steps]

    def get_step(self, step_id: str) -> Step | None:
        for step in self.steps:
            if step.step_id == step_id:
                return step
        return None

    def rule_for(self, step_id: str) -> Rule | None:
        return self.validation.step_rules.get(step_id)

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "steps": self.step_ids,
            "persistence": self.persistence.to_dict(),
        }


WizardConfiguration = WizardConfig


def build_wizard_config(
    *,
    id: str,
    type: str,
    steps: Sequence[Step],
    step_rules: Mapping[str, Rule] | None = None,
    final_rule: Rule | None = None,
    persistence: PersistencePolicy | None = None,
    title: str = "",
) -> WizardConfig:
    """Assemble an immutable configuration and check its invariants.

    A step's own ``validation`` rule is registered under its id unless
    ``step_rules`` already names that step.
    """
    if not isinstance(id, str) or not id.strip():
        raise ConfigError("Wizard id is required.")
    if not isinstance(type, str) or not type.strip():
        raise ConfigError("Wizard type is required.")
    if not steps:
        raise ConfigError("A wizard needs at least one step.")

    seen: set[str] = set()
    for step in steps:
        if not step.step_id:
            raise ConfigError("Step id must be a non-empty string.")
        if step.step_id in seen:
            raise ConfigError(f"Duplicate step id: {step.step_id}")
        seen.add(step.step_id)

    rules: dict[str, Rule] = {}
    for step in steps:
        if step.validation is not None:
            rules[step.step_id] = step.validation
    for step_id, rule in (step_rules or {}).items():
        if step_id not in seen:
            raise ConfigError(f"Validation rule references unknown step: {step_id}")
        rules[step_id] = rule

    policy = persistence or PersistencePolicy()
    if policy.auto_save_interval_ms <= 0:
        raise ConfigError("auto_save_interval_ms must be > 0.")
    if policy.max_silent_failures < 1:
        raise ConfigError("max_silent_failures must be >= 1.")

    return WizardConfig(
        id=id,
        type=type,
        title=title,
        steps=tuple(steps),
        validation=ValidationRules(step_rules=rules, final_rule=final_rule),
        persistence=policy,
    )


@dataclass(frozen=True)
class ConfigValidation:
    config: WizardConfig | None
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]


def load_and_validate_wizard_config(path: Path) -> ConfigValidation:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return ConfigValidation(None, [ValidationIssue("config", f"Config not found: {path}")], [])
    except (OSError, json.JSONDecodeError) as exc:
        return ConfigValidation(None, [ValidationIssue("config", f"Invalid JSON: {exc}")], [])
    if not isinstance(raw, dict):
        return ConfigValidation(None, [ValidationIssue("config", "Config must be a JSON object.")], [])
    return validate_wizard_config(raw)


def load_wizard_config(path: Path) -> WizardConfig:
    result = load_and_validate_wizard_config(path)
    if result.config is None:
        details = "; ".join(f"{issue.path}: {issue.message}" for issue in result.errors)
        raise ConfigError(f"Invalid wizard config {path}: {details}")
    return result.config


def validate_wizard_config(data: dict[str, Any]) -> ConfigValidation:
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    wizard_id = data.get("id")
    if not isinstance(wizard_id, str) or not wizard_id.strip():
        errors.append(ValidationIssue("id", "Wizard id is required."))
    wizard_type = data.get("type")
    if not isinstance(wizard_type, str) or not wizard_type.strip():
        errors.append(ValidationIssue("type", "Wizard type is required."))
    elif wizard_type not in WIZARD_TYPES:
        warnings.append(
            ValidationIssue("type", f"Unknown wizard type '{wizard_type}'. Expected one of {', '.join(WIZARD_TYPES)}.")
        )
    title = data.get("title", "")
    if not isinstance(title, str):
        errors.append(ValidationIssue("title", "Title must be a string."))
        title = ""

    steps = _parse_steps(data.get("steps"), errors, warnings)
    final_rule = None
    final = data.get("final")
    if final is not None:
        if not isinstance(final, dict):
            errors.append(ValidationIssue("final", "Final block must be an object."))
        else:
            final_rule = build_schema(final.get("fields"), "final.fields", errors)
    else:
        warnings.append(ValidationIssue("final", "No final rule; completion is gated by step rules only."))

    persistence = _parse_persistence(data.get("persistence"), errors)

    config = None
    if not errors:
        try:
            config = build_wizard_config(
                id=wizard_id,
                type=wizard_type,
                title=title,
                steps=steps,
                final_rule=final_rule,
                persistence=persistence,
            )
        except ConfigError as exc:
            errors.append(ValidationIssue("config", str(exc)))
    return ConfigValidation(config=config, errors=errors, warnings=warnings)


def _parse_steps(raw: Any, errors: list[ValidationIssue], warnings: list[ValidationIssue]) -> list[Step]:
    if not isinstance(raw, list) or not raw:
        errors.append(ValidationIssue("steps", "Must be a non-empty list."))
        return []
    steps: list[Step] = []
    seen: set[str] = set()
    for index, item in enumerate(raw):
        path = f"steps[{index}]"
        if not isinstance(item, dict):
            errors.append(ValidationIssue(path, "Step must be an object."))
            continue
        step_id = item.get("id")
        if not isinstance(step_id, str) or not step_id.strip():
            errors.append(ValidationIssue(f"{path}.id", "Missing step id."))
            continue
        if step_id in seen:
            errors.append(ValidationIssue(f"{path}.id", f"Duplicate step id '{step_id}'."))
            continue
        seen.add(step_id)
        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            warnings.append(ValidationIssue(f"{path}.title", "Title missing; using the step id."))
            title = step_id
        description = item.get("description", "")
        if not isinstance(description, str):
            errors.append(ValidationIssue(f"{path}.description", "Must be a string."))
            description = ""
        optional = item.get("optional", False)
        if not isinstance(optional, bool):
            errors.append(ValidationIssue(f"{path}.optional", "Must be a boolean."))
            optional = False
        rule = build_schema(item.get("fields"), f"{path}.fields", errors)
        steps.append(
            Step(
                step_id=step_id,
                title=title,
                description=description,
                validation=rule,
                optional=optional,
            )
        )
    return steps


def _parse_persistence(raw: Any, errors: list[ValidationIssue]) -> PersistencePolicy:
    if raw is None:
        return PersistencePolicy()
    if not isinstance(raw, dict):
        errors.append(ValidationIssue("persistence", "Must be an object."))
        return PersistencePolicy()
    auto_save = raw.get("auto_save", False)
    if not isinstance(auto_save, bool):
        errors.append(ValidationIssue("persistence.auto_save", "Must be a boolean."))
        auto_save = False
    interval = raw.get("auto_save_interval_ms", DEFAULT_AUTO_SAVE_INTERVAL_MS)
    if not isinstance(interval, int) or isinstance(interval, bool) or interval < 1:
        errors.append(ValidationIssue("persistence.auto_save_interval_ms", "Must be an integer >= 1."))
        interval = DEFAULT_AUTO_SAVE_INTERVAL_MS
    max_failures = raw.get("max_silent_failures", DEFAULT_MAX_SILENT_FAILURES)
    if not isinstance(max_failures, int) or isinstance(max_failures, bool) or max_failures < 1:
        errors.append(ValidationIssue("persistence.max_silent_failures", "Must be an integer >= 1."))
        max_failures = DEFAULT_MAX_SILENT_FAILURES
    return PersistencePolicy(
        auto_save=auto_save,
        auto_save_interval_ms=interval,
        max_silent_failures=max_failures,
    )
