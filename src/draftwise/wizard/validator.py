"""Pure decision functions over wizard data and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from draftwise.validation import issues_by_path, run_rule
from draftwise.wizard.config import WizardConfig

FINAL_PREFIX = "final"


@dataclass(frozen=True)
class WizardValidation:
    is_valid: bool
    errors: dict[str, str] = field(default_factory=dict)
    warnings: dict[str, str] = field(default_factory=dict)


class WizardValidator:
    """Stateless validation over ``(data, config)``.

    Every call re-runs the registered rules from scratch. A step without a
    rule never blocks progress; a step with a rule blocks as soon as the rule
    reports an error-level issue.
    """

    @staticmethod
    def can_proceed_from_step(step_id: str, data: Mapping[str, Any], config: WizardConfig) -> bool:
        step = config.get_step(step_id)
        if step is not None and step.optional:
            return True
        result = run_rule(config.rule_for(step_id), data)
        return result.is_valid

    @staticmethod
    def get_step_errors(step_id: str, data: Mapping[str, Any], config: WizardConfig) -> dict[str, str]:
        result = run_rule(config.rule_for(step_id), data)
        return issues_by_path(result.errors)

    @staticmethod
    def get_step_warnings(step_id: str, data: Mapping[str, Any], config: WizardConfig) -> dict[str, str]:
        result = run_rule(config.rule_for(step_id), data)
        return issues_by_path(result.warnings)

    @staticmethod
    def validate_all_steps(data: Mapping[str, Any], config: WizardConfig) -> WizardValidation:
        errors: dict[str, str] = {}
        warnings: dict[str, str] = {}
        for step in config.steps:
            result = run_rule(config.rule_for(step.step_id), data)
            step_errors = issues_by_path(result.errors, prefix=step.step_id)
            step_warnings = issues_by_path(result.warnings, prefix=step.step_id)
            if step.optional:
                for key, message in step_errors.items():
                    warnings.setdefault(key, message)
            else:
                for key, message in step_errors.items():
                    errors.setdefault(key, message)
            for key, message in step_warnings.items():
                warnings.setdefault(key, message)

        final = run_rule(config.validation.final_rule, data)
        for key, message in issues_by_path(final.errors, prefix=FINAL_PREFIX).items():
            errors.setdefault(key, message)
        for key, message in issues_by_path(final.warnings, prefix=FINAL_PREFIX).items():
            warnings.setdefault(key, message)
        return WizardValidation(is_valid=not errors, errors=errors, warnings=warnings)

    @staticmethod
    def can_complete(data: Mapping[str, Any], config: WizardConfig) -> bool:
        return WizardValidator.validate_all_steps(data, config).is_valid

    @staticmethod
    def validate_field(
        step_id: str,
        field_name: str,
        value: Any,
        data: Mapping[str, Any],
        config: WizardConfig,
    ) -> str | None:
        """Check a candidate value for one field in the context of ``data``."""
        rule = config.rule_for(step_id)
        if rule is None:
            return None
        candidate = {**data, field_name: value}
        result = run_rule(rule, candidate)
        for issue in result.errors:
            if issue.path == field_name:
                return issue.message
        return None
