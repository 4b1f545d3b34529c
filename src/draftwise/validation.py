"""Validation primitives: issues, field checks and schema rules."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any, Callable, Mapping, Protocol, Sequence

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str
    level: str = ERROR

    @property
    def is_error(self) -> bool:
        return self.level == ERROR


@dataclass(frozen=True)
class ValidationResult:
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]

    @property
    def is_valid(self) -> bool:
        return not self.errors


class Rule(Protocol):
    def __call__(self, data: Mapping[str, Any]) -> list[ValidationIssue]:
        """Return every issue found in ``data``."""


FieldCheck = Callable[[str, Any, Mapping[str, Any]], "ValidationIssue | None"]


def run_rule(rule: Rule | None, data: Mapping[str, Any]) -> ValidationResult:
    if rule is None:
        return ValidationResult(errors=[], warnings=[])
    issues = rule(data)
    errors = [issue for issue in issues if issue.is_error]
    warnings = [issue for issue in issues if not issue.is_error]
    return ValidationResult(errors=errors, warnings=warnings)


def issues_by_path(issues: Sequence[ValidationIssue], *, prefix: str | None = None) -> dict[str, str]:
    """Collapse issues into ``{path: message}``; the first message per path wins."""
    result: dict[str, str] = {}
    for issue in issues:
        key = f"{prefix}.{issue.path}" if prefix else issue.path
        result.setdefault(key, issue.message)
    return result


@dataclass(frozen=True)
class Schema:
    """Rule made of per-field checks, evaluated in declaration order."""

    fields: Mapping[str, Sequence[FieldCheck]] = field(default_factory=dict)

    def __call__(self, data: Mapping[str, Any]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for name, checks in self.fields.items():
            value = data.get(name)
            for check in checks:
                issue = check(name, value, data)
                if issue is None:
                    continue
                issues.append(issue)
                if issue.is_error:
                    break
        return issues

    @property
    def field_names(self) -> list[str]:
        return list(self.fields.keys())


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return not value
    return False


def required(message: str = "This field is required.", *, level: str = ERROR) -> FieldCheck:
    def check(name: str, value: Any, data: Mapping[str, Any]) -> ValidationIssue | None:
        if _is_blank(value):
            return ValidationIssue(name, message, level)
        return None

    return check


def min_length(limit: int, message: str | None = None, *, level: str = ERROR) -> FieldCheck:
    text = message or f"Must be at least {limit} characters."

    def check(name: str, value: Any, data: Mapping[str, Any]) -> ValidationIssue | None:
        if value is None:
            return None
        if not isinstance(value, str) or len(value.strip()) < limit:
            return ValidationIssue(name, text, level)
        return None

    return check


def max_length(limit: int, message: str | None = None, *, level: str = ERROR) -> FieldCheck:
    text = message or f"Must be at most {limit} characters."

    def check(name: str, value: Any, data: Mapping[str, Any]) -> ValidationIssue | None:
        if value is None:
            return None
        if not isinstance(value, str) or len(value) > limit:
            return ValidationIssue(name, text, level)
        return None

    return check


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def min_value(limit: float, message: str | None = None, *, level: str = ERROR) -> FieldCheck:
    text = message or f"Must be a number >= {limit}."

    def check(name: str, value: Any, data: Mapping[str, Any]) -> ValidationIssue | None:
        if value is None:
            return None
        if not _is_number(value) or value < limit:
            return ValidationIssue(name, text, level)
        return None

    return check


def max_value(limit: float, message: str | None = None, *, level: str = ERROR) -> FieldCheck:
    text = message or f"Must be a number <= {limit}."

    def check(name: str, value: Any, data: Mapping[str, Any]) -> ValidationIssue | None:
        if value is None:
            return None
        if not _is_number(value) or value > limit:
            return ValidationIssue(name, text, level)
        return None

    return check


def one_of(choices: Sequence[Any], message: str | None = None, *, level: str = ERROR) -> FieldCheck:
    allowed = list(choices)
    text = message or f"Must be one of: {', '.join(str(choice) for choice in allowed)}."

    def check(name: str, value: Any, data: Mapping[str, Any]) -> ValidationIssue | None:
        if value is None:
            return None
        if value not in allowed:
            return ValidationIssue(name, text, level)
        return None

    return check


def pattern(regex: str, message: str = "Invalid format.", *, level: str = ERROR) -> FieldCheck:
    compiled = re.compile(regex)

    def check(name: str, value: Any, data: Mapping[str, Any]) -> ValidationIssue | None:
        if value is None:
            return None
        if not isinstance(value, str) or not compiled.fullmatch(value):
            return ValidationIssue(name, message, level)
        return None

    return check


def non_empty_list(message: str = "Add at least one item.", *, level: str = ERROR) -> FieldCheck:
    def check(name: str, value: Any, data: Mapping[str, Any]) -> ValidationIssue | None:
        if not isinstance(value, list) or not value:
            return ValidationIssue(name, message, level)
        return None

    return check


CHECK_FACTORIES: dict[str, Callable[..., FieldCheck]] = {
    "required": required,
    "min_length": min_length,
    "max_length": max_length,
    "min_value": min_value,
    "max_value": max_value,
    "one_of": one_of,
    "pattern": pattern,
    "non_empty_list": non_empty_list,
}

_VALUE_CHECKS = {"min_length", "max_length", "min_value", "max_value", "one_of", "pattern"}


def build_check(spec: Mapping[str, Any], path: str, errors: list[ValidationIssue]) -> FieldCheck | None:
    """Build a field check from its JSON form, recording problems in ``errors``."""
    name = spec.get("check")
    factory = CHECK_FACTORIES.get(name) if isinstance(name, str) else None
    if factory is None:
        errors.append(ValidationIssue(f"{path}.check", f"Unsupported check: {name!r}."))
        return None
    level = spec.get("level", ERROR)
    if level not in {ERROR, WARNING}:
        errors.append(ValidationIssue(f"{path}.level", "Level must be 'error' or 'warning'."))
        return None
    kwargs: dict[str, Any] = {"level": level}
    message = spec.get("message")
    if message is not None:
        if not isinstance(message, str) or not message.strip():
            errors.append(ValidationIssue(f"{path}.message", "Message must be a non-empty string."))
            return None
        kwargs["message"] = message
    if name not in _VALUE_CHECKS:
        return factory(**kwargs)

    value = spec.get("value")
    if name in {"min_length", "max_length"} and (not isinstance(value, int) or value < 0):
        errors.append(ValidationIssue(f"{path}.value", "Must be an integer >= 0."))
        return None
    if name in {"min_value", "max_value"} and not _is_number(value):
        errors.append(ValidationIssue(f"{path}.value", "Must be a number."))
        return None
    if name == "one_of" and (not isinstance(value, list) or not value):
        errors.append(ValidationIssue(f"{path}.value", "Must be a non-empty list."))
        return None
    if name == "pattern":
        if not isinstance(value, str):
            errors.append(ValidationIssue(f"{path}.value", "Must be a regular expression string."))
            return None
        try:
            re.compile(value)
        except re.error as exc:
            errors.append(ValidationIssue(f"{path}.value", f"Invalid regular expression: {exc}"))
            return None
    return factory(value, **kwargs)


def build_schema(spec: Any, path: str, errors: list[ValidationIssue]) -> Schema | None:
    """Build a ``Schema`` from ``{"field": [check, ...]}``."""
    if spec is None:
        return None
    if not isinstance(spec, dict):
        errors.append(ValidationIssue(path, "Fields must be an object."))
        return None
    fields: dict[str, list[FieldCheck]] = {}
    for field_name, checks in spec.items():
        field_path = f"{path}.{field_name}"
        if not isinstance(checks, list):
            errors.append(ValidationIssue(field_path, "Checks must be a list."))
            continue
        built: list[FieldCheck] = []
        for index, check_spec in enumerate(checks):
            check_path = f"{field_path}[{index}]"
            if not isinstance(check_spec, dict):
                errors.append(ValidationIssue(check_path, "Check must be an object."))
                continue
            check = build_check(check_spec, check_path, errors)
            if check is not None:
                built.append(check)
        fields[field_name] = built
    return Schema(fields=fields)
