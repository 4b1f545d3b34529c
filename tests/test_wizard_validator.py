from __future__ import annotations

from draftwise.validation import Schema, min_length, required
from draftwise.wizard.config import build_wizard_config
from draftwise.wizard.steps import Step
from draftwise.wizard.validator import WizardValidator

from conftest import sample_config


def test_missing_rule_never_blocks() -> None:
    config = sample_config()
    assert WizardValidator.can_proceed_from_step("details", {}, config)
    assert WizardValidator.can_proceed_from_step("unknown", {}, config)
    assert not WizardValidator.can_proceed_from_step("basic", {}, config)


def test_step_errors_are_keyed_by_bare_field() -> None:
    config = sample_config()
    assert WizardValidator.get_step_errors("basic", {}, config) == {"title": "This field is required."}
    assert WizardValidator.get_step_errors("basic", {"title": "Loft"}, config) == {}


def test_validate_all_steps_prefixes_step_and_final_keys() -> None:
    config = build_wizard_config(
        id="w",
        type="land",
        steps=[Step("basic", "Basics", validation=Schema({"title": [required()]})), Step("map", "Map")],
        final_rule=Schema({"area": [required()]}),
    )
    result = WizardValidator.validate_all_steps({}, config)
    assert not result.is_valid
    assert result.errors == {"basic.title": "This field is required.", "final.area": "This field is required."}
    assert WizardValidator.can_complete({"title": "Plot", "area": 40}, config)


def test_optional_steps_report_warnings_only() -> None:
    config = build_wizard_config(
        id="w",
        type="blog",
        steps=[Step("seo", "SEO", validation=Schema({"slug": [required()]}), optional=True)],
    )
    assert WizardValidator.can_proceed_from_step("seo", {}, config)
    result = WizardValidator.validate_all_steps({}, config)
    assert result.is_valid
    assert result.warnings == {"seo.slug": "This field is required."}


def test_validate_field_checks_candidate_value() -> None:
    config = build_wizard_config(
        id="w",
        type="blog",
        steps=[Step("content", "Content", validation=Schema({"title": [required(), min_length(3)]}))],
    )
    assert WizardValidator.validate_field("content", "title", "ab", {}, config) == "Must be at least 3 characters."
    assert WizardValidator.validate_field("content", "title", "abc", {}, config) is None
    assert WizardValidator.validate_field("other", "title", "", {}, config) is None
