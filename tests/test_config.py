from __future__ import annotations

import json
from pathlib import Path

import pytest

from draftwise.validation import Schema, required
from draftwise.wizard.config import (
    DEFAULT_AUTO_SAVE_INTERVAL_MS,
    ConfigError,
    PersistencePolicy,
    build_wizard_config,
    load_and_validate_wizard_config,
    load_wizard_config,
    validate_wizard_config,
)
from draftwise.wizard.steps import Step


def _config_dict() -> dict:
    return {
        "id": "blog-post",
        "type": "blog",
        "title": "New post",
        "persistence": {"auto_save": True, "auto_save_interval_ms": 5000},
        "steps": [
            {"id": "content", "title": "Content", "fields": {"title": [{"check": "required"}]}},
            {"id": "seo", "title": "SEO", "optional": True, "fields": {"slug": [{"check": "pattern", "value": "[a-z-]+"}]}},
        ],
        "final": {"fields": {"body": [{"check": "required"}]}},
    }


def test_build_rejects_empty_and_duplicate_steps() -> None:
    with pytest.raises(ConfigError):
        build_wizard_config(id="w", type="blog", steps=[])
    with pytest.raises(ConfigError, match="Duplicate step id"):
        build_wizard_config(id="w", type="blog", steps=[Step("a", "A"), Step("a", "Again")])


def test_build_rejects_rules_for_unknown_steps() -> None:
    with pytest.raises(ConfigError, match="unknown step"):
        build_wizard_config(
            id="w",
            type="blog",
            steps=[Step("a", "A")],
            step_rules={"missing": Schema({"x": [required()]})},
        )


def test_build_rejects_non_positive_interval() -> None:
    with pytest.raises(ConfigError):
        build_wizard_config(
            id="w",
            type="blog",
            steps=[Step("a", "A")],
            persistence=PersistencePolicy(auto_save=True, auto_save_interval_ms=0),
        )


def test_step_validation_is_registered_under_step_id() -> None:
    rule = Schema({"title": [required()]})
    config = build_wizard_config(id="w", type="blog", steps=[Step("a", "A", validation=rule), Step("b", "B")])
    assert config.rule_for("a") is rule
    assert config.rule_for("b") is None
    assert config.step_ids == ["a", "b"]
    assert config.persistence.auto_save_interval_ms == DEFAULT_AUTO_SAVE_INTERVAL_MS


def test_validate_wizard_config_builds_steps_and_policy() -> None:
    result = validate_wizard_config(_config_dict())
    assert result.errors == []
    config = result.config
    assert config is not None
    assert config.step_ids == ["content", "seo"]
    assert config.get_step("seo").optional is True
    assert config.persistence.auto_save is True
    assert config.persistence.auto_save_interval_ms == 5000
    assert config.validation.final_rule is not None


def test_validate_wizard_config_warns_on_unknown_type() -> None:
    raw = _config_dict()
    raw["type"] = "survey"
    result = validate_wizard_config(raw)
    assert result.config is not None
    assert any(issue.path == "type" for issue in result.warnings)


def test_validate_wizard_config_collects_errors() -> None:
    raw = _config_dict()
    raw["steps"].append({"id": "content"})
    raw["persistence"]["auto_save_interval_ms"] = -5
    result = validate_wizard_config(raw)
    assert result.config is None
    paths = {issue.path for issue in result.errors}
    assert "steps[2].id" in paths
    assert "persistence.auto_save_interval_ms" in paths


def test_load_wizard_config_reads_json(tmp_path: Path) -> None:
    path = tmp_path / "wizard.json"
    path.write_text(json.dumps(_config_dict()), encoding="utf-8")
    config = load_wizard_config(path)
    assert config.id == "blog-post"

    missing = load_and_validate_wizard_config(tmp_path / "missing.json")
    assert missing.config is None
    with pytest.raises(ConfigError):
        load_wizard_config(tmp_path / "missing.json")
