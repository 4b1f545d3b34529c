"""Wizard package."""

from draftwise.wizard.config import (
    ConfigError,
    PersistencePolicy,
    ValidationRules,
    WizardConfig,
    WizardConfiguration,
    build_wizard_config,
    load_wizard_config,
)
from draftwise.wizard.engine import WizardEngine, create_wizard
from draftwise.wizard.keyboard import KeyboardNavigation, KeyPress
from draftwise.wizard.state import WizardSessionState
from draftwise.wizard.steps import Step, StepDescriptor
from draftwise.wizard.validator import WizardValidation, WizardValidator

__all__ = [
    "ConfigError",
    "KeyPress",
    "KeyboardNavigation",
    "PersistencePolicy",
    "Step",
    "StepDescriptor",
    "ValidationRules",
    "WizardConfig",
    "WizardConfiguration",
    "WizardEngine",
    "WizardSessionState",
    "WizardValidation",
    "WizardValidator",
    "build_wizard_config",
    "create_wizard",
    "load_wizard_config",
]
