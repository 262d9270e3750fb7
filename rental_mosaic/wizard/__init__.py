"""
Wizard Package

Step definitions and validation, runtime state, the controller and the
concrete mosaic wizards.
"""

from .steps import StepDefinition, WizardDefinition, ValidationResult, StepValidator
from .state import WizardInstance, WizardStatus, WizardProgress
from .controller import WizardController
from .definitions import WIZARDS, get_wizard, initial_values

__all__ = [
    'StepDefinition',
    'WizardDefinition',
    'ValidationResult',
    'StepValidator',
    'WizardInstance',
    'WizardStatus',
    'WizardProgress',
    'WizardController',
    'WIZARDS',
    'get_wizard',
    'initial_values',
]
