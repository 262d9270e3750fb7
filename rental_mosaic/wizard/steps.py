"""
Wizard Step Definitions and Validation

Static descriptions of wizard steps and the pure validation applied to them.
A step validates the whole accumulated value mapping, so later steps may
check fields collected earlier (e.g. a review step re-checking the rent).
"""

import re
import math
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Any, Callable, Iterable, Tuple

from dateutil.parser import isoparse
from email_validator import validate_email, EmailNotValidError
from wtforms import ValidationError

log = logging.getLogger(__name__)

# Cross-field check: accumulated values -> {field: message}
CrossFieldCheck = Callable[[Dict[str, Any]], Dict[str, str]]

# Rules that only apply to string values
TEXT_RULES = ('min_length', 'max_length', 'pattern', 'email')


def is_blank(value: Any) -> bool:
    """True for None, whitespace-only strings and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def as_date(value: Any) -> Optional[date]:
    """Coerce an ISO string, date or datetime to a date, or None if impossible."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return isoparse(value.strip()).date()
        except ValueError:
            return None
    return None


def as_number(value: Any) -> Optional[float]:
    """Coerce ints, floats and numeric strings; booleans are not numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class ValidationResult:
    """Outcome of validating one step: ``valid`` iff ``errors`` is empty."""

    __slots__ = ('errors',)

    def __init__(self, errors: Optional[Dict[str, str]] = None):
        self.errors = dict(errors or {})

    @property
    def valid(self) -> bool:
        return not self.errors

    def __eq__(self, other):
        return isinstance(other, ValidationResult) and other.errors == self.errors

    def __repr__(self):
        return f"ValidationResult(valid={self.valid}, errors={self.errors})"

    def to_dict(self) -> Dict[str, Any]:
        return {'valid': self.valid, 'errors': dict(self.errors)}


class StepDefinition:
    """
    Represents a single step in a wizard

    Each step collects a subset of fields and carries its own required-field
    list, per-field rules and cross-field checks. A step may also carry an
    intermediate stage that runs when the user leaves it.
    """

    def __init__(self,
                 name: str,
                 title: str,
                 fields: Iterable[str],
                 required_fields: Optional[Iterable[str]] = None,
                 validation_rules: Optional[Dict[str, Dict[str, Any]]] = None,
                 checks: Optional[Iterable[CrossFieldCheck]] = None,
                 description: Optional[str] = None,
                 stage: Optional['Stage'] = None):  # noqa: F821
        """
        Initialize a step definition

        Args:
            name: Unique step identifier within its wizard
            title: Display title for the step
            fields: Field names collected by this step
            required_fields: Fields that must be non-blank to proceed
            validation_rules: Per-field rules, e.g. ``{'email': {'email': True}}``
            checks: Cross-field checks run over the accumulated values
            description: Optional description text
            stage: Stage run after this step validates, before advancing
        """
        self.name = name
        self.title = title
        self.fields = tuple(fields or ())
        self.required_fields = tuple(required_fields or ())
        self.validation_rules = dict(validation_rules or {})
        self.checks = tuple(checks or ())
        self.description = description
        self.stage = stage

    def validate(self, values: Dict[str, Any]) -> ValidationResult:
        """
        Validate the accumulated wizard values against this step

        Pure: reads ``values`` only and never raises for bad input.

        Args:
            values: All values collected so far

        Returns:
            ValidationResult with at most one message per field
        """
        errors: Dict[str, str] = {}

        for field_name in self.required_fields:
            if is_blank(values.get(field_name)):
                errors[field_name] = f'{field_name} is required'

        for field_name, rules in self.validation_rules.items():
            if field_name in errors:
                continue
            value = values.get(field_name)
            if is_blank(value):
                continue
            message = _apply_rules(field_name, value, rules)
            if message:
                errors[field_name] = message

        for check in self.checks:
            for field_name, message in check(values).items():
                errors.setdefault(field_name, message)

        if errors:
            log.debug(f"Step '{self.name}' invalid: {sorted(errors)}")
        return ValidationResult(errors)

    def get_progress_percentage(self, values: Dict[str, Any]) -> float:
        """Share of this step's fields that hold a value"""
        if not self.fields:
            return 100.0

        completed_fields = sum(1 for name in self.fields if not is_blank(values.get(name)))
        return (completed_fields / len(self.fields)) * 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'title': self.title,
            'fields': list(self.fields),
            'required_fields': list(self.required_fields),
            'description': self.description,
            'stage': self.stage.name if self.stage else None,
        }


def _apply_rules(field_name: str, value: Any, rules: Dict[str, Any]) -> Optional[str]:
    """Apply per-field rules and return the first failure message"""
    if any(rule in rules for rule in TEXT_RULES) and not isinstance(value, str):
        return f'{field_name} must be text'

    if 'min_length' in rules and len(str(value)) < rules['min_length']:
        return f'{field_name} must be at least {rules["min_length"]} characters'

    if 'max_length' in rules and len(str(value)) > rules['max_length']:
        return f'{field_name} must be no more than {rules["max_length"]} characters'

    if 'pattern' in rules and not re.fullmatch(rules['pattern'], str(value).strip()):
        return f'{field_name} format is invalid'

    if 'choices' in rules:
        items = value if isinstance(value, (list, tuple, set)) else [value]
        unknown = [item for item in items if item not in rules['choices']]
        if unknown:
            return f'{field_name} has unsupported value {unknown[0]!r}'

    if 'min_value' in rules or 'max_value' in rules:
        number = as_number(value)
        if number is None:
            return f'{field_name} must be a number'
        if 'min_value' in rules and number < rules['min_value']:
            return f'{field_name} must be at least {rules["min_value"]}'
        if 'max_value' in rules and number > rules['max_value']:
            return f'{field_name} must be no more than {rules["max_value"]}'

    if rules.get('email'):
        try:
            validate_email(str(value), check_deliverability=False)
        except EmailNotValidError:
            return f'{field_name} is not a valid email address'

    if rules.get('date') or rules.get('past_date'):
        parsed = as_date(value)
        if parsed is None:
            return f'{field_name} must be a date (YYYY-MM-DD)'
        if rules.get('past_date') and parsed >= date.today():
            return f'{field_name} must be in the past'

    if 'custom' in rules and callable(rules['custom']):
        try:
            rules['custom'](value)
        except ValidationError as e:
            return str(e)

    return None


class WizardDefinition:
    """
    Static description of one wizard type

    Immutable once built; shared read-only by every instance of the wizard.
    """

    def __init__(self,
                 wizard_id: str,
                 title: str,
                 steps: List[StepDefinition],
                 stage: Optional['Stage'] = None,  # noqa: F821
                 description: str = ''):
        """
        Args:
            wizard_id: Unique wizard identifier (e.g. ``contract``)
            title: Display title
            steps: Ordered, non-empty step list with unique names
            stage: Terminal stage triggered by submitting the last step
            description: Optional description text

        Raises:
            ValueError: If steps are empty or step names repeat
        """
        if not steps:
            raise ValueError(f"Wizard '{wizard_id}' must define at least one step")

        names = [step.name for step in steps]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Wizard '{wizard_id}' has duplicate step names: {duplicates}")

        self.wizard_id = wizard_id
        self.title = title
        self.steps: Tuple[StepDefinition, ...] = tuple(steps)
        self.stage = stage
        self.description = description
        self._index = {step.name: index for index, step in enumerate(self.steps)}

    def __len__(self):
        return len(self.steps)

    def step(self, step_id: str) -> StepDefinition:
        return self.steps[self.index_of(step_id)]

    def index_of(self, step_id: str) -> int:
        try:
            return self._index[step_id]
        except KeyError:
            raise KeyError(f"Wizard '{self.wizard_id}' has no step '{step_id}'") from None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'wizard_id': self.wizard_id,
            'title': self.title,
            'description': self.description,
            'steps': [step.to_dict() for step in self.steps],
            'stage': self.stage.name if self.stage else None,
        }


class StepValidator:
    """Validates steps of one wizard definition by step id."""

    def __init__(self, definition: WizardDefinition):
        self.definition = definition

    def validate(self, step_id: str, values: Dict[str, Any]) -> ValidationResult:
        return self.definition.step(step_id).validate(values)

    __call__ = validate
