"""
Wizard Runtime State

``WizardInstance`` is the step-state container owned by one wizard run:
current step, accumulated values, per-step errors and lifecycle status.
Only ``WizardController`` mutates it.
"""

import uuid
import logging
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional

from .steps import WizardDefinition

log = logging.getLogger(__name__)


class WizardStatus(Enum):
    """Lifecycle states of a wizard instance."""
    IN_PROGRESS = "in_progress"
    AWAITING_ASYNC = "awaiting_async"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (WizardStatus.COMPLETED, WizardStatus.ABORTED)


class WizardProgress:
    """Position of a wizard run, ``current`` being 1-based."""

    __slots__ = ('current', 'total')

    def __init__(self, current: int, total: int):
        self.current = current
        self.total = total

    @property
    def percentage(self) -> int:
        return round(self.current / self.total * 100)

    def __eq__(self, other):
        return (isinstance(other, WizardProgress)
                and (other.current, other.total) == (self.current, self.total))

    def __repr__(self):
        return f"WizardProgress({self.current}/{self.total})"

    def to_dict(self) -> Dict[str, Any]:
        return {'current': self.current, 'total': self.total, 'percentage': self.percentage}


class WizardInstance:
    """
    Runtime state of one wizard run

    Values accumulate across steps and are never dropped by navigation.
    Errors are kept per step, so returning to a step shows the messages
    it last produced.
    """

    def __init__(self, definition: WizardDefinition,
                 initial_values: Optional[Dict[str, Any]] = None,
                 instance_id: Optional[str] = None):
        self.definition = definition
        self.instance_id = instance_id or str(uuid.uuid4())
        self.values: Dict[str, Any] = dict(initial_values or {})
        self.current_step_index = 0
        self.highest_reached_index = 0
        self.status = WizardStatus.IN_PROGRESS
        self.generation = 0
        self.last_error: Optional[Dict[str, Any]] = None
        self.result: Optional[Dict[str, Any]] = None
        self.stale_results = 0
        self.created_at = datetime.utcnow()
        self.updated_at = self.created_at
        self._step_errors: Dict[str, Dict[str, str]] = {}

    @property
    def current_step(self):
        return self.definition.steps[self.current_step_index]

    @property
    def total_steps(self) -> int:
        return len(self.definition.steps)

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index == self.total_steps - 1

    @property
    def errors(self) -> Dict[str, str]:
        """Errors of the current step"""
        return dict(self._step_errors.get(self.current_step.name, {}))

    def step_errors(self, step_id: str) -> Dict[str, str]:
        return dict(self._step_errors.get(step_id, {}))

    def set_errors(self, step_id: str, errors: Dict[str, str]):
        if errors:
            self._step_errors[step_id] = dict(errors)
        else:
            self._step_errors.pop(step_id, None)
        self.touch()

    def clear_field_error(self, field_name: str):
        for step_id in list(self._step_errors):
            errors = self._step_errors[step_id]
            errors.pop(field_name, None)
            if not errors:
                del self._step_errors[step_id]

    def move_to(self, index: int):
        self.current_step_index = index
        self.highest_reached_index = max(self.highest_reached_index, index)
        self.touch()

    def touch(self):
        self.updated_at = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        step = self.current_step
        return {
            'instance_id': self.instance_id,
            'wizard_id': self.definition.wizard_id,
            'title': self.definition.title,
            'status': self.status.value,
            'current_step_index': self.current_step_index,
            'current_step': step.name,
            'current_step_title': step.title,
            'highest_reached_index': self.highest_reached_index,
            'steps': [s.name for s in self.definition.steps],
            'values': dict(self.values),
            'errors': self.errors,
            'last_error': dict(self.last_error) if self.last_error else None,
            'result': self.result,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
